from sqlalchemy import Column, String, Text, ForeignKey
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class CocktailIngredient(Base):
    """Association object: an ingredient used in a cocktail, with its amount."""
    __tablename__ = "cocktail_ingredients"

    cocktail_id = Column(String(36), ForeignKey("cocktails.id", ondelete="CASCADE"), primary_key=True)
    ingredient_id = Column(String(36), ForeignKey("ingredients.id", ondelete="CASCADE"), primary_key=True)
    amount = Column(String(100), nullable=False)

    ingredient = relationship("Ingredient", lazy="joined")
    cocktail = relationship("Cocktail", back_populates="ingredients")


class Cocktail(BaseModel, Base):
    __tablename__ = "cocktails"

    name = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=True)
    method = Column(Text, nullable=False)
    notes_on_ingredients = Column(Text, nullable=True)
    notes_on_execution = Column(Text, nullable=True)
    notes_on_taste = Column(Text, nullable=True)

    ingredients = relationship(
        "CocktailIngredient",
        back_populates="cocktail",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    reviews = relationship(
        "CocktailReview",
        back_populates="cocktail",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
