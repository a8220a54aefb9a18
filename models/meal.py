from sqlalchemy import Column, String, Text, ForeignKey
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class MealIngredient(Base):
    """Association object: an ingredient used in a meal, with its amount."""
    __tablename__ = "meal_ingredients"

    meal_id = Column(String(36), ForeignKey("meals.id", ondelete="CASCADE"), primary_key=True)
    ingredient_id = Column(String(36), ForeignKey("ingredients.id", ondelete="CASCADE"), primary_key=True)
    amount = Column(String(100), nullable=False)

    ingredient = relationship("Ingredient", lazy="joined")
    meal = relationship("Meal", back_populates="ingredients")


class Meal(BaseModel, Base):
    __tablename__ = "meals"

    name = Column(String(100), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    cuisine = Column(String(20), nullable=True)
    cooking_instructions = Column(Text, nullable=False)

    ingredients = relationship(
        "MealIngredient",
        back_populates="meal",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    reviews = relationship(
        "MealReview",
        back_populates="meal",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
