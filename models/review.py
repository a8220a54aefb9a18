from sqlalchemy import Column, String, Integer, ForeignKey, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class CocktailReview(BaseModel, Base):
    __tablename__ = "cocktail_reviews"

    cocktail_id = Column(String(36), ForeignKey("cocktails.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    rating = Column(Integer, nullable=False)
    review = Column(String(2000), nullable=False)

    cocktail = relationship("Cocktail", back_populates="reviews")
    user = relationship("User")

    __table_args__ = (
        UniqueConstraint("cocktail_id", "user_id", name="uq_cocktail_reviews_cocktail_user"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_cocktail_reviews_rating_range"),
    )


class MealReview(BaseModel, Base):
    __tablename__ = "meal_reviews"

    meal_id = Column(String(36), ForeignKey("meals.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    rating = Column(Integer, nullable=False)
    review = Column(String(2000), nullable=False)

    meal = relationship("Meal", back_populates="reviews")
    user = relationship("User")

    __table_args__ = (
        UniqueConstraint("meal_id", "user_id", name="uq_meal_reviews_meal_user"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_meal_reviews_rating_range"),
    )
