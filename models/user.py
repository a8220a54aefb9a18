from models.base_model import Base, BaseModel
from sqlalchemy import Column, String, Table, ForeignKey
from sqlalchemy.orm import relationship

# Bookmarks: users can save cocktails and meals
user_saved_cocktails = Table(
    "user_saved_cocktails",
    Base.metadata,
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("cocktail_id", String(36), ForeignKey("cocktails.id", ondelete="CASCADE"), primary_key=True),
)

user_saved_meals = Table(
    "user_saved_meals",
    Base.metadata,
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("meal_id", String(36), ForeignKey("meals.id", ondelete="CASCADE"), primary_key=True),
)


class User(BaseModel, Base):
    __tablename__ = "users"
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    location = Column(String(255), nullable=True)
    photo = Column(String(1024), nullable=True)

    saved_cocktails = relationship("Cocktail", secondary=user_saved_cocktails)
    saved_meals = relationship("Meal", secondary=user_saved_meals)
    refresh_tokens = relationship(
        "UserRefreshToken",
        back_populates="principal",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")
