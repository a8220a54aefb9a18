from sqlalchemy import Column, String, Text

from models.base_model import BaseModel, Base


class Ingredient(BaseModel, Base):
    __tablename__ = "ingredients"

    type = Column(String(150), nullable=False)
    name = Column(String(150), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
