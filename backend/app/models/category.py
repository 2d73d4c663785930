"""Category ORM model."""
from sqlalchemy import Column, Index, Integer, String, func
from sqlalchemy.orm import relationship
from app.database import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)

    # deleting a category detaches its events (category_id -> NULL)
    events = relationship("Event", back_populates="category")

    __table_args__ = (Index("uq_categories_name_lower", func.lower(name), unique=True),)
