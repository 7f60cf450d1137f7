from sqlalchemy import Column, Integer, String, DateTime, Boolean, JSON
from sqlalchemy.dialects.postgresql import JSONB
from datetime import datetime
from petfood_catalog.database import Base


class Ingredient(Base):
    """Ingredient dictionary entry, keyed by its normalized name"""
    __tablename__ = "ingredients"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)  # Display text as first seen
    normalized_name = Column(String(200), nullable=False, unique=True, index=True)
    is_toxic = Column(Boolean, default=False)
    is_controversial = Column(Boolean, default=False)
    tags = Column(JSON().with_variant(JSONB, "postgresql"), default=list)
    created_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<Ingredient(id={self.id}, name='{self.name}')>"
