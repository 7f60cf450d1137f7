from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from petfood_catalog.database import Base


class ProductModel(Base):
    """Product line: the parent grouping of variants under one brand"""
    __tablename__ = "product_models"

    id = Column(Integer, primary_key=True, index=True)
    brand_id = Column(Integer, ForeignKey("brands.id"), nullable=False, index=True)
    name = Column(String(300), nullable=False, index=True)
    species = Column(String(50), default="dog")  # dog, cat
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    brand = relationship("Brand", back_populates="product_models")
    variants = relationship("ProductVariant", back_populates="product_model", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<ProductModel(id={self.id}, brand_id={self.brand_id}, name='{self.name}')>"
