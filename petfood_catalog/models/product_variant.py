from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from datetime import datetime
from petfood_catalog.database import Base


class ProductVariant(Base):
    """A sellable size/flavor configuration of a product line"""
    __tablename__ = "product_variants"

    id = Column(Integer, primary_key=True, index=True)
    model_id = Column(Integer, ForeignKey("product_models.id"), nullable=False, index=True)
    name = Column(String(300))
    ingredient_list_text = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    product_model = relationship("ProductModel", back_populates="variants")
    identifiers = relationship("ProductIdentifier", back_populates="variant", cascade="all, delete-orphan")
    ingredient_analysis = relationship(
        "VariantIngredientAnalysis",
        back_populates="variant",
        cascade="all, delete-orphan",
        order_by="VariantIngredientAnalysis.position_in_list"
    )

    def __repr__(self):
        return f"<ProductVariant(id={self.id}, model_id={self.model_id}, name='{self.name}')>"
