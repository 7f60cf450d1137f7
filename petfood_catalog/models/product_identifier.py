from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean, Index
from sqlalchemy.orm import relationship
from datetime import datetime
from petfood_catalog.database import Base


class ProductIdentifier(Base):
    """UPC/EAN/ASIN/SKU code attached to a variant"""
    __tablename__ = "product_identifiers"
    __table_args__ = (
        Index("idx_product_identifiers_value_type", "identifier_value", "identifier_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    product_variant_id = Column(Integer, ForeignKey("product_variants.id"), nullable=False, index=True)
    identifier_type = Column(String(20), nullable=False)  # UPC, EAN, ASIN, SKU
    identifier_value = Column(String(100), nullable=False)
    is_primary = Column(Boolean, default=False)
    is_active = Column(Boolean, default=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    variant = relationship("ProductVariant", back_populates="identifiers")

    def __repr__(self):
        return f"<ProductIdentifier(variant_id={self.product_variant_id}, {self.identifier_type}='{self.identifier_value}')>"
