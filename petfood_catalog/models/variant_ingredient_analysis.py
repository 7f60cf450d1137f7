from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Boolean, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from petfood_catalog.database import Base


class VariantIngredientAnalysis(Base):
    """Position-ordered link between a variant and an ingredient"""
    __tablename__ = "variant_ingredient_analysis"
    __table_args__ = (
        UniqueConstraint("variant_id", "position_in_list", name="uq_variant_ingredient_position"),
    )

    id = Column(Integer, primary_key=True, index=True)
    variant_id = Column(Integer, ForeignKey("product_variants.id"), nullable=False, index=True)
    ingredient_id = Column(Integer, ForeignKey("ingredients.id"), nullable=False, index=True)
    ingredient_name = Column(String(200), nullable=False)  # Snapshot at link time, not kept in sync
    position_in_list = Column(Integer, nullable=False)
    amount_percent = Column(Float)
    is_primary_ingredient = Column(Boolean, default=False)
    analysis_notes = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    variant = relationship("ProductVariant", back_populates="ingredient_analysis")
    ingredient = relationship("Ingredient")

    def __repr__(self):
        return f"<VariantIngredientAnalysis(variant_id={self.variant_id}, position={self.position_in_list}, ingredient='{self.ingredient_name}')>"
