from petfood_catalog.models.brand import Brand
from petfood_catalog.models.product_model import ProductModel
from petfood_catalog.models.product_variant import ProductVariant
from petfood_catalog.models.product_identifier import ProductIdentifier
from petfood_catalog.models.ingredient import Ingredient
from petfood_catalog.models.variant_ingredient_analysis import VariantIngredientAnalysis

__all__ = [
    "Brand",
    "ProductModel",
    "ProductVariant",
    "ProductIdentifier",
    "Ingredient",
    "VariantIngredientAnalysis",
]
