"""Catalog store: every query and write the core services make against the database"""
from sqlalchemy import func, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload, selectinload
from typing import Dict, Iterable, List, Optional
from petfood_catalog.models import (
    Brand,
    ProductModel,
    ProductVariant,
    ProductIdentifier,
    Ingredient,
    VariantIngredientAnalysis,
)


class CatalogStore:
    """
    Thin query/insert layer over a SQLAlchemy session.
    Methods flush but never commit; callers own the transaction.
    Failures surface as sqlalchemy.exc.SQLAlchemyError.
    """

    def __init__(self, db: Session, timeout_seconds: Optional[float] = None):
        self.db = db
        self.timeout_seconds = timeout_seconds

    def _apply_timeout(self):
        """Bound the next statements by the configured timeout (PostgreSQL only)"""
        if not self.timeout_seconds:
            return
        if self.db.get_bind().dialect.name != "postgresql":
            return
        # SET does not take bind parameters; the value is a computed integer
        self.db.execute(text(f"SET LOCAL statement_timeout = {int(self.timeout_seconds * 1000)}"))

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()

    # Product models

    def _product_model_query(self):
        return self.db.query(ProductModel).options(
            joinedload(ProductModel.brand),
            selectinload(ProductModel.variants).selectinload(ProductVariant.identifiers),
        )

    def find_models_by_brand_and_name(self, brand_name: str, name_fragment: str, same_brand: bool = True) -> List[ProductModel]:
        """
        Product models whose name contains name_fragment (case-insensitive),
        restricted to brand_name (same_brand=True) or to every other brand.
        """
        self._apply_timeout()
        brand_filter = Brand.name == brand_name if same_brand else Brand.name != brand_name
        return (
            self._product_model_query()
            .join(Brand, ProductModel.brand_id == Brand.id)
            .filter(brand_filter)
            .filter(ProductModel.name.icontains(name_fragment, autoescape=True))
            .order_by(ProductModel.id)
            .all()
        )

    def find_all_models(self) -> List[ProductModel]:
        self._apply_timeout()
        return self._product_model_query().order_by(ProductModel.id).all()

    def get_model(self, model_id) -> Optional[ProductModel]:
        self._apply_timeout()
        return self._product_model_query().filter(ProductModel.id == model_id).first()

    # Identifiers

    def find_active_identifiers(self, identifier_type: str, identifier_value: str) -> List[ProductIdentifier]:
        """
        Active identifier rows matching (type, value), with variant, model and brand loaded.
        The type compares case-insensitively; stored rows may hold "upc" or "UPC".
        """
        self._apply_timeout()
        return (
            self.db.query(ProductIdentifier)
            .options(
                joinedload(ProductIdentifier.variant)
                .joinedload(ProductVariant.product_model)
                .joinedload(ProductModel.brand)
            )
            .filter(
                func.upper(ProductIdentifier.identifier_type) == identifier_type.upper(),
                ProductIdentifier.identifier_value == identifier_value,
                ProductIdentifier.is_active.is_(True),
            )
            .order_by(ProductIdentifier.id)
            .all()
        )

    # Ingredient dictionary

    def find_ingredients_by_normalized_names(self, normalized_names: Iterable[str]) -> List[Ingredient]:
        names = list(set(normalized_names))
        if not names:
            return []
        self._apply_timeout()
        return self.db.query(Ingredient).filter(Ingredient.normalized_name.in_(names)).all()

    def insert_ingredients(self, rows: List[Dict]) -> List[Ingredient]:
        """Batch insert dictionary entries; returns them with store-assigned ids"""
        self._apply_timeout()
        ingredients = [Ingredient(**row) for row in rows]
        self.db.add_all(ingredients)
        self.db.flush()
        return ingredients

    def insert_ingredient_in_savepoint(self, row: Dict) -> Optional[Ingredient]:
        """Insert one entry inside a savepoint; None when its normalized name already exists"""
        self._apply_timeout()
        ingredient = Ingredient(**row)
        try:
            with self.db.begin_nested():
                self.db.add(ingredient)
        except IntegrityError:
            return None
        return ingredient

    # Variant ingredient links

    def delete_variant_links(self, variant_id) -> int:
        self._apply_timeout()
        deleted = (
            self.db.query(VariantIngredientAnalysis)
            .filter(VariantIngredientAnalysis.variant_id == variant_id)
            .delete(synchronize_session=False)
        )
        self.db.flush()
        return deleted

    def insert_variant_links(self, rows: List[Dict]) -> List[VariantIngredientAnalysis]:
        self._apply_timeout()
        links = [VariantIngredientAnalysis(**row) for row in rows]
        self.db.add_all(links)
        self.db.flush()
        return links

    # Variants

    def find_variants_needing_ingredients(self) -> List[ProductVariant]:
        """Variants with ingredient text but no ingredient links yet"""
        self._apply_timeout()
        return (
            self.db.query(ProductVariant)
            .filter(
                ProductVariant.ingredient_list_text.isnot(None),
                ProductVariant.ingredient_list_text != "",
                ~ProductVariant.ingredient_analysis.any(),
            )
            .order_by(ProductVariant.id)
            .all()
        )

    def count_variants(self) -> int:
        self._apply_timeout()
        return self.db.query(func.count(ProductVariant.id)).scalar() or 0

    def count_variants_with_ingredient_text(self) -> int:
        self._apply_timeout()
        return (
            self.db.query(func.count(ProductVariant.id))
            .filter(
                ProductVariant.ingredient_list_text.isnot(None),
                ProductVariant.ingredient_list_text != "",
            )
            .scalar()
        ) or 0

    def count_variants_with_ingredient_analysis(self) -> int:
        self._apply_timeout()
        return self.db.query(func.count(func.distinct(VariantIngredientAnalysis.variant_id))).scalar() or 0

    def count_ingredients(self) -> int:
        self._apply_timeout()
        return self.db.query(func.count(Ingredient.id)).scalar() or 0

    def count_variant_links(self) -> int:
        self._apply_timeout()
        return self.db.query(func.count(VariantIngredientAnalysis.id)).scalar() or 0

    # Product creation used by the review/create step

    def find_or_create_brand(self, name: str) -> Brand:
        self._apply_timeout()
        brand = self.db.query(Brand).filter(Brand.name == name).first()
        if brand is None:
            brand = Brand(name=name)
            self.db.add(brand)
            self.db.flush()
        return brand

    def create_product_model(self, brand_id, name: str, species: Optional[str] = None) -> ProductModel:
        self._apply_timeout()
        model = ProductModel(brand_id=brand_id, name=name, species=species or "dog")
        self.db.add(model)
        self.db.flush()
        return model

    def create_variant(self, model_id, name: Optional[str], ingredient_list_text: Optional[str]) -> ProductVariant:
        self._apply_timeout()
        variant = ProductVariant(model_id=model_id, name=name, ingredient_list_text=ingredient_list_text)
        self.db.add(variant)
        self.db.flush()
        return variant

    def insert_identifiers(self, rows: List[Dict]) -> List[ProductIdentifier]:
        self._apply_timeout()
        identifiers = [ProductIdentifier(**row) for row in rows]
        self.db.add_all(identifiers)
        self.db.flush()
        return identifiers
