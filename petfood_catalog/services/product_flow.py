"""Product entry workflow: brand/product check, identifier check, review and create"""
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.exc import SQLAlchemyError
from typing import Any, Dict, List, Optional, Union
from petfood_catalog.schemas import (
    DuplicateCheckRequest,
    IdentifierConflict,
    IdentifierRef,
    IngredientProcessingResult,
    VariantIngredientText,
)
from petfood_catalog.schemas.base_schema import CamelModel
from petfood_catalog.services.catalog_store import CatalogStore
from petfood_catalog.services.disposition import DispositionState, DuplicateReview, InvalidTransition
from petfood_catalog.services.duplicate_resolver import DuplicateResolver
from petfood_catalog.services.ingredient_processor import IngredientProcessor
import logging

logger = logging.getLogger(__name__)


class VariantDraft(CamelModel):
    name: Optional[str] = None
    ingredient_text: Optional[str] = None
    identifiers: List[IdentifierRef] = Field(default_factory=list)


class WorkflowContext(BaseModel):
    """
    Everything the entry steps share. Steps never mutate it; they return a
    patch dict and the caller builds the next context with apply().
    """
    model_config = ConfigDict(frozen=True)

    brand_name: str = ""
    product_line_name: str = ""
    species: Optional[str] = None
    variants: List[VariantDraft] = Field(default_factory=list)

    duplicate_review: DuplicateReview = Field(default_factory=DuplicateReview)
    identifier_conflicts: List[IdentifierConflict] = Field(default_factory=list)

    created_product_id: Optional[Union[int, str]] = None
    created_variant_ids: List[Union[int, str]] = Field(default_factory=list)
    ingredient_result: Optional[IngredientProcessingResult] = None

    def apply(self, patch: Dict[str, Any]) -> "WorkflowContext":
        return self.model_copy(update=patch)

    def all_identifiers(self) -> List[IdentifierRef]:
        return [ref for variant in self.variants for ref in variant.identifiers]


def brand_product_step(ctx: WorkflowContext, resolver: DuplicateResolver) -> Dict[str, Any]:
    """Check the entered brand/product line for duplicates; always starts a fresh review"""
    review = DuplicateReview().start_check()
    response = resolver.check(DuplicateCheckRequest(
        brand_name=ctx.brand_name,
        product_line_name=ctx.product_line_name,
        identifiers=ctx.all_identifiers()
    ))
    return {"duplicate_review": review.complete_check(response.matches, response.error)}


def identifiers_step(ctx: WorkflowContext, resolver: DuplicateResolver) -> Dict[str, Any]:
    return {"identifier_conflicts": resolver.check_identifiers(ctx.all_identifiers())}


def review_create_step(ctx: WorkflowContext, store: CatalogStore, processor: IngredientProcessor) -> Dict[str, Any]:
    """
    Create the reviewed product and its variants, then link each variant's ingredients.
    CONFIRM_NEW creates brand (reused by exact name) and product line;
    USE_EXISTING adds the variants to the selected product line.
    """
    review = ctx.duplicate_review
    if not review.is_terminal:
        raise InvalidTransition(f"Duplicate review is still '{review.state.value}'")

    try:
        if review.state == DispositionState.CONFIRM_NEW:
            brand = store.find_or_create_brand(ctx.brand_name)
            model_id = store.create_product_model(brand.id, ctx.product_line_name, ctx.species).id
        else:
            model_id = review.selected_product_id

        created = []
        for draft in ctx.variants:
            variant = store.create_variant(model_id, draft.name, draft.ingredient_text)
            if draft.identifiers:
                store.insert_identifiers([
                    {
                        "product_variant_id": variant.id,
                        "identifier_type": ref.type,
                        "identifier_value": ref.value,
                        "is_primary": ref.is_primary,
                        "is_active": True
                    }
                    for ref in draft.identifiers
                ])
            created.append(VariantIngredientText(id=variant.id, ingredient_text=draft.ingredient_text))

        store.commit()
    except SQLAlchemyError:
        store.rollback()
        logger.exception(f"Failed to create product '{ctx.product_line_name}'")
        raise

    logger.info(f"Created {len(created)} variant(s) under product {model_id}")
    ingredient_result = processor.process_multiple_variants(created)

    return {
        "created_product_id": model_id,
        "created_variant_ids": [v.id for v in created],
        "ingredient_result": ingredient_result
    }
