"""Ingredient parsing, linking and backfill endpoints"""
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List, Union
from petfood_catalog.api.dependencies import get_store
from petfood_catalog.schemas import (
    BackfillQueuedResponse,
    BackfillResult,
    BatchIngredientsRequest,
    IngredientProcessingResult,
    ParsedIngredient,
    ParseRequest,
    ProcessingStats,
    VariantIngredientsRequest,
)
from petfood_catalog.services.catalog_store import CatalogStore
from petfood_catalog.services.ingredient_backfill import IngredientBackfill
from petfood_catalog.services.ingredient_processor import IngredientProcessor, parse_ingredient_list
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/ingredients/parse", response_model=List[ParsedIngredient])
def parse_ingredients(request: ParseRequest):
    """Preview how an ingredient list will be split, without touching the catalog"""
    return parse_ingredient_list(request.text)


@router.post("/variants/{variant_id}/ingredients", response_model=IngredientProcessingResult)
def process_variant_ingredients(
    variant_id: int,
    request: VariantIngredientsRequest,
    store: CatalogStore = Depends(get_store)
):
    """Parse a variant's ingredient text and rebuild its ingredient links"""
    return IngredientProcessor(store).process_variant_ingredients(variant_id, request.ingredient_text)


@router.post("/ingredients/batch", response_model=IngredientProcessingResult)
def process_multiple_variants(request: BatchIngredientsRequest, store: CatalogStore = Depends(get_store)):
    """Process several variants sequentially and return the combined result"""
    return IngredientProcessor(store).process_multiple_variants(request.variants)


@router.post("/ingredients/backfill", response_model=Union[BackfillQueuedResponse, BackfillResult])
def backfill_ingredients(
    background: bool = Query(default=False),
    store: CatalogStore = Depends(get_store)
):
    """
    Link ingredients for every variant that has text but no links.
    With background=true the work is queued on Celery and the task id returned.
    """
    if background:
        from petfood_catalog.tasks.celery_tasks import backfill_ingredients_task

        try:
            task = backfill_ingredients_task.delay()
        except Exception as e:
            logger.error(f"Could not queue ingredient backfill: {e}")
            raise HTTPException(status_code=503, detail=f"Could not queue backfill: {e}")
        return BackfillQueuedResponse(task_id=task.id, status="queued")

    return IngredientBackfill(store).backfill_all_variants()


@router.get("/ingredients/stats", response_model=ProcessingStats)
def get_processing_stats(store: CatalogStore = Depends(get_store)):
    return IngredientBackfill(store).get_processing_stats()
