"""Celery background tasks for ingredient processing"""
from celery import Celery
from petfood_catalog.config import get_settings
from petfood_catalog.database import SessionLocal
from petfood_catalog.services.catalog_store import CatalogStore
from petfood_catalog.services.ingredient_backfill import IngredientBackfill
from petfood_catalog.services.ingredient_processor import IngredientProcessor
import logging

logger = logging.getLogger(__name__)

settings = get_settings()

# Initialize Celery
celery_app = Celery(
    "petfood_catalog_tasks",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend
)

celery_app.conf.task_routes = {
    "petfood_catalog.tasks.celery_tasks.*": {"queue": "catalog"}
}


@celery_app.task(name="backfill_ingredients_task")
def backfill_ingredients_task():
    """
    Background backfill over the whole catalog:
    every variant with ingredient text and no ingredient links, one at a time.
    """
    db = SessionLocal()

    try:
        store = CatalogStore(db, timeout_seconds=settings.store_timeout_seconds)
        result = IngredientBackfill(store).backfill_all_variants()
        logger.info(
            f"Ingredient backfill finished: {result.processed} variants, "
            f"{result.ingredients_created} created, {result.ingredients_linked} linked, "
            f"{len(result.errors)} errors"
        )
        return result.model_dump(by_alias=True)

    finally:
        db.close()


@celery_app.task(name="process_variant_ingredients_task")
def process_variant_ingredients_task(variant_id: int, ingredient_text: str):
    """Background ingredient processing for a single variant"""
    db = SessionLocal()

    try:
        store = CatalogStore(db, timeout_seconds=settings.store_timeout_seconds)
        result = IngredientProcessor(store).process_variant_ingredients(variant_id, ingredient_text)
        return result.model_dump(by_alias=True)

    finally:
        db.close()
