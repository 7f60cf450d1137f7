"""Backfill ingredient links for variants created before ingredient processing existed"""
from sqlalchemy.exc import SQLAlchemyError
from petfood_catalog.schemas import BackfillResult, ProcessingStats
from petfood_catalog.services.catalog_store import CatalogStore
from petfood_catalog.services.ingredient_processor import IngredientProcessor
import logging

logger = logging.getLogger(__name__)


class IngredientBackfill:
    """Catalog-wide ingredient processing and status counters"""

    def __init__(self, store: CatalogStore, processor: IngredientProcessor = None):
        self.store = store
        self.processor = processor or IngredientProcessor(store)

    def backfill_all_variants(self) -> BackfillResult:
        """
        Process every variant that has ingredient text but no ingredient links.
        Variants are handled one at a time; a failing variant is recorded and
        the rest still run. Failing to fetch the variant list aborts.
        """
        result = BackfillResult()

        try:
            try:
                variants = self.store.find_variants_needing_ingredients()
            except SQLAlchemyError as e:
                self.store.rollback()
                result.errors.append(f"Error fetching variants: {e}")
                return result

            if not variants:
                logger.info("No variants found with ingredient text")
                return result

            # Detach the work list from the session before per-variant commits expire it
            work = [(variant.id, variant.ingredient_list_text) for variant in variants]
            logger.info(f"Found {len(work)} variants needing ingredient processing")

            for variant_id, ingredient_text in work:
                try:
                    variant_result = self.processor.process_variant_ingredients(variant_id, ingredient_text)
                except Exception as e:
                    logger.exception(f"Error processing variant {variant_id}")
                    result.errors.append(f"Error processing variant {variant_id}: {e}")
                    continue

                result.processed += 1
                result.ingredients_created += variant_result.ingredients_created
                result.ingredients_linked += variant_result.ingredients_linked
                result.errors.extend(variant_result.errors)

                if variant_result.success:
                    logger.info(f"Processed ingredients for variant {variant_id}")
                else:
                    logger.warning(f"Failed to process ingredients for variant {variant_id}: {variant_result.errors}")

        except Exception as e:
            logger.exception("Unexpected error during ingredient backfill")
            result.errors.append(f"Unexpected error: {e}")

        return result

    def get_processing_stats(self) -> ProcessingStats:
        """Best-effort counters; all zeros if anything fails"""
        try:
            return ProcessingStats(
                total_variants=self.store.count_variants(),
                variants_with_ingredient_text=self.store.count_variants_with_ingredient_text(),
                variants_with_ingredient_analysis=self.store.count_variants_with_ingredient_analysis(),
                total_ingredients=self.store.count_ingredients(),
                total_ingredient_relationships=self.store.count_variant_links()
            )
        except Exception:
            logger.exception("Error getting processing stats")
            return ProcessingStats()
