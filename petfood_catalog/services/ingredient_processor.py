"""Ingredient list parsing and variant-ingredient linking"""
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from typing import Dict, List, Optional, Tuple
from petfood_catalog.config import get_settings
from petfood_catalog.schemas import IngredientProcessingResult, ParsedIngredient, VariantIngredientText
from petfood_catalog.services.catalog_store import CatalogStore
from petfood_catalog.services.normalizer import CatalogNormalizer
import logging
import re

logger = logging.getLogger(__name__)

SEPARATOR_PATTERN = re.compile(r'[,;]')
PERCENTAGE_PATTERN = re.compile(r'(\d+(?:\.\d+)?)\s*%')


def extract_percentage(ingredient: str) -> Optional[float]:
    """First inline "NN%" / "NN.N %" value in the token, if any"""
    match = PERCENTAGE_PATTERN.search(ingredient)
    return float(match.group(1)) if match else None


def parse_ingredient_list(ingredient_text: Optional[str], primary_count: Optional[int] = None) -> List[ParsedIngredient]:
    """
    Split a free-text ingredient list on commas and semicolons.

    Tokens are trimmed and empty ones dropped; positions run 1..n in input
    order. The name keeps the full token, percentage included. The first
    primary_count ingredients (5 by default) are primary.
    """
    if not ingredient_text or not ingredient_text.strip():
        return []

    if primary_count is None:
        primary_count = get_settings().primary_ingredient_count

    tokens = [token.strip() for token in SEPARATOR_PATTERN.split(ingredient_text)]
    tokens = [token for token in tokens if token]

    return [
        ParsedIngredient(
            name=token,
            position=index + 1,
            percentage=extract_percentage(token),
            is_primary=index + 1 <= primary_count
        )
        for index, token in enumerate(tokens)
    ]


class IngredientProcessor:
    """Turns ingredient text into dictionary entries and position-ordered variant links"""

    def __init__(self, store: CatalogStore, settings=None):
        self.store = store
        self.settings = settings or get_settings()

    def _lookup_existing(self, normalized_names) -> Dict[str, object]:
        existing = self.store.find_ingredients_by_normalized_names(normalized_names)
        return {ingredient.normalized_name: ingredient for ingredient in existing}

    def _create_missing(self, missing: Dict[str, str]) -> Tuple[Dict[str, object], int]:
        """
        Insert dictionary entries for names not found by the lookup.

        Returns (entries by normalized name, number created).

        Another writer may create the same name between our lookup and insert,
        and the unique normalized_name constraint then rejects the batch. On
        conflict the batch is rolled back and each row is retried in its own
        savepoint; a row that conflicts again is re-read, so the other
        writer's entry is reused.
        """
        rows = [
            {
                "name": display_name,
                "normalized_name": key,
                "is_toxic": False,
                "is_controversial": False,
                "tags": []
            }
            for key, display_name in missing.items()
        ]
        try:
            created = self.store.insert_ingredients(rows)
            return {ingredient.normalized_name: ingredient for ingredient in created}, len(created)
        except IntegrityError:
            logger.warning("Ingredient name conflict while creating entries, retrying one at a time")
            self.store.rollback()

        resolved = {}
        created_count = 0
        for row in rows:
            key = row["normalized_name"]
            ingredient = self.store.insert_ingredient_in_savepoint(row)
            if ingredient is None:
                ingredient = self._lookup_existing([key]).get(key)
            else:
                created_count += 1
            if ingredient is not None:
                resolved[key] = ingredient
        return resolved, created_count

    def process_variant_ingredients(self, variant_id, ingredient_text: Optional[str]) -> IngredientProcessingResult:
        """
        Parse ingredient_text and (re)build the variant's ingredient links.

        Empty text is a no-op success. A store failure while looking up,
        creating or linking aborts this variant with success=False. Names that
        cannot be resolved are reported per item and left unlinked.
        """
        result = IngredientProcessingResult()

        try:
            parsed = parse_ingredient_list(ingredient_text, self.settings.primary_ingredient_count)
            if not parsed:
                return result

            keys = [CatalogNormalizer.normalize_ingredient_name(p.name) for p in parsed]

            try:
                known = self._lookup_existing(keys)
            except SQLAlchemyError as e:
                self.store.rollback()
                result.errors.append(f"Error searching ingredients: {e}")
                result.success = False
                return result

            # First spelling wins when the same ingredient repeats in one list
            missing = {}
            for key, item in zip(keys, parsed):
                if key not in known and key not in missing:
                    missing[key] = CatalogNormalizer.clean_text(item.name)

            if missing:
                try:
                    resolved, created_count = self._create_missing(missing)
                except SQLAlchemyError as e:
                    self.store.rollback()
                    result.errors.append(f"Error creating ingredients: {e}")
                    result.success = False
                    return result
                result.ingredients_created = created_count
                known.update(resolved)

            links = []
            for key, item in zip(keys, parsed):
                ingredient = known.get(key)
                if ingredient is None:
                    result.errors.append(f"Ingredient not found: {item.name}")
                    continue
                links.append({
                    "variant_id": variant_id,
                    "ingredient_id": ingredient.id,
                    "ingredient_name": item.name,
                    "position_in_list": item.position,
                    "amount_percent": item.percentage,
                    "is_primary_ingredient": item.is_primary,
                    "analysis_notes": None
                })

            try:
                self.store.delete_variant_links(variant_id)
                if links:
                    self.store.insert_variant_links(links)
                self.store.commit()
            except SQLAlchemyError as e:
                self.store.rollback()
                result.ingredients_created = 0
                result.errors.append(f"Error linking ingredients: {e}")
                result.success = False
                return result

            result.ingredients_linked = len(links)

        except Exception as e:
            logger.exception(f"Unexpected error processing ingredients for variant {variant_id}")
            try:
                self.store.rollback()
            except SQLAlchemyError:
                logger.exception("Rollback failed")
            result.errors.append(f"Unexpected error: {e}")
            result.success = False

        return result

    def process_multiple_variants(self, variants: List[VariantIngredientText]) -> IngredientProcessingResult:
        """Process variants one at a time, in order, and aggregate the results"""
        result = IngredientProcessingResult()

        for variant in variants:
            variant_result = self.process_variant_ingredients(variant.id, variant.ingredient_text)

            result.ingredients_created += variant_result.ingredients_created
            result.ingredients_linked += variant_result.ingredients_linked
            result.errors.extend(variant_result.errors)

        result.success = len(result.errors) == 0
        return result
