from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from petfood_catalog.models import ProductVariant, VariantIngredientAnalysis
from petfood_catalog.schemas import IngredientProcessingResult
from petfood_catalog.services.ingredient_backfill import IngredientBackfill
from petfood_catalog.services.ingredient_processor import IngredientProcessor


def variant_ids_by_name(db_session):
    return {v.name: v.id for v in db_session.query(ProductVariant).all()}


class TestBackfillAllVariants:

    def test_processes_only_variants_needing_ingredients(self, db_session, store, settings, make_product):
        make_product("Acme", "Salmon Bites", variants=[
            {"name": "needs", "ingredients": "Salmon, Potato, Peas"},
            {"name": "blank", "ingredients": ""},
            {"name": "none", "ingredients": None},
            {"name": "done", "ingredients": "Duck, Rice"},
        ])
        ids = variant_ids_by_name(db_session)
        processor = IngredientProcessor(store, settings)
        processor.process_variant_ingredients(ids["done"], "Duck, Rice")

        result = IngredientBackfill(store, processor).backfill_all_variants()

        assert result.processed == 1
        assert result.ingredients_created == 3
        assert result.ingredients_linked == 3
        assert result.errors == []
        linked = {row.variant_id for row in db_session.query(VariantIngredientAnalysis).all()}
        assert linked == {ids["needs"], ids["done"]}

    def test_nothing_to_do(self, store, settings):
        result = IngredientBackfill(store, IngredientProcessor(store, settings)).backfill_all_variants()

        assert result.processed == 0
        assert result.errors == []

    def test_second_run_finds_nothing(self, store, settings, make_product):
        make_product("Acme", "Salmon Bites", variants=[{"name": "a", "ingredients": "Salmon, Peas"}])
        backfill = IngredientBackfill(store, IngredientProcessor(store, settings))

        first = backfill.backfill_all_variants()
        second = backfill.backfill_all_variants()

        assert first.processed == 1
        assert second.processed == 0

    def test_fetch_failure_aborts(self):
        store = MagicMock()
        store.find_variants_needing_ingredients.side_effect = OperationalError("SELECT", {}, Exception("down"))
        processor = MagicMock()

        result = IngredientBackfill(store, processor).backfill_all_variants()

        assert result.processed == 0
        assert result.errors[0].startswith("Error fetching variants")
        processor.process_variant_ingredients.assert_not_called()

    def test_failed_variant_is_recorded_and_rest_continue(self):
        store = MagicMock()
        store.find_variants_needing_ingredients.return_value = [
            MagicMock(id=1, ingredient_list_text="A"),
            MagicMock(id=2, ingredient_list_text="B"),
            MagicMock(id=3, ingredient_list_text="C, D"),
        ]
        processor = MagicMock()
        processor.process_variant_ingredients.side_effect = [
            IngredientProcessingResult(success=False, errors=["Error linking ingredients: fk"]),
            RuntimeError("worker died"),
            IngredientProcessingResult(ingredients_created=2, ingredients_linked=2),
        ]

        result = IngredientBackfill(store, processor).backfill_all_variants()

        assert [c.args[0] for c in processor.process_variant_ingredients.call_args_list] == [1, 2, 3]
        assert result.processed == 2
        assert result.ingredients_linked == 2
        assert result.errors == [
            "Error linking ingredients: fk",
            "Error processing variant 2: worker died",
        ]


class TestGetProcessingStats:

    def test_counts(self, db_session, store, settings, make_product):
        make_product("Acme", "Salmon Bites", variants=[
            {"name": "a", "ingredients": "Salmon, Peas"},
            {"name": "b", "ingredients": "Salmon, Rice, Kelp"},
            {"name": "c", "ingredients": ""},
        ])
        ids = variant_ids_by_name(db_session)
        IngredientProcessor(store, settings).process_variant_ingredients(ids["a"], "Salmon, Peas")
        IngredientProcessor(store, settings).process_variant_ingredients(ids["b"], "Salmon, Rice, Kelp")

        stats = IngredientBackfill(store).get_processing_stats()

        assert stats.total_variants == 3
        assert stats.variants_with_ingredient_text == 2
        assert stats.variants_with_ingredient_analysis == 2
        assert stats.total_ingredients == 4
        assert stats.total_ingredient_relationships == 5

    def test_failure_returns_zeros(self):
        store = MagicMock()
        store.count_variants.side_effect = OperationalError("SELECT", {}, Exception("down"))

        stats = IngredientBackfill(store, MagicMock()).get_processing_stats()

        assert stats.model_dump() == {
            "total_variants": 0,
            "variants_with_ingredient_text": 0,
            "variants_with_ingredient_analysis": 0,
            "total_ingredients": 0,
            "total_ingredient_relationships": 0,
        }
