from petfood_catalog.schemas.duplicate_schema import (
    IdentifierRef,
    DuplicateCheckRequest,
    CandidateMatch,
    DuplicateCheckResponse,
    IdentifierConflict,
)
from petfood_catalog.schemas.ingredient_schema import (
    ParsedIngredient,
    IngredientProcessingResult,
    BackfillResult,
    ProcessingStats,
    ParseRequest,
    VariantIngredientsRequest,
    VariantIngredientText,
    BatchIngredientsRequest,
    BackfillQueuedResponse,
)

__all__ = [
    "IdentifierRef",
    "DuplicateCheckRequest",
    "CandidateMatch",
    "DuplicateCheckResponse",
    "IdentifierConflict",
    "ParsedIngredient",
    "IngredientProcessingResult",
    "BackfillResult",
    "ProcessingStats",
    "ParseRequest",
    "VariantIngredientsRequest",
    "VariantIngredientText",
    "BatchIngredientsRequest",
    "BackfillQueuedResponse",
]
