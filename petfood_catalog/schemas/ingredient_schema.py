from pydantic import Field
from typing import List, Optional, Union
from petfood_catalog.schemas.base_schema import CamelModel


class ParsedIngredient(CamelModel):
    name: str
    position: int = Field(ge=1)
    percentage: Optional[float] = None
    is_primary: bool


class IngredientProcessingResult(CamelModel):
    success: bool = True
    ingredients_created: int = 0
    ingredients_linked: int = 0
    errors: List[str] = Field(default_factory=list)


class BackfillResult(CamelModel):
    processed: int = 0
    ingredients_created: int = 0
    ingredients_linked: int = 0
    errors: List[str] = Field(default_factory=list)


class ProcessingStats(CamelModel):
    total_variants: int = 0
    variants_with_ingredient_text: int = 0
    variants_with_ingredient_analysis: int = 0
    total_ingredients: int = 0
    total_ingredient_relationships: int = 0


class ParseRequest(CamelModel):
    text: Optional[str] = None


class VariantIngredientsRequest(CamelModel):
    ingredient_text: Optional[str] = None


class VariantIngredientText(CamelModel):
    id: Union[int, str]
    ingredient_text: Optional[str] = None


class BatchIngredientsRequest(CamelModel):
    variants: List[VariantIngredientText]


class BackfillQueuedResponse(CamelModel):
    task_id: str
    status: str
