from pydantic import Field, field_validator
from datetime import datetime
from typing import List, Literal, Optional, Union
from petfood_catalog.schemas.base_schema import CamelModel
from petfood_catalog.services.normalizer import CatalogNormalizer

MatchType = Literal["exact", "similar", "potential"]


class IdentifierRef(CamelModel):
    type: str  # UPC, EAN, ASIN, SKU
    value: str
    is_primary: bool = False

    @field_validator("type")
    @classmethod
    def upper_type(cls, v: str) -> str:
        return CatalogNormalizer.normalize_identifier_type(v)

    @field_validator("value")
    @classmethod
    def strip_value(cls, v: str) -> str:
        return CatalogNormalizer.normalize_identifier_value(v)


class DuplicateCheckRequest(CamelModel):
    brand_name: str
    product_line_name: str = ""
    identifiers: List[IdentifierRef] = Field(default_factory=list)


class CandidateMatch(CamelModel):
    """Existing catalog product that may duplicate the one being entered"""
    id: Union[int, str]
    name: str
    brand_name: str
    similarity_score: int = Field(ge=0, le=100)
    match_type: MatchType
    identifiers: List[IdentifierRef] = Field(default_factory=list)
    variants_count: int = 0
    created_at: Optional[datetime] = None


class DuplicateCheckResponse(CamelModel):
    matches: List[CandidateMatch]
    has_exact_matches: bool
    has_similar_matches: bool
    error: Optional[str] = None


class IdentifierConflict(CamelModel):
    identifier_type: str
    identifier_value: str
    product_variant_id: Union[int, str]
    product_name: str
    brand_name: str
    is_primary: bool = False
