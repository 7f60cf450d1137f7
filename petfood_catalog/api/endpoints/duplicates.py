"""Duplicate detection endpoints used before new products and identifiers are saved"""
from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from petfood_catalog.api.dependencies import get_store
from petfood_catalog.schemas import (
    DuplicateCheckRequest,
    DuplicateCheckResponse,
    IdentifierConflict,
    IdentifierRef,
)
from petfood_catalog.services.catalog_store import CatalogStore
from petfood_catalog.services.duplicate_resolver import DuplicateResolver, filter_candidates

router = APIRouter()


@router.post("/duplicates/check", response_model=DuplicateCheckResponse)
def check_duplicates(
    request: DuplicateCheckRequest,
    search: Optional[str] = Query(default=None),
    store: CatalogStore = Depends(get_store)
):
    """
    Find existing products matching a new brand/product line entry.
    A failed check returns no matches with `error` set rather than an HTTP error.
    """
    response = DuplicateResolver(store).check(request)
    if search:
        response = response.model_copy(update={"matches": filter_candidates(response.matches, search)})
    return response


@router.post("/identifiers/check", response_model=List[IdentifierConflict])
def check_identifiers(identifiers: List[IdentifierRef], store: CatalogStore = Depends(get_store)):
    """Identifiers already used by active catalog variants"""
    return DuplicateResolver(store).check_identifiers(identifiers)
