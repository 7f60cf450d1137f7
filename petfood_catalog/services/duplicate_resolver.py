"""Duplicate detection for new brand/product entries"""
from rapidfuzz import fuzz
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional, Set, Tuple
from petfood_catalog.config import get_settings
from petfood_catalog.models import ProductModel
from petfood_catalog.schemas import (
    CandidateMatch,
    DuplicateCheckRequest,
    DuplicateCheckResponse,
    IdentifierConflict,
    IdentifierRef,
)
from petfood_catalog.services.catalog_store import CatalogStore
from petfood_catalog.services.normalizer import CatalogNormalizer
import logging

logger = logging.getLogger(__name__)

MERGE_FIRST_SEEN = "first_seen"
MERGE_HIGHEST_SCORE = "highest_score"


def merge_candidates(candidates: List[CandidateMatch], policy: str = MERGE_FIRST_SEEN) -> List[CandidateMatch]:
    """
    Deduplicate candidates by id, then sort by similarity score descending.

    first_seen keeps the earliest entry for an id even when a later one scored
    higher, so an identifier hit (100) arriving after a name hit (95) for the
    same product is dropped. highest_score keeps the best entry instead,
    earliest on ties. Equal scores keep their arrival order.
    """
    if policy not in (MERGE_FIRST_SEEN, MERGE_HIGHEST_SCORE):
        raise ValueError(f"Unknown merge policy: {policy}")

    kept = {}
    order = []
    for candidate in candidates:
        existing = kept.get(candidate.id)
        if existing is None:
            kept[candidate.id] = candidate
            order.append(candidate.id)
        elif policy == MERGE_HIGHEST_SCORE and candidate.similarity_score > existing.similarity_score:
            kept[candidate.id] = candidate

    unique = [kept[candidate_id] for candidate_id in order]
    return sorted(unique, key=lambda c: c.similarity_score, reverse=True)


def filter_candidates(candidates: List[CandidateMatch], search: Optional[str]) -> List[CandidateMatch]:
    """Case-insensitive substring search over product and brand names"""
    if not search:
        return list(candidates)
    term = search.lower()
    return [
        c for c in candidates
        if term in c.name.lower() or term in c.brand_name.lower()
    ]


def partition_candidates(candidates: List[CandidateMatch]) -> Tuple[List[CandidateMatch], List[CandidateMatch]]:
    """Split into (exact, similar) review tabs; potential matches go with similar"""
    exact = [c for c in candidates if c.match_type == "exact"]
    similar = [c for c in candidates if c.match_type != "exact"]
    return exact, similar


def has_exact_matches(candidates: List[CandidateMatch]) -> bool:
    return any(c.match_type == "exact" for c in candidates)


def has_similar_matches(candidates: List[CandidateMatch]) -> bool:
    return any(c.match_type == "similar" for c in candidates)


class DuplicateResolver:
    """Finds existing catalog products that a new entry may duplicate"""

    def __init__(self, store: CatalogStore, settings=None):
        self.store = store
        self.settings = settings or get_settings()

    @staticmethod
    def model_identifiers(model: ProductModel) -> List[IdentifierRef]:
        """All identifiers across a product model's variants, in variant order"""
        refs = []
        for variant in sorted(model.variants, key=lambda v: v.id):
            for identifier in sorted(variant.identifiers, key=lambda i: i.id):
                refs.append(IdentifierRef(
                    type=identifier.identifier_type,
                    value=identifier.identifier_value,
                    is_primary=bool(identifier.is_primary)
                ))
        return refs

    def _candidate_from_model(self, model: ProductModel, score: int, match_type: str) -> CandidateMatch:
        return CandidateMatch(
            id=model.id,
            name=model.name,
            brand_name=model.brand.name if model.brand else "",
            similarity_score=score,
            match_type=match_type,
            identifiers=self.model_identifiers(model),
            variants_count=len(model.variants),
            created_at=model.created_at
        )

    def find_exact_name_matches(self, request: DuplicateCheckRequest) -> List[CandidateMatch]:
        """Same brand (exact), product name containing the entered line name"""
        if not request.product_line_name:
            return []
        try:
            models = self.store.find_models_by_brand_and_name(
                request.brand_name, request.product_line_name, same_brand=True
            )
        except SQLAlchemyError as e:
            logger.warning(f"Exact name duplicate check failed: {e}")
            self.store.rollback()
            return []
        return [
            self._candidate_from_model(m, self.settings.exact_match_score, "exact")
            for m in models
        ]

    def find_similar_name_matches(self, request: DuplicateCheckRequest) -> List[CandidateMatch]:
        """Any other brand, product name containing the entered line name"""
        if not request.product_line_name:
            return []
        try:
            models = self.store.find_models_by_brand_and_name(
                request.brand_name, request.product_line_name, same_brand=False
            )
        except SQLAlchemyError as e:
            logger.warning(f"Cross-brand duplicate check failed: {e}")
            self.store.rollback()
            return []
        return [
            self._candidate_from_model(m, self.settings.similar_match_score, "similar")
            for m in models
        ]

    def find_identifier_matches(self, identifiers: List[IdentifierRef]) -> List[CandidateMatch]:
        """
        Exact (type, value) hits on active identifiers.
        Each hit carries only the identifier that matched.
        """
        matches = []
        for ref in identifiers:
            try:
                rows = self.store.find_active_identifiers(ref.type, ref.value)
            except SQLAlchemyError as e:
                logger.warning(f"Identifier duplicate check failed for {ref.type} {ref.value}: {e}")
                self.store.rollback()
                continue

            for row in rows:
                model = row.variant.product_model
                matches.append(CandidateMatch(
                    id=model.id,
                    name=model.name,
                    brand_name=model.brand.name if model.brand else "",
                    similarity_score=self.settings.identifier_match_score,
                    match_type="exact",
                    identifiers=[IdentifierRef(
                        type=row.identifier_type,
                        value=row.identifier_value,
                        is_primary=bool(row.is_primary)
                    )],
                    variants_count=1,
                    created_at=model.created_at
                ))
        return matches

    def find_potential_matches(self, request: DuplicateCheckRequest, exclude_ids: Set) -> List[CandidateMatch]:
        """Fuzzy name matches scored with token_sort_ratio; off unless a threshold is configured"""
        threshold = self.settings.potential_match_threshold
        if threshold is None or not request.product_line_name:
            return []
        try:
            models = self.store.find_all_models()
        except SQLAlchemyError as e:
            logger.warning(f"Potential duplicate check failed: {e}")
            self.store.rollback()
            return []

        target = CatalogNormalizer.normalize_product_name(request.product_line_name)
        matches = []
        for model in models:
            if model.id in exclude_ids:
                continue
            ratio = fuzz.token_sort_ratio(target, CatalogNormalizer.normalize_product_name(model.name))
            if ratio >= threshold:
                # Kept below the similar score so fuzzy hits always rank last
                score = min(int(round(ratio)), self.settings.similar_match_score - 1)
                matches.append(self._candidate_from_model(model, score, "potential"))
        return matches

    def check(self, request: DuplicateCheckRequest) -> DuplicateCheckResponse:
        """
        Run every strategy and merge the hits for review.
        A failing strategy contributes nothing; an unexpected failure yields
        an empty result with the error message set.
        """
        try:
            name_hits = self.find_exact_name_matches(request) + self.find_similar_name_matches(request)
            identifier_hits = self.find_identifier_matches(request.identifiers)
            # Fuzzy hits skip products the name strategies already found
            potential_hits = self.find_potential_matches(request, {c.id for c in name_hits})
            candidates = name_hits + identifier_hits + potential_hits

            matches = merge_candidates(candidates, self.settings.duplicate_merge_policy)
            logger.info(
                f"Duplicate check for '{request.brand_name}' / '{request.product_line_name}': "
                f"{len(matches)} candidate(s)"
            )
            return DuplicateCheckResponse(
                matches=matches,
                has_exact_matches=has_exact_matches(matches),
                has_similar_matches=has_similar_matches(matches)
            )
        except Exception as e:
            logger.exception("Error detecting duplicates")
            return DuplicateCheckResponse(
                matches=[],
                has_exact_matches=False,
                has_similar_matches=False,
                error=f"Failed to check for duplicate products: {e}"
            )

    def detect_duplicates(self, request: DuplicateCheckRequest) -> List[CandidateMatch]:
        return self.check(request).matches

    def check_identifiers(self, identifiers: List[IdentifierRef]) -> List[IdentifierConflict]:
        """Identifiers already in use by active catalog variants"""
        conflicts = []
        for ref in identifiers:
            try:
                rows = self.store.find_active_identifiers(ref.type, ref.value)
            except SQLAlchemyError as e:
                logger.warning(f"Identifier lookup failed for {ref.type} {ref.value}: {e}")
                self.store.rollback()
                continue

            for row in rows:
                variant = row.variant
                model = variant.product_model
                conflicts.append(IdentifierConflict(
                    identifier_type=row.identifier_type,
                    identifier_value=row.identifier_value,
                    product_variant_id=variant.id,
                    product_name=variant.name or "Unknown Product",
                    brand_name=model.brand.name if model.brand else "",
                    is_primary=bool(row.is_primary)
                ))
        return conflicts
