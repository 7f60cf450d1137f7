"""Review state for a duplicate check: what the user decides to do with the matches"""
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Union
from petfood_catalog.schemas import CandidateMatch


class InvalidTransition(ValueError):
    """Raised when a review is moved to a state it cannot reach"""


class DispositionState(str, Enum):
    IDLE = "idle"
    CHECKING = "checking"
    NO_MATCHES = "no_matches"
    MATCHES_FOUND = "matches_found"
    CONFIRM_NEW = "confirm_new"
    USE_EXISTING = "use_existing"


TERMINAL_STATES = {DispositionState.CONFIRM_NEW, DispositionState.USE_EXISTING}


class DuplicateReview(BaseModel):
    """
    Immutable review record. Every transition returns a new instance:

        IDLE -> CHECKING -> NO_MATCHES | MATCHES_FOUND
        MATCHES_FOUND -> CONFIRM_NEW | USE_EXISTING(id)
        NO_MATCHES -> CONFIRM_NEW
    """
    model_config = ConfigDict(frozen=True)

    state: DispositionState = DispositionState.IDLE
    candidates: List[CandidateMatch] = Field(default_factory=list)
    selected_product_id: Optional[Union[int, str]] = None
    error: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def _require(self, *states: DispositionState):
        if self.state not in states:
            allowed = ", ".join(s.value for s in states)
            raise InvalidTransition(f"Cannot leave state '{self.state.value}' here (expected {allowed})")

    def start_check(self) -> "DuplicateReview":
        self._require(DispositionState.IDLE)
        return self.model_copy(update={"state": DispositionState.CHECKING})

    def complete_check(self, candidates: List[CandidateMatch], error: Optional[str] = None) -> "DuplicateReview":
        self._require(DispositionState.CHECKING)
        state = DispositionState.MATCHES_FOUND if candidates else DispositionState.NO_MATCHES
        return self.model_copy(update={"state": state, "candidates": list(candidates), "error": error})

    def confirm_new(self) -> "DuplicateReview":
        self._require(DispositionState.MATCHES_FOUND, DispositionState.NO_MATCHES)
        return self.model_copy(update={"state": DispositionState.CONFIRM_NEW})

    def use_existing(self, product_id) -> "DuplicateReview":
        self._require(DispositionState.MATCHES_FOUND)
        if not any(c.id == product_id for c in self.candidates):
            raise InvalidTransition(f"Product {product_id} is not one of the reviewed matches")
        return self.model_copy(update={
            "state": DispositionState.USE_EXISTING,
            "selected_product_id": product_id
        })
