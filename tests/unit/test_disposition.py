import pytest
from pydantic import ValidationError

from petfood_catalog.schemas import CandidateMatch
from petfood_catalog.services.disposition import DispositionState, DuplicateReview, InvalidTransition


def candidate(id=1, score=95):
    return CandidateMatch(id=id, name="Salmon Bites", brand_name="Acme", similarity_score=score, match_type="exact")


class TestDuplicateReview:

    def test_starts_idle(self):
        review = DuplicateReview()
        assert review.state == DispositionState.IDLE
        assert review.candidates == []
        assert not review.is_terminal

    def test_check_with_matches(self):
        review = DuplicateReview().start_check().complete_check([candidate()])

        assert review.state == DispositionState.MATCHES_FOUND
        assert [c.id for c in review.candidates] == [1]

    def test_check_without_matches(self):
        review = DuplicateReview().start_check().complete_check([])
        assert review.state == DispositionState.NO_MATCHES

    def test_failed_check_keeps_error(self):
        review = DuplicateReview().start_check().complete_check([], error="Failed to check for duplicate products: down")

        assert review.state == DispositionState.NO_MATCHES
        assert review.error.endswith("down")

    def test_confirm_new_after_matches(self):
        review = DuplicateReview().start_check().complete_check([candidate()]).confirm_new()

        assert review.state == DispositionState.CONFIRM_NEW
        assert review.is_terminal

    def test_confirm_new_after_no_matches(self):
        review = DuplicateReview().start_check().complete_check([]).confirm_new()
        assert review.state == DispositionState.CONFIRM_NEW

    def test_use_existing_records_selection(self):
        review = DuplicateReview().start_check().complete_check([candidate(1), candidate(2, 75)]).use_existing(2)

        assert review.state == DispositionState.USE_EXISTING
        assert review.selected_product_id == 2
        assert review.is_terminal

    def test_use_existing_requires_a_reviewed_match(self):
        review = DuplicateReview().start_check().complete_check([candidate(1)])

        with pytest.raises(InvalidTransition):
            review.use_existing(99)

    def test_use_existing_not_allowed_without_matches(self):
        review = DuplicateReview().start_check().complete_check([])

        with pytest.raises(InvalidTransition):
            review.use_existing(1)

    @pytest.mark.parametrize("step", [
        lambda r: r.complete_check([]),
        lambda r: r.confirm_new(),
        lambda r: r.use_existing(1),
    ])
    def test_idle_only_allows_start_check(self, step):
        with pytest.raises(InvalidTransition):
            step(DuplicateReview())

    def test_terminal_state_cannot_restart(self):
        review = DuplicateReview().start_check().complete_check([]).confirm_new()

        with pytest.raises(InvalidTransition):
            review.start_check()
        with pytest.raises(InvalidTransition):
            review.confirm_new()

    def test_transitions_do_not_mutate(self):
        idle = DuplicateReview()
        checking = idle.start_check()

        assert idle.state == DispositionState.IDLE
        assert checking.state == DispositionState.CHECKING
        with pytest.raises(ValidationError):
            idle.state = DispositionState.CHECKING

    def test_invalid_transition_is_a_value_error(self):
        assert issubclass(InvalidTransition, ValueError)
