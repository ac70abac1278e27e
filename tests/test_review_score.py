import pytest
from hypothesis import example, given
from hypothesis.strategies import floats, integers

from apps.grants import lifecycle
from models.exc import SubmissionInvalid
from models.grants import SCORE_MAX, SCORE_MIN
from models.user import Role, User

from _utils import ctx_for


@given(score=integers(min_value=-10_000, max_value=10_000))
@example(score=SCORE_MIN - 1)
@example(score=SCORE_MIN)
@example(score=SCORE_MAX)
@example(score=SCORE_MAX + 1)
def test_validate_score(score):
    if SCORE_MIN <= score <= SCORE_MAX:
        assert lifecycle.validate_score(score) == score
    else:
        with pytest.raises(SubmissionInvalid):
            lifecycle.validate_score(score)


@given(score=floats(allow_nan=True, allow_infinity=True))
def test_validate_score_rejects_floats(score):
    with pytest.raises(SubmissionInvalid):
        lifecycle.validate_score(score)


@given(score=integers(max_value=SCORE_MIN - 1) | integers(min_value=SCORE_MAX + 1))
def test_out_of_range_review_rejected_before_any_read(score):
    # An unsaved profile and a proposal that doesn't exist: validation has to fail first
    reviewer = User("hypothesis@example.com", "Hypothesis Reviewer", Role.REVIEWER)

    with pytest.raises(SubmissionInvalid) as e:
        lifecycle.submit_review(ctx_for(reviewer), 999999, score, "approve", "Comments")

    assert str(e.value) == f"Score must be between {SCORE_MIN} and {SCORE_MAX}"
