"""Tests for domain models and the error taxonomy."""

from dataclasses import FrozenInstanceError

import pytest

from lexis.domain.errors import CommitError, InvalidInputError, LexisError, SessionStateError
from lexis.domain.models import LearningItem, ReviewState, SessionPhase


def test_fresh_state_defaults():
    state = ReviewState()
    assert state.ease_factor == 2.5
    assert state.interval_days == 0
    assert state.next_review_at is None
    assert state.is_new is True
    assert state.is_mastered is False


def test_state_is_immutable():
    with pytest.raises(FrozenInstanceError):
        ReviewState().interval_days = 3


def test_item_defaults_to_fresh_state():
    item = LearningItem(id="w1", term="ubiquitous")
    assert item.review_state == ReviewState()
    assert item.group_key is None
    assert item.extra == {}


def test_error_hierarchy():
    assert issubclass(InvalidInputError, ValueError)
    assert issubclass(SessionStateError, RuntimeError)
    assert not issubclass(SessionStateError, ValueError)
    for cls in (InvalidInputError, SessionStateError, CommitError):
        assert issubclass(cls, LexisError)


def test_session_phase_values():
    assert SessionPhase.IDLE == "idle"
    assert SessionPhase.IN_SESSION.value == "in_session"
