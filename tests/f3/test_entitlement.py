"""Tests for the entitlement gate."""

import pytest

from mocktest.config.app_config import EngineConfig
from mocktest.core.entitlement import DenyReason, EntitlementDenied, EntitlementGate
from mocktest.core.exam_request import (
    ChapterPracticeRequest,
    SingleSubjectRequest,
    StreamRequest,
)
from mocktest.core.models import Learner


@pytest.fixture
def gate():
    return EntitlementGate(EngineConfig(free_test_limit=5))


class TestCheckAndAdmit:
    """Tests for EntitlementGate.check_and_admit."""

    def test_free_learner_under_limit(self, gate):
        admission = gate.check_and_admit(Learner(id="u", free_tests_taken=4))
        assert admission.admitted
        assert admission.reason is None

    def test_free_learner_at_limit(self, gate):
        admission = gate.check_and_admit(Learner(id="u", free_tests_taken=5))
        assert not admission.admitted
        assert admission.reason is DenyReason.LIMIT_REACHED
        assert admission.is_premium is False
        assert admission.message == "Free limit reached"

    def test_premium_ignores_counter(self, gate):
        admission = gate.check_and_admit(Learner(id="u", is_premium=True, free_tests_taken=99))
        assert admission.admitted
        assert admission.is_premium

    def test_chapter_practice_needs_premium(self, gate):
        request = ChapterPracticeRequest(subject_slug="biology", chapter_id="c1")
        admission = gate.check_and_admit(Learner(id="u"), request)
        assert admission.reason is DenyReason.PREMIUM_ONLY

    def test_premium_check_runs_before_quota(self, gate):
        """An exhausted free learner asking for chapter practice gets PREMIUM_ONLY."""
        request = ChapterPracticeRequest(subject_slug="biology", chapter_id="c1")
        admission = gate.check_and_admit(Learner(id="u", free_tests_taken=5), request)
        assert admission.reason is DenyReason.PREMIUM_ONLY

    @pytest.mark.parametrize(
        "request_",
        [SingleSubjectRequest(slug="chemistry"), StreamRequest(name="PCM"), None],
    )
    def test_regular_modes_use_quota(self, gate, request_):
        assert gate.check_and_admit(Learner(id="u", free_tests_taken=2), request_).admitted

    def test_zero_limit_denies_everyone_free(self):
        gate = EntitlementGate(EngineConfig(free_test_limit=0))
        assert not gate.check_and_admit(Learner(id="u")).admitted

    def test_does_not_mutate_learner(self, gate):
        learner = Learner(id="u", free_tests_taken=3)
        gate.check_and_admit(learner)
        assert learner.free_tests_taken == 3


class TestRequire:
    """Tests for EntitlementGate.require."""

    def test_raises_on_denial(self, gate):
        with pytest.raises(EntitlementDenied) as exc_info:
            gate.require(Learner(id="u", free_tests_taken=5))
        assert exc_info.value.reason is DenyReason.LIMIT_REACHED
        assert exc_info.value.is_premium is False
        assert str(exc_info.value) == "Free limit reached"
