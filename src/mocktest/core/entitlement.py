"""Entitlement gate.

Decides whether a learner may start a new exam. Premium learners are
always admitted; free learners are admitted while their submitted-exam
counter is below the configured limit. Chapter practice is premium only
and that check runs before the quota check.

The gate never mutates the learner: the free counter is bumped when an
exam is submitted, so an abandoned exam costs nothing.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import structlog

from mocktest.config.app_config import EngineConfig
from mocktest.core.exam_request import ExamRequest
from mocktest.core.models import Learner

logger = structlog.get_logger(__name__)


class DenyReason(str, Enum):
    """Why a learner was not admitted."""

    LIMIT_REACHED = "LIMIT_REACHED"
    PREMIUM_ONLY = "PREMIUM_ONLY"


_MESSAGES = {
    DenyReason.LIMIT_REACHED: "Free limit reached",
    DenyReason.PREMIUM_ONLY: "Chapter practice is available to premium learners only",
}


@dataclass(frozen=True)
class Admission:
    """Outcome of an entitlement check."""

    admitted: bool
    reason: DenyReason | None = None
    is_premium: bool = False

    @property
    def message(self) -> str:
        if self.reason is None:
            return "Admitted"
        return _MESSAGES[self.reason]


class EntitlementDenied(Exception):
    """Raised when a learner may not start the requested exam."""

    def __init__(self, admission: Admission):
        self.admission = admission
        self.reason = admission.reason
        self.is_premium = admission.is_premium
        super().__init__(admission.message)


class EntitlementGate:
    """Checks tier and quota for a learner."""

    def __init__(self, config: EngineConfig):
        self._config = config

    def check_and_admit(self, learner: Learner, request: ExamRequest | None = None) -> Admission:
        """Decide admission for `learner`.

        Args:
            learner: Learner state as last read from the ledger
            request: Requested exam; premium-only modes are checked first

        Returns:
            Admission, admitted or carrying a DenyReason
        """
        if learner.is_premium:
            return Admission(admitted=True, is_premium=True)

        if request is not None and request.premium_only:
            logger.info("entitlement.denied", learner_id=learner.id, reason="PREMIUM_ONLY")
            return Admission(admitted=False, reason=DenyReason.PREMIUM_ONLY)

        if learner.free_tests_taken < self._config.free_test_limit:
            return Admission(admitted=True)

        logger.info(
            "entitlement.denied",
            learner_id=learner.id,
            reason="LIMIT_REACHED",
            free_tests_taken=learner.free_tests_taken,
        )
        return Admission(admitted=False, reason=DenyReason.LIMIT_REACHED)

    def require(self, learner: Learner, request: ExamRequest | None = None) -> Admission:
        """Like check_and_admit, but raise EntitlementDenied on denial."""
        admission = self.check_and_admit(learner, request)
        if not admission.admitted:
            raise EntitlementDenied(admission)
        return admission
