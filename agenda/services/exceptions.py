from __future__ import annotations

from enum import Enum
from typing import List, Optional


class ServiceError(Exception):
    """Base exception for service layer failures."""

    def __init__(self, message: str, *, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class RejectionKind(str, Enum):
    INVALID_DATE = "InvalidDate"
    INVALID_TIME = "InvalidTime"
    UNKNOWN_OR_INACTIVE_PROVIDER = "UnknownOrInactiveProvider"
    SLOT_NOT_OFFERED = "SlotNotOffered"
    SLOT_RESERVED_BY_PLAN = "SlotReservedByPlan"
    SLOT_ALREADY_BOOKED = "SlotAlreadyBooked"
    PLAN_RANGE_INVALID = "PlanRangeInvalid"
    PLAN_OVERLAP = "PlanOverlap"
    NO_REPRESENTATIVE_DATE = "NoRepresentativeDate"
    STATUS_TRANSITION_REJECTED = "StatusTransitionRejected"
    INVALID_CONFIG = "InvalidConfig"


CONFLICT_KINDS = frozenset(
    {
        RejectionKind.SLOT_ALREADY_BOOKED,
        RejectionKind.SLOT_RESERVED_BY_PLAN,
        RejectionKind.PLAN_OVERLAP,
    }
)


class SchedulingError(ServiceError):
    """Raised when a scheduling request is rejected by validation.

    Rejections never leave partial writes behind.
    """

    def __init__(
        self,
        kind: RejectionKind,
        message: str,
        *,
        suggested_slots: Optional[List[str]] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.suggested_slots = suggested_slots

    @property
    def is_conflict(self) -> bool:
        return self.kind in CONFLICT_KINDS

    def to_detail(self) -> dict:
        return {
            "kind": self.kind.value,
            "message": str(self),
            "suggested_slots": self.suggested_slots,
        }


class NotFoundError(ServiceError):
    """Raised when a provider, booking, plan or token does not exist."""


class ConfirmationError(ServiceError):
    """Raised when a confirmation token is expired or already used."""


class DuplicateSlotError(ServiceError):
    """Raised by the booking ledger when its uniqueness index is violated."""
