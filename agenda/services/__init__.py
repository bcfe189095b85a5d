"""Service package public API definitions.

Service implementations are imported lazily on attribute access so that
``agenda.services.exceptions`` and ``agenda.services.store`` can be imported
on their own without pulling in every service module.
"""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

__all__ = [
    "AvailabilityService",
    "BookingService",
    "PlanService",
    "ProviderService",
]

_SERVICE_MODULES = {
    "AvailabilityService": "availability",
    "BookingService": "booking",
    "PlanService": "plans",
    "ProviderService": "providers",
}


def __getattr__(name: str) -> Any:
    if name not in _SERVICE_MODULES:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module = import_module(f".{_SERVICE_MODULES[name]}", __name__)
    attr = getattr(module, name)
    globals()[name] = attr
    return attr


if TYPE_CHECKING:  # pragma: no cover - import for static analysis only
    from .availability import AvailabilityService as AvailabilityService
    from .booking import BookingService as BookingService
    from .plans import PlanService as PlanService
    from .providers import ProviderService as ProviderService
