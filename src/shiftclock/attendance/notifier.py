from __future__ import annotations

import logging
from typing import Optional, Protocol

from ..locations.model import LocationProfile
from .model import AttendanceSession, ClosureDecision

logger = logging.getLogger(__name__)


class AutoCloseNotifier(Protocol):
    def session_auto_closed(self, session: AttendanceSession, decision: ClosureDecision) -> None:
        raise NotImplementedError


class LoggingNotifier:
    """Default notifier: records auto-closes in the application log."""

    def session_auto_closed(self, session: AttendanceSession, decision: ClosureDecision) -> None:
        logger.info(
            "Session %s for employee %s auto-closed at %s (%s)",
            session.session_id,
            session.employee_id,
            decision.clock_out_time.isoformat(),
            decision.reason.value,
        )


class GeofenceVerifier(Protocol):
    def verify(self, location: LocationProfile, coordinates: Optional[tuple[float, float]]) -> bool:
        raise NotImplementedError


class AllowAllGeofence:
    """Accepts every clock-in; plug a real verifier in via the container."""

    def verify(self, location: LocationProfile, coordinates: Optional[tuple[float, float]]) -> bool:
        return True
