"""Best-effort writes to the access log.

``AuditRecorder.record`` is the only place audit failures are absorbed:
it never raises, so a down or missing access-log store can not fail the
registration, certificate or login that triggered it.
"""
import enum
import logging
from typing import Optional

from app.stores.interfaces import AccessLogStore
from app.timeutil import utcnow

logger = logging.getLogger(__name__)

# event_id recorded for accesses that are not tied to an event (login, logout)
NO_EVENT = 0
UNKNOWN = "N/A"


class AccessType(str, enum.Enum):
    registration = "registration"
    certificate = "certificate"


def build_entry(
    user_id: int,
    event_id: int,
    access_type: AccessType,
    ip: Optional[str] = None,
    device: Optional[str] = None,
    entry_status: str = "active",
) -> dict:
    return {
        "user_id": user_id,
        "event_id": event_id,
        "access_type": AccessType(access_type).value,
        "timestamp": utcnow(),
        "details": {
            "ip": ip or UNKNOWN,
            "device": device or UNKNOWN,
            "status": entry_status,
        },
    }


class AuditRecorder:

    def __init__(self, store: Optional[AccessLogStore]) -> None:
        self._store = store

    def record(
        self,
        user_id: int,
        event_id: int,
        access_type: AccessType,
        ip: Optional[str] = None,
        device: Optional[str] = None,
    ) -> None:
        kind = AccessType(access_type).value
        if self._store is None:
            logger.warning(
                "Access log unavailable, dropped %s entry for user %s event %s",
                kind, user_id, event_id,
            )
            return
        try:
            self._store.insert(build_entry(user_id, event_id, access_type, ip, device))
        except Exception:
            logger.exception(
                "Failed to record %s access for user %s event %s", kind, user_id, event_id
            )

    def record_registration(
        self, user_id: int, event_id: int, ip: Optional[str] = None, device: Optional[str] = None
    ) -> None:
        self.record(user_id, event_id, AccessType.registration, ip, device)

    def record_certificate(
        self, user_id: int, event_id: int, ip: Optional[str] = None, device: Optional[str] = None
    ) -> None:
        self.record(user_id, event_id, AccessType.certificate, ip, device)
