"""Security audit log.

Every authentication outcome and every request blocked at the edge is
recorded twice: as a structured log line and as a ``SecurityEventModel`` row.
The audit log owns its own short-lived session so it can be used from
middleware (no request session) and is unaffected by a request rollback.
"""

from typing import Any, Callable, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from adjusterhub.logging_config import get_logger
from adjusterhub.models.security_event import SecurityEventModel
from adjusterhub.schemas.enums import SecurityEventType

logger = get_logger("adjusterhub.security")

_WARNING_EVENTS = {
    SecurityEventType.AUTH_FAILURE,
    SecurityEventType.SUSPICIOUS_ACTIVITY,
    SecurityEventType.HONEYPOT_TRIGGERED,
    SecurityEventType.RATE_LIMIT_EXCEEDED,
}


class SecurityAuditLog:
    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def record(
        self,
        event_type: Union[SecurityEventType, str],
        ip: str,
        user_agent: Optional[str] = None,
        user_id: Optional[int] = None,
        **details: Any,
    ) -> None:
        event_type = SecurityEventType(event_type)
        log = logger.warning if event_type in _WARNING_EVENTS else logger.info
        log(
            "security_event",
            security_event=event_type.value,
            ip=ip,
            user_agent=user_agent,
            user_id=user_id,
            **details,
        )

        db = self._session_factory()
        try:
            db.add(
                SecurityEventModel(
                    type=event_type.value,
                    user_id=user_id,
                    ip_address=ip,
                    user_agent=(user_agent or "")[:512],
                    details=details,
                )
            )
            db.commit()
        except SQLAlchemyError as exc:
            # the log line above is the fallback record
            db.rollback()
            logger.error("security_event_persist_failed", security_event=event_type.value, error=str(exc))
        finally:
            db.close()
