"""Signed ticket payloads.

A payload has the form ``{event_id}:{registration_id}:{timestamp}:{signature}``
where the signature is a hex HMAC-SHA256 over the first three parts. The
timestamp is ISO 8601 and contains colons itself, so parsing splits the two
leading ids and the trailing signature off and keeps the middle intact.
"""

import hashlib
import hmac
import re
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from uuid import UUID

from ticketing.config import settings

_SIGNATURE_RE = re.compile(r"^[0-9a-f]{64}$", re.IGNORECASE)


@dataclass(frozen=True)
class QRPayload:
    event_id: str
    registration_id: str
    timestamp: str
    signature: str

    @property
    def signed_part(self) -> str:
        return f"{self.event_id}:{self.registration_id}:{self.timestamp}"


class CheckInWindow(StrEnum):
    open = "open"
    not_started = "not_started"
    ended = "ended"


def _secret(secret: str | None) -> bytes:
    return (secret or settings.qr_secret_key).encode()


def sign(data: str, secret: str | None = None) -> str:
    return hmac.new(_secret(secret), data.encode(), hashlib.sha256).hexdigest()


def generate_qr_data(
    event_id: str,
    registration_id: str,
    timestamp: str | None = None,
    secret: str | None = None,
) -> str:
    timestamp = timestamp or datetime.now(UTC).isoformat()
    payload = f"{event_id}:{registration_id}:{timestamp}"
    return f"{payload}:{sign(payload, secret)}"


def _is_uuid(value: str) -> bool:
    try:
        UUID(value)
    except ValueError:
        return False
    return True


def parse_qr_data(qr_data: str) -> QRPayload | None:
    head = qr_data.split(":", 2)
    if len(head) != 3:
        return None
    event_id, registration_id, rest = head
    timestamp, sep, signature = rest.rpartition(":")
    if not sep:
        return None

    if not _is_uuid(event_id) or not _is_uuid(registration_id):
        return None
    try:
        datetime.fromisoformat(timestamp)
    except ValueError:
        return None
    if not _SIGNATURE_RE.match(signature):
        return None

    return QRPayload(
        event_id=event_id,
        registration_id=registration_id,
        timestamp=timestamp,
        signature=signature,
    )


def verify_signature(payload: QRPayload, secret: str | None = None) -> bool:
    expected = sign(payload.signed_part, secret)
    return hmac.compare_digest(expected, payload.signature.lower())


def check_in_window(
    start_date: datetime,
    end_date: datetime,
    now: datetime | None = None,
    hours: int | None = None,
) -> CheckInWindow:
    now = now or datetime.now(UTC)
    margin = timedelta(hours=settings.checkin_window_hours if hours is None else hours)
    if now < start_date - margin:
        return CheckInWindow.not_started
    if now > end_date + margin:
        return CheckInWindow.ended
    return CheckInWindow.open
