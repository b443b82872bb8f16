"""
Signed, time-limited approval tokens.

Token format: ``<content_id>.<issued_at_ms>.<hex hmac-sha256>``

The signature covers ``<content_id>.<issued_at_ms>``. A token is accepted
when the signature matches and it is not older than ``max_age_ms``. The
reason a token was rejected is logged, never returned.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Union
from urllib.parse import quote

from guestbook.config import DEFAULT_TOKEN_MAX_AGE_MS

DELIMITER = "."

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Valid:
    content_id: str


class Invalid:
    _instance: "Invalid | None" = None

    def __new__(cls) -> "Invalid":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "INVALID"

    def __bool__(self) -> bool:
        return False


INVALID = Invalid()

TokenResult = Union[Valid, Invalid]


def _now_ms() -> int:
    return int(time.time() * 1000)


class ApprovalTokenCodec:
    def __init__(
        self,
        secret: str,
        max_age_ms: int = DEFAULT_TOKEN_MAX_AGE_MS,
        clock: Callable[[], int] | None = None,
    ) -> None:
        if not secret:
            raise ValueError("secret must be a non-empty string")
        self._key = secret.encode("utf-8")
        self.max_age_ms = max_age_ms
        self._clock = clock or _now_ms

    def _sign(self, payload: str) -> str:
        return hmac.new(self._key, payload.encode("utf-8"), hashlib.sha256).hexdigest()

    def issue(self, content_id: str) -> str:
        """
        Returns a token binding `content_id` to the current time.

        Raises ValueError for an empty id or one containing the delimiter,
        since either would make the token impossible to split back apart.
        """
        if not content_id:
            raise ValueError("content_id must be a non-empty string")
        if DELIMITER in content_id:
            raise ValueError(f"content_id must not contain {DELIMITER!r}")

        payload = f"{content_id}{DELIMITER}{self._clock()}"
        return f"{payload}{DELIMITER}{self._sign(payload)}"

    def verify(self, token: str) -> TokenResult:
        parts = (token or "").split(DELIMITER)
        if len(parts) != 3:
            log.warning("Approval token rejected", extra={"reason": "malformed", "fields": len(parts)})
            return INVALID

        content_id, issued_at, signature = parts
        if not content_id:
            log.warning("Approval token rejected", extra={"reason": "malformed"})
            return INVALID

        try:
            issued_ms = int(issued_at)
        except ValueError:
            log.warning("Approval token rejected", extra={"reason": "malformed", "timestamp": issued_at})
            return INVALID

        age = self._clock() - issued_ms
        if age > self.max_age_ms:
            log.warning("Approval token rejected", extra={"reason": "expired", "age_ms": age})
            return INVALID

        expected = self._sign(f"{content_id}{DELIMITER}{issued_at}")
        if not hmac.compare_digest(signature.encode("utf-8"), expected.encode("utf-8")):
            log.warning("Approval token rejected", extra={"reason": "signature_mismatch"})
            return INVALID

        return Valid(content_id)

    def approval_link(self, content_id: str, base_url: str) -> str:
        return approval_url(self.issue(content_id), base_url)


def approval_url(token: str, base_url: str) -> str:
    return f"{base_url.rstrip('/')}/admin/approve-email?token={quote(token, safe='')}"
