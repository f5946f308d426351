"""Sign-In with Ethereum (EIP-4361) challenge verification.

Message parsing, rendering and EIP-191 signature checks are handled by the
``siwe`` library. ``ChallengeVerifier`` wraps it with the one-time nonce and
a recency window, and reports every outcome as a ``ChallengeResult``;
malformed input, bad signatures, spent nonces and stale messages never
raise. Parser and library failures share the "Invalid signature" message.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Final

from siwe import SiweMessage

from love_diary.core.settings import settings
from love_diary.services.nonce import NonceService

logger = logging.getLogger(__name__)

INVALID_SIGNATURE: Final[str] = "Invalid signature"
INVALID_NONCE: Final[str] = "Invalid or expired nonce"
MESSAGE_TOO_OLD: Final[str] = "Message too old"


def parse_message(message: str) -> SiweMessage:
    """Parse the canonical text form of a sign-in message."""
    return SiweMessage.from_message(message=message)


def format_timestamp(value: datetime) -> str:
    """Render ``value`` as the RFC 3339 UTC form used in sign-in messages."""
    text = value.astimezone(UTC).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def _issued_at(parsed: SiweMessage) -> datetime:
    issued = datetime.fromisoformat(str(parsed.issued_at))
    if issued.tzinfo is None:
        raise ValueError("Issued At must carry a timezone")
    return issued


@dataclass(frozen=True)
class ChallengeResult:
    """Outcome of verifying a signed sign-in message."""

    valid: bool
    address: str | None = None
    error: str | None = None


class ChallengeVerifier:
    """Verify signed sign-in messages end to end."""

    def __init__(
        self,
        nonce_service: NonceService,
        *,
        max_age_seconds: int | None = None,
        expected_domain: str | None = None,
    ) -> None:
        self._nonce_service = nonce_service
        self._max_age_seconds = max_age_seconds or settings.message_max_age_seconds
        self._expected_domain = expected_domain or settings.siwe_domain

    async def verify_challenge(
        self,
        message: str,
        signature: str,
        *,
        now: datetime | None = None,
    ) -> ChallengeResult:
        """Verify signature, nonce and recency of a sign-in message.

        The nonce is consumed only after the signature checks out, so a forged
        signature cannot burn someone else's nonce. It is consumed before the
        age check, so a stale but validly signed message still spends it.
        """
        current = now or datetime.now(UTC)

        try:
            parsed = parse_message(message)
            issued_at = _issued_at(parsed)
            parsed.verify(signature, domain=self._expected_domain, timestamp=current)
        except Exception as err:
            # Library errors cover malformed text, bad signatures, domain
            # mismatch and the message's own expiry window.
            logger.debug("Rejected sign-in message: %s", err)
            return ChallengeResult(valid=False, error=INVALID_SIGNATURE)

        if not await self._nonce_service.verify_and_consume_nonce(parsed.nonce):
            return ChallengeResult(valid=False, error=INVALID_NONCE)

        age_seconds = (current - issued_at).total_seconds()
        if age_seconds > self._max_age_seconds:
            return ChallengeResult(valid=False, error=MESSAGE_TOO_OLD)

        return ChallengeResult(valid=True, address=str(parsed.address))
