"""One-time code issuance and verification.

Two storage tiers:
- a registered identity keeps its live challenge on the ``users`` row (otp, otp_expiry);
- an email with no identity yet (pre-registration) keeps it in an ``EphemeralOTPStore``
  owned by the running application. That store is process-local, lazily expired
  (only on a verification attempt) and lost on restart; callers simply request a new code.

A new issue overwrites any previous challenge for the same email, so only the most
recently issued code is ever valid. The challenge is stored only after the email was
accepted by the mail relay: a failed send never leaves a live code behind.
"""
from __future__ import annotations
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional
from sqlalchemy.orm import Session
from config import settings
from errors import OTPExpiredError, OTPMismatchError, OTPNotFoundError
from mailer import Mailer, otp_email
from models.user import User
from security import generate_otp
from endpoints.logs import log_action

PURPOSE_VERIFICATION = "verification"
PURPOSE_PASSWORD_RESET = "password_reset"


@dataclass(frozen=True)
class Challenge:
    code: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def matches(self, code: str) -> bool:
        return secrets.compare_digest(self.code, code)


class EphemeralOTPStore:
    """Pending-registration challenges keyed by email."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: Dict[str, Challenge] = {}

    def put(self, email: str, challenge: Challenge) -> None:
        with self._lock:
            self._items[email] = challenge

    def get(self, email: str) -> Optional[Challenge]:
        with self._lock:
            return self._items.get(email)

    def pop(self, email: str) -> Optional[Challenge]:
        with self._lock:
            return self._items.pop(email, None)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __contains__(self, email: str) -> bool:
        with self._lock:
            return email in self._items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


def _find_user(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


class OTPManager:
    def __init__(
        self,
        store: EphemeralOTPStore,
        mailer: Mailer,
        ttl: timedelta | None = None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.store = store
        self.mailer = mailer
        self.ttl = ttl or timedelta(minutes=settings.OTP_EXPIRE_MINUTES)
        self.clock = clock

    async def issue(self, db: Session, email: str, purpose: str = PURPOSE_VERIFICATION) -> str:
        """Send a fresh code to ``email`` and make it the live challenge.

        Raises DeliveryError (or DeliveryTimeoutError) if the email could not be sent;
        in that case no challenge is stored.
        """
        code = generate_otp()
        await self.mailer.send(otp_email(email, code, purpose))

        challenge = Challenge(code=code, expires_at=self.clock() + self.ttl)
        user = _find_user(db, email)
        if user:
            # A code issued before registration must not shadow this one
            self.store.pop(email)
            user.otp = challenge.code
            user.otp_expiry = challenge.expires_at
            db.commit()
            tier = "user"
        else:
            self.store.put(email, challenge)
            tier = "pending"
        log_action("otp_issued", email, context={"purpose": purpose, "tier": tier})
        return code

    def verify(self, db: Session, email: str, code: str) -> bool:
        """Consume the live challenge for ``email``.

        Pending-registration challenges are checked first. A wrong code leaves the
        challenge in place so the holder can retry until it expires.
        """
        now = self.clock()
        pending = self.store.get(email)
        if pending is not None:
            if pending.is_expired(now):
                self.store.pop(email)
                log_action("otp_rejected", email, context={"tier": "pending", "reason": "expired"}, level="WARNING")
                raise OTPExpiredError()
            if not pending.matches(code):
                log_action("otp_rejected", email, context={"tier": "pending", "reason": "mismatch"}, level="WARNING")
                raise OTPMismatchError()
            self.store.pop(email)
            log_action("otp_verified", email, context={"tier": "pending"})
            return True

        user = _find_user(db, email)
        if user is None:
            log_action("otp_rejected", email, context={"tier": "user", "reason": "not_found"}, level="WARNING")
            raise OTPNotFoundError()
        self.consume(db, user, code)
        return True

    def check(self, user: User, code: str) -> None:
        """Validate the challenge stored on ``user`` without consuming it."""
        if not user.otp or not user.otp_expiry:
            log_action("otp_rejected", user.email, context={"tier": "user", "reason": "not_found"}, level="WARNING")
            raise OTPNotFoundError()
        challenge = Challenge(code=user.otp, expires_at=user.otp_expiry)
        if not challenge.matches(code):
            log_action("otp_rejected", user.email, context={"tier": "user", "reason": "mismatch"}, level="WARNING")
            raise OTPMismatchError()
        if challenge.is_expired(self.clock()):
            log_action("otp_rejected", user.email, context={"tier": "user", "reason": "expired"}, level="WARNING")
            raise OTPExpiredError()

    def consume(self, db: Session, user: User, code: str, commit: bool = True) -> None:
        self.check(user, code)
        user.otp = None
        user.otp_expiry = None
        if commit:
            db.commit()
        log_action("otp_verified", user.email, context={"tier": "user"})
