"""
Per-caller verification sessions.

A session records which orders the caller has proven ownership of, and for
chat flows the one order currently awaiting proof. Per (session, order)
pair the state moves UNVERIFIED -> PENDING -> VERIFIED. A failed attempt
leaves the pair PENDING; there is no attempt limit, so brute force is
bounded only by the rate limiter in front of the service.

Expiry is checked lazily on access. CHAT sessions never expire within the
process lifetime, so the map can grow until restart; expired MOBILE
sessions are swept when the map passes ``sweep_threshold``.
"""
import secrets
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

import logging

from app.models.enums import SessionKind, VerificationState
from app.schemas.order import Order
from app.services.cache import parse_order_id

logger = logging.getLogger(__name__)

OrderKey = Union[str, int]


def _key(order_id: OrderKey) -> str:
    """Order ids arrive as ints from upstream and strings from callers."""
    numeric_id = parse_order_id(order_id)
    if numeric_id is None:
        return str(order_id).strip()
    return str(numeric_id)


@dataclass
class PendingVerification:
    """The order a session most recently asked about without proof."""
    order_id: str
    order: Order


@dataclass
class VerificationSession:
    """Verification state of one caller."""
    session_id: str
    kind: SessionKind
    created_at: float
    expires_at: Optional[float] = None
    verified_order_ids: set[str] = field(default_factory=set)
    pending: Optional[PendingVerification] = None
    # Failed identity checks per order id since it was last asked about
    failed_attempts: dict[str, int] = field(default_factory=dict)

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class VerificationSessionStore:
    """
    In-memory store of verification sessions.

    Sessions are created lazily on first write. All access goes through a
    lock; every public method is short and never awaits.
    """

    def __init__(
        self,
        mobile_ttl_seconds: float = 24 * 3600,
        sweep_threshold: int = 10000,
        clock: Callable[[], float] = time.time,
    ):
        self.mobile_ttl_seconds = mobile_ttl_seconds
        self.sweep_threshold = sweep_threshold
        self._clock = clock
        self._sessions: dict[str, VerificationSession] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def _get(self, session_id: str) -> Optional[VerificationSession]:
        session = self._sessions.get(session_id)
        if session is None:
            return None
        if session.is_expired(self._clock()):
            del self._sessions[session_id]
            logger.info(f"Session {session_id[:8]}... expired")
            return None
        return session

    def _create(self, session_id: str, kind: SessionKind) -> VerificationSession:
        if len(self._sessions) >= self.sweep_threshold:
            self.sweep_expired()

        now = self._clock()
        expires_at = now + self.mobile_ttl_seconds if kind == SessionKind.MOBILE else None
        session = VerificationSession(
            session_id=session_id,
            kind=kind,
            created_at=now,
            expires_at=expires_at,
        )
        self._sessions[session_id] = session
        return session

    def _get_or_create(self, session_id: str) -> VerificationSession:
        return self._get(session_id) or self._create(session_id, SessionKind.CHAT)

    def issue_session(self, kind: SessionKind = SessionKind.MOBILE) -> VerificationSession:
        """Create a session with a fresh opaque identifier."""
        with self._lock:
            session_id = secrets.token_urlsafe(24)
            while session_id in self._sessions:
                session_id = secrets.token_urlsafe(24)
            return self._create(session_id, kind)

    def get_session(self, session_id: str) -> Optional[VerificationSession]:
        with self._lock:
            return self._get(session_id)

    def sweep_expired(self) -> int:
        """Remove expired sessions. Returns how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [sid for sid, s in self._sessions.items() if s.is_expired(now)]
            for sid in expired:
                del self._sessions[sid]
        if expired:
            logger.info(f"Swept {len(expired)} expired session(s)")
        return len(expired)

    # ------------------------------------------------------------------
    # Verification state
    # ------------------------------------------------------------------

    def is_verified(self, session_id: str, order_id: OrderKey) -> bool:
        with self._lock:
            session = self._get(session_id)
            return session is not None and _key(order_id) in session.verified_order_ids

    def mark_verified(self, session_id: str, order_id: OrderKey) -> None:
        """
        Record proven ownership.

        Only call this after ``verify_customer_ownership`` succeeded.
        """
        with self._lock:
            key = _key(order_id)
            session = self._get_or_create(session_id)
            session.verified_order_ids.add(key)
            session.failed_attempts.pop(key, None)

    def set_pending(self, session_id: str, order_id: OrderKey, order: Order) -> None:
        """Remember the order a session asked about; resets its attempt count."""
        key = _key(order_id)
        with self._lock:
            session = self._get_or_create(session_id)
            session.pending = PendingVerification(order_id=key, order=order)
            session.failed_attempts.pop(key, None)

    def get_pending(self, session_id: str) -> Optional[PendingVerification]:
        with self._lock:
            session = self._get(session_id)
            return session.pending if session is not None else None

    def clear_pending(self, session_id: str) -> None:
        with self._lock:
            session = self._get(session_id)
            if session is not None:
                session.pending = None

    def record_failed_attempt(self, session_id: str, order_id: OrderKey, order: Order) -> int:
        """
        Record a failed identity check; the pair stays (or becomes) PENDING.

        A pending record for another order is left alone. When nothing is
        pending, this order becomes the pending one.

        Returns the number of failed attempts for this order.
        """
        key = _key(order_id)
        with self._lock:
            session = self._get_or_create(session_id)
            if session.pending is None:
                session.pending = PendingVerification(order_id=key, order=order)
            attempts = session.failed_attempts.get(key, 0) + 1
            session.failed_attempts[key] = attempts
            return attempts

    def state(self, session_id: str, order_id: OrderKey) -> VerificationState:
        key = _key(order_id)
        with self._lock:
            session = self._get(session_id)
            if session is None:
                return VerificationState.UNVERIFIED
            if key in session.verified_order_ids:
                return VerificationState.VERIFIED
            if session.pending is not None and session.pending.order_id == key:
                return VerificationState.PENDING
            if key in session.failed_attempts:
                return VerificationState.PENDING
            return VerificationState.UNVERIFIED

    def failed_attempts(self, session_id: str, order_id: OrderKey) -> int:
        key = _key(order_id)
        with self._lock:
            session = self._get(session_id)
            if session is None:
                return 0
            return session.failed_attempts.get(key, 0)
