"""Authentication subsystem: users, session tokens and the session stream.

Passwords are stored as bcrypt hashes; a signed-in session is an HS256 JWT
that is also recorded in the ``sessions`` collection so sign-out revokes it.
State changes are pushed to subscribers as :class:`SessionEvent` values.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, List, Optional, Union

import bcrypt
import jwt

from carelog.configs import JWT_CONFIG
from carelog.errors import AuthError

logger = logging.getLogger(__name__)

AUTHENTICATED = "authenticated"
UNAUTHENTICATED = "unauthenticated"


@dataclass(frozen=True)
class AuthUser:
    id: str
    username: str


@dataclass(frozen=True)
class AuthSession:
    user: AuthUser
    token: str
    expires_at: datetime


@dataclass(frozen=True)
class SessionEvent:
    kind: str
    user: Optional[AuthUser] = None

    @property
    def authenticated(self) -> bool:
        return self.kind == AUTHENTICATED

    @classmethod
    def signed_in(cls, user: AuthUser) -> "SessionEvent":
        return cls(AUTHENTICATED, user)

    @classmethod
    def signed_out(cls) -> "SessionEvent":
        return cls(UNAUTHENTICATED)


Listener = Callable[[SessionEvent], Union[None, Awaitable[None]]]


class MongoAuth:
    """Session owner backed by the ``users`` and ``sessions`` collections."""

    def __init__(self, db, secret_key: Optional[str] = None, expire_minutes: Optional[int] = None):
        self.db = db
        self.secret_key = secret_key or JWT_CONFIG["secret_key"]
        self.algorithm = JWT_CONFIG["algorithm"]
        self.expire_minutes = expire_minutes or JWT_CONFIG["session_expire_minutes"]
        self._token: Optional[str] = None
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------
    # Session stream
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener for session changes; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _emit(self, event: SessionEvent) -> None:
        logger.info(f"Session event: kind={event.kind}, user={event.user.username if event.user else None}")
        for listener in list(self._listeners):
            result = listener(event)
            if inspect.isawaitable(result):
                await result

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def create_session_token(self, user: AuthUser) -> AuthSession:
        expire = datetime.now(timezone.utc) + timedelta(minutes=self.expire_minutes)
        payload = {"sub": user.id, "username": user.username, "exp": expire, "type": "access"}
        token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        return AuthSession(user=user, token=token, expires_at=expire)

    def verify_token(self, token: str) -> Optional[dict]:
        """Verify JWT token and return payload."""
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
            if payload.get("type") != "access":
                return None
            return payload
        except jwt.ExpiredSignatureError:
            return None
        except jwt.InvalidTokenError:
            return None

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    async def sign_up(self, username: str, password: str) -> AuthUser:
        username = (username or "").strip()
        if not username or not password:
            raise AuthError("Username and password are required", code="validation_error")

        existing = await asyncio.to_thread(self.db["users"].find_one, {"username": username})
        if existing:
            raise AuthError(code="user_exists")

        password_hash = bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()
        result = await asyncio.to_thread(
            self.db["users"].insert_one,
            {"username": username, "password_hash": password_hash, "created_at": datetime.now(timezone.utc)},
        )
        logger.info(f"User created: username={username}")
        return AuthUser(id=str(result.inserted_id), username=username)

    async def sign_in(self, username: str, password: str) -> AuthSession:
        user_doc = await asyncio.to_thread(self.db["users"].find_one, {"username": username})
        if not user_doc or not self._check_password(password, user_doc.get("password_hash")):
            logger.warning(f"Failed sign-in attempt: username={username}")
            raise AuthError(code="invalid_credentials")

        user = AuthUser(id=str(user_doc["_id"]), username=user_doc["username"])
        session = self.create_session_token(user)
        await asyncio.to_thread(
            self.db["sessions"].insert_one,
            {
                "token": session.token,
                "user_id": user.id,
                "created_at": datetime.now(timezone.utc),
                "expires_at": session.expires_at,
            },
        )
        self._token = session.token
        await self._emit(SessionEvent.signed_in(user))
        return session

    async def get_session(self) -> Optional[AuthSession]:
        """Current session if its token verifies and has not been revoked."""
        if not self._token:
            return None

        payload = self.verify_token(self._token)
        if not payload:
            return None

        record = await asyncio.to_thread(self.db["sessions"].find_one, {"token": self._token})
        if not record:
            return None

        user = AuthUser(id=payload["sub"], username=payload.get("username", ""))
        expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
        return AuthSession(user=user, token=self._token, expires_at=expires_at)

    async def refresh(self) -> Optional[AuthSession]:
        """Re-check the session and announce a sign-out if it is no longer valid."""
        session = await self.get_session()
        if session is None and self._token:
            self._token = None
            await self._emit(SessionEvent.signed_out())
        return session

    async def sign_out(self) -> None:
        token, self._token = self._token, None
        if token:
            await asyncio.to_thread(self.db["sessions"].delete_one, {"token": token})
        await self._emit(SessionEvent.signed_out())

    @staticmethod
    def _check_password(password: str, password_hash: Optional[str]) -> bool:
        try:
            return bcrypt.checkpw(password.encode(), password_hash.encode())
        except (ValueError, TypeError, AttributeError):
            return False
