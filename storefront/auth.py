import logging
from typing import Optional

from passlib.context import CryptContext
from pydantic import ValidationError

from .config import Settings
from .errors import (
    DuplicateUser,
    InvalidCredentials,
    MalformedSessionMarker,
    StorefrontError,
    StoreUninitialized,
)
from .schemas import AuthResult, SessionUser

logger = logging.getLogger(__name__)

# bcrypt at cost 10 for new hashes; pbkdf2_sha256 hashes still verify
pwd_context = CryptContext(schemes=["bcrypt", "pbkdf2_sha256"], deprecated="auto", bcrypt__rounds=10)


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    if rounds is None:
        return pwd_context.hash(password)
    return pwd_context.handler().using(rounds=rounds).hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        # unrecognized or corrupt hash
        return False


class AuthService:
    """Register, authenticate and restore the session against the local store.

    The session is either anonymous (``current_user`` is None) or
    authenticated. It is held in memory and mirrored to the session marker in
    local storage. Public operations return an :class:`AuthResult` and never
    raise.
    """

    def __init__(self, store, storage, settings: Settings):
        self.store = store
        self.storage = storage
        self.settings = settings
        self.current_user: Optional[SessionUser] = None

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    def is_admin(self) -> bool:
        return self.current_user is not None and self.current_user.role == "admin"

    def _find_user(self, email: str):
        rows = self.store.execute(
            "SELECT id, email, password_hash, role FROM users WHERE email = :email",
            {"email": email},
        )
        return rows[0] if rows else None

    def _establish(self, user: SessionUser):
        self.current_user = user
        self.storage.set_item(self.settings.session_key, user.model_dump_json())

    def register(self, email: str, password: str) -> AuthResult:
        try:
            if not self.store.ready:
                raise StoreUninitialized()
            if self._find_user(email) is not None:
                raise DuplicateUser()

            hashed = hash_password(password, rounds=self.settings.bcrypt_rounds)
            self.store.execute(
                "INSERT INTO users (email, password_hash, role) VALUES (:email, :password_hash, 'user')",
                {"email": email, "password_hash": hashed},
            )
            row = self._find_user(email)
            if row is None:
                raise StorefrontError("Registration failed. Please try again.")

            user = SessionUser(id=row[0], email=row[1], role=row[3])
            self._establish(user)
            logger.info("Registered user %s", user.email)
            return AuthResult(success=True, user=user)
        except StorefrontError as e:
            return AuthResult(success=False, error=str(e))

    def login(self, email: str, password: str) -> AuthResult:
        try:
            if not self.store.ready:
                raise StoreUninitialized()
            row = self._find_user(email)
            if row is None:
                raise InvalidCredentials()
            user_id, user_email, hashed, role = row
            if not verify_password(password, hashed):
                raise InvalidCredentials()

            user = SessionUser(id=user_id, email=user_email, role=role)
            self._establish(user)
            return AuthResult(success=True, user=user)
        except StorefrontError as e:
            return AuthResult(success=False, error=str(e))

    def logout(self):
        self.current_user = None
        self.storage.remove_item(self.settings.session_key)

    def restore_session(self) -> Optional[SessionUser]:
        """Restore the session from its marker once the store is ready.

        A malformed marker is discarded. With ``revalidate_session`` on, a
        marker that no longer matches a users row is discarded as well.
        """
        if not self.store.ready:
            return None
        raw = self.storage.get_item(self.settings.session_key)
        if raw is None:
            return None
        try:
            user = SessionUser.model_validate_json(raw)
        except ValidationError:
            logger.warning("%s, discarding it", MalformedSessionMarker.message)
            self.storage.remove_item(self.settings.session_key)
            return None

        if self.settings.revalidate_session:
            row = self._find_user(user.email)
            if row is None or (row[0], row[1], row[3]) != (user.id, user.email, user.role):
                logger.warning("Discarding stale session marker for %s", user.email)
                self.storage.remove_item(self.settings.session_key)
                return None

        self.current_user = user
        return user
