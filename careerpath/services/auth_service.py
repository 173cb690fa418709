import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import JWTError, jwt

from careerpath.config import Settings
from careerpath.errors import AuthError, ValidationError
from careerpath.models import AuthResponse
from careerpath.services.user_store import UserStore

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


class TokenService:
    """Issues and checks session tokens. Needs only the signing settings."""

    def __init__(self, settings: Settings):
        self.secret = settings.jwt_secret
        self.algorithm = settings.jwt_algorithm
        self.token_lifetime = timedelta(days=settings.token_expire_days)

    def create_token(self, user_id: str, issued_at: Optional[datetime] = None) -> str:
        """
        Issue a session token for a user.
        Returns: signed JWT carrying userId, iat and exp (iat + token lifetime)
        """
        issued_at = issued_at or datetime.now(timezone.utc)
        claims = {
            "userId": user_id,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.token_lifetime).timestamp()),
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def verify_token(self, token: str) -> str:
        """
        Verify a session token.
        Returns: the user id embedded in the token
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError as e:
            logger.info("Token rejected", extra={"reason": str(e)})
            raise AuthError("Invalid token")

        user_id = payload.get("userId")
        if not user_id:
            raise AuthError("Invalid token")
        return str(user_id)


class AuthService:
    def __init__(self, settings: Settings, user_store: UserStore):
        self.user_store = user_store
        self.tokens = TokenService(settings)
        self.rounds = settings.bcrypt_rounds
        # compared against when the email is unknown so both failures cost a hash check
        self._dummy_hash = self.hash_password("careerpath-dummy-password")

    # --- Passwords ---

    def hash_password(self, password: str) -> str:
        return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(self.rounds)).decode("utf-8")

    def verify_password(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
        except ValueError:
            # stored value is not a bcrypt hash
            return False

    # --- Tokens ---

    def create_token(self, user_id: str, issued_at: Optional[datetime] = None) -> str:
        return self.tokens.create_token(user_id, issued_at)

    def verify_token(self, token: str) -> str:
        return self.tokens.verify_token(token)

    # --- Operations ---

    def signup(self, username: Optional[str], email: Optional[str], password: Optional[str]) -> AuthResponse:
        if not (username and username.strip()) or not (email and email.strip()) or not password:
            raise ValidationError("All fields required")

        user = self.user_store.create(
            username=username.strip(),
            email=email,
            password_hash=self.hash_password(password),
        )
        logger.info("User signed up", extra={"user_id": user.id})
        return AuthResponse(token=self.create_token(user.id), user_id=user.id)

    def login(self, email: Optional[str], password: Optional[str]) -> AuthResponse:
        if not email or not password:
            raise ValidationError(INVALID_CREDENTIALS)

        user = self.user_store.find_by_email(email)
        if user is None:
            self.verify_password(password, self._dummy_hash)
            raise ValidationError(INVALID_CREDENTIALS)

        if not self.verify_password(password, user.password_hash):
            raise ValidationError(INVALID_CREDENTIALS)

        logger.info("User logged in", extra={"user_id": user.id})
        return AuthResponse(token=self.create_token(user.id), user_id=user.id)
