"""
Password hashing, bearer token issuance/validation and request identity resolution.
"""
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Dict, Any
import logging

import jwt
from passlib.context import CryptContext

from moneymanager.config import settings
from moneymanager.services.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

BEARER_PREFIX = "Bearer "


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Unknown or malformed hash format
        return False


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """Signed, time-limited bearer tokens carrying an email subject (HMAC-SHA256 JWT)."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expires_delta: timedelta = timedelta(hours=10),
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expires_delta = expires_delta
        self._clock = clock

    def issue(self, subject: str) -> str:
        issued_at = self._clock()
        payload = {
            "sub": subject,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.expires_delta).timestamp()),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def _decode(self, token: str) -> Dict[str, Any]:
        try:
            # Expiry is checked against our own clock below
            claims = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"verify_exp": False, "verify_iat": False, "require": ["sub", "exp"]},
            )
        except jwt.InvalidTokenError as exc:
            logger.debug("Rejected bearer token: %s", exc)
            raise AuthenticationError() from exc

        if self._clock().timestamp() >= claims["exp"]:
            logger.debug("Rejected expired bearer token for %s", claims.get("sub"))
            raise AuthenticationError("Token has expired")
        return claims

    def extract_subject(self, token: str) -> str:
        """Return the verified subject; raises AuthenticationError on any failure."""
        subject = self._decode(token).get("sub")
        if not isinstance(subject, str) or not subject:
            raise AuthenticationError()
        return subject

    def validate(self, token: str, expected_subject: str) -> bool:
        try:
            return self.extract_subject(token) == expected_subject
        except AuthenticationError:
            return False


def get_token_service() -> TokenService:
    return TokenService(
        secret_key=settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token of a 'Bearer <token>' header value, None for anything else."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


def resolve_identity(authorization: Optional[str], db, token_service: TokenService) -> Optional[Dict[str, Any]]:
    """
    Resolve the profile a request acts for.

    Returns the stored profile document when the header carries a valid bearer
    token whose subject matches an existing profile, None otherwise. Never raises
    for a bad token: an unresolved request simply stays anonymous.
    """
    token = extract_bearer_token(authorization)
    if token is None:
        return None

    try:
        email = token_service.extract_subject(token)
    except AuthenticationError:
        return None

    profile = db.find_one("profiles", {"email": email})
    if profile is None:
        logger.debug("Bearer token subject %s has no profile", email)
        return None

    if not token_service.validate(token, profile["email"]):
        return None
    return profile
