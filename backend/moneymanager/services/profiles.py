import logging
import uuid
from typing import Callable, Dict, Any, Optional

from sqlalchemy.exc import IntegrityError

from moneymanager.config import settings
from moneymanager.models.schemas import Profile, Token
from moneymanager.services.auth import TokenService, get_password_hash, verify_password
from moneymanager.services.exceptions import AuthenticationError, ConflictError, NotFoundError

logger = logging.getLogger(__name__)

ACTIVATION_SUBJECT = "Activate your My Money account"


class ProfileDirectory:
    """Registration, activation and credential checks for profiles."""

    def __init__(self, db, token_service: TokenService, mailer=None, dispatch: Optional[Callable] = None):
        self.db = db
        self.token_service = token_service
        self.mailer = mailer
        # Runs mail delivery; the API passes BackgroundTasks.add_task so SMTP stays off the request
        self._dispatch = dispatch or (lambda func, *args: func(*args))

    @staticmethod
    def to_public(profile_doc: Dict[str, Any]) -> Profile:
        return Profile(**profile_doc)

    def register(
        self,
        full_name: str,
        email: str,
        raw_password: str,
        profile_image_url: Optional[str] = None,
    ) -> Profile:
        if self.db.exists("profiles", {"email": email}):
            raise ConflictError(f"Email {email} is already registered")

        activation_token = str(uuid.uuid4())
        profile_doc = {
            "full_name": full_name,
            "email": email,
            "password_hash": get_password_hash(raw_password),
            "profile_image_url": profile_image_url,
            "is_active": False,
            "activation_token": activation_token,
        }

        try:
            created = self.db.insert("profiles", profile_doc)
            self.db.commit()
        except IntegrityError:
            # Lost a race against a concurrent registration of the same email
            self.db.rollback()
            raise ConflictError(f"Email {email} is already registered")

        logger.info("Registered profile %s", created["id"])
        self._dispatch(self._send_activation_email, email, activation_token)
        return self.to_public(created)

    def _send_activation_email(self, email: str, activation_token: str):
        if self.mailer is None:
            return
        link = f"{settings.activation_base_url}?token={activation_token}"
        body = f"Click on the following link to activate your My Money account : {link}"
        try:
            result = self.mailer.send_email(email, ACTIVATION_SUBJECT, body)
        except Exception:
            # The profile is already committed; delivery problems must not undo it
            logger.exception("Activation email to %s raised", email)
            return
        if not result.get("success"):
            logger.warning("Activation email to %s not delivered: %s", email, result.get("error"))

    def activate(self, activation_token: str) -> bool:
        """
        Activate the profile holding the token. The token is consumed, so a
        second call with the same token returns False just like an unknown one.
        """
        if not activation_token:
            return False

        profile = self.db.find_one("profiles", {"activation_token": activation_token})
        if profile is None:
            return False

        self.db.update("profiles", profile["id"], {"is_active": True, "activation_token": None})
        self.db.commit()
        logger.info("Activated profile %s", profile["id"])
        return True

    def is_active(self, email: str) -> bool:
        profile = self.db.find_one("profiles", {"email": email})
        return bool(profile and profile.get("is_active"))

    def authenticate(self, email: str, raw_password: str) -> Token:
        profile = self.db.find_one("profiles", {"email": email})
        if not profile or not verify_password(raw_password, profile.get("password_hash")):
            raise AuthenticationError("Invalid email or password")

        token = self.token_service.issue(profile["email"])
        return Token(token=token, user=self.to_public(profile))

    def get_by_email(self, email: str) -> Profile:
        profile = self.db.find_one("profiles", {"email": email})
        if profile is None:
            raise NotFoundError(f"Profile not found with email: {email}")
        return self.to_public(profile)

    def get_current(self, identity: Profile) -> Profile:
        return self.get_by_email(identity.email)
