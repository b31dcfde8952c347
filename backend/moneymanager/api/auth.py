from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from slowapi import Limiter
from slowapi.util import get_remote_address

from moneymanager.config import settings
from moneymanager.database.connection import get_db as get_session
from moneymanager.database.db_service import get_db_service
from moneymanager.models.schemas import Message, Profile, ProfileCreate, ProfileLogin, Token
from moneymanager.services.auth import TokenService, get_token_service, resolve_identity
from moneymanager.services.email_service import get_mailer
from moneymanager.services.exceptions import InactiveAccountError, NotFoundError
from moneymanager.services.profiles import ProfileDirectory

router = APIRouter(tags=["authentication"])

# Security: rate limiter against brute force on the public credential routes
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)


async def authenticate_request(
    request: Request,
    session: Session = Depends(get_session),
    token_service: TokenService = Depends(get_token_service),
) -> Optional[Profile]:
    """
    Resolve the caller from the Authorization header and bind it to the request.

    A missing, non-Bearer or invalid token leaves the request anonymous; it is
    up to the route to require an identity.
    """
    bound = getattr(request.state, "profile", None)
    if bound is not None:
        return bound

    profile_doc = resolve_identity(
        request.headers.get("Authorization"),
        get_db_service(session),
        token_service,
    )
    if profile_doc is None:
        return None

    profile = Profile(**profile_doc)
    request.state.profile = profile
    return profile


async def get_current_profile(profile: Optional[Profile] = Depends(authenticate_request)) -> Profile:
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return profile


def get_profile_directory(
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    token_service: TokenService = Depends(get_token_service),
    mailer=Depends(get_mailer),
) -> ProfileDirectory:
    return ProfileDirectory(get_db_service(session), token_service, mailer, dispatch=background_tasks.add_task)


@router.post("/register", response_model=Profile, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.REGISTER_RATE_LIMIT)
async def register(
    request: Request,
    profile: ProfileCreate,
    directory: ProfileDirectory = Depends(get_profile_directory),
):
    return directory.register(
        full_name=profile.full_name,
        email=profile.email,
        raw_password=profile.password,
        profile_image_url=profile.profile_image_url,
    )


@router.get("/activate", response_model=Message)
async def activate(token: str = "", directory: ProfileDirectory = Depends(get_profile_directory)):
    if not directory.activate(token):
        raise NotFoundError("Activation token not found or already used")
    return Message(message="Profile activated successfully")


@router.post("/login", response_model=Token)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    credentials: ProfileLogin,
    directory: ProfileDirectory = Depends(get_profile_directory),
):
    if not directory.is_active(credentials.email):
        raise InactiveAccountError("Account is not active. Please activate your account first.")
    return directory.authenticate(credentials.email, credentials.password)


@router.get("/profile", response_model=Profile)
async def read_profile(
    current_profile: Profile = Depends(get_current_profile),
    directory: ProfileDirectory = Depends(get_profile_directory),
):
    return directory.get_current(current_profile)
