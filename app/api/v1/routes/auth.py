"""
Authentication Routes
=====================
Registration and login.
"""
import logging

from fastapi import APIRouter, Depends, status
from fastapi.concurrency import run_in_threadpool

from healthmonitor.auth import JWTHandler, PasswordHandler, Role
from healthmonitor.database import DataStore, NewUser
from healthmonitor.errors import DuplicateEmail, InvalidCredentials
from healthmonitor.vitals import baseline_sample

from app.config import Settings
from app.core.security import hash_password, verify_password
from app.core.utils import run_with_timeout
from app.models.schemas import LoginRequest, LoginResponse, RegisterRequest, UserResponse
from app.services.database import get_jwt_handler, get_password_handler, get_settings_dep, get_store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED,
             response_model_by_alias=True)
async def register(
    request: RegisterRequest,
    store: DataStore = Depends(get_store),
    password_handler: PasswordHandler = Depends(get_password_handler),
    settings: Settings = Depends(get_settings_dep),
):
    """Create an account. Patients are seeded with one baseline vital sample."""
    if await run_in_threadpool(store.get_user_by_email, request.email) is not None:
        raise DuplicateEmail()

    password_hash = await hash_password(password_handler, request.password, settings)
    user = await run_in_threadpool(store.create_user, NewUser(
        email=request.email,
        phone=request.phone,
        password_hash=password_hash,
        blood_group=request.blood_group.value,
        custom_blood_group=request.custom_blood_group,
        gender=request.gender,
        role=request.role,
    ))

    if user.role == Role.PATIENT:
        await run_in_threadpool(store.create_vital_sample, baseline_sample(user.id))

    logger.info(f"Registered {user.role.value} {user.id}")
    return UserResponse.model_validate(user)


@router.post("/login", response_model=LoginResponse, response_model_by_alias=True)
async def login(
    request: LoginRequest,
    store: DataStore = Depends(get_store),
    password_handler: PasswordHandler = Depends(get_password_handler),
    jwt_handler: JWTHandler = Depends(get_jwt_handler),
    settings: Settings = Depends(get_settings_dep),
):
    """Exchange credentials for a bearer token."""
    user = await run_in_threadpool(store.get_user_by_email, request.email)
    if user is None:
        await run_with_timeout(
            password_handler.dummy_verify, request.password,
            timeout=settings.PASSWORD_HASH_TIMEOUT_SECONDS,
            description="Password verification",
        )
        logger.warning("Login failed: unknown email")
        raise InvalidCredentials()

    password_ok = await verify_password(password_handler, request.password, user.password_hash, settings)
    if not password_ok or user.role != request.role:
        logger.warning(f"Login failed for user {user.id}")
        raise InvalidCredentials()

    token = jwt_handler.issue_token(user.id, user.role)
    logger.info(f"User {user.id} logged in")
    return LoginResponse(
        token=token,
        user_id=user.id,
        role=user.role,
        user=UserResponse.model_validate(user),
    )
