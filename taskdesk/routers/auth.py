"""Authentication router: registration, login and the caller's profile."""
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from taskdesk.db.config import get_session
from taskdesk.middleware.auth import CurrentUser, create_access_token, get_current_user
from taskdesk.schemas.auth import (
    AuthResponse,
    LoginRequest,
    ProfileUpdate,
    RegisterRequest,
    UserEnvelope,
    UserMessageEnvelope,
    UserResponse,
)
from taskdesk.services.user_service import UserService

router = APIRouter(prefix="/auth", tags=["Authentication"])


def get_user_service(session: Session = Depends(get_session)) -> UserService:
    return UserService(session)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(request: RegisterRequest, service: UserService = Depends(get_user_service)):
    user = service.register(request)
    return AuthResponse(
        message="Registration successful",
        token=create_access_token(user),
        user=UserResponse.from_user(user),
    )


@router.post("/login", response_model=AuthResponse)
def login(request: LoginRequest, service: UserService = Depends(get_user_service)):
    user = service.authenticate(request)
    return AuthResponse(
        message="Login successful",
        token=create_access_token(user),
        user=UserResponse.from_user(user),
    )


@router.get("/profile", response_model=UserEnvelope)
def get_profile(
    current_user: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    return UserEnvelope(user=UserResponse.from_user(service.get(current_user.user_id)))


@router.put("/profile", response_model=UserMessageEnvelope)
def update_profile(
    request: ProfileUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    user = service.update_profile(current_user.user_id, request)
    return UserMessageEnvelope(message="Profile updated successfully", user=UserResponse.from_user(user))
