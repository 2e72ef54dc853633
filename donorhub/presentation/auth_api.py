from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import EmailStr, Field
from sqlalchemy.orm import Session

from donorhub.domain.models import CurrentUser, User
from donorhub.domain.services.auth_service import (
    get_current_user,
    get_profile,
    login_user,
    register_user,
)
from donorhub.presentation.dependencies import get_db
from donorhub.presentation.schemas import CamelModel, DataResponse, MessageResponse

router = APIRouter(prefix="/api/auth", tags=["auth"])


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)


class LoginRequest(CamelModel):
    # Plain str: a malformed address fails like any other bad credential.
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserResponse(CamelModel):
    # No password field: hashes never leave the service layer.
    id: int
    email: str
    name: str
    created_at: Optional[datetime] = None

    @staticmethod
    def from_domain(user: User) -> "UserResponse":
        return UserResponse(
            id=user.id, email=user.email, name=user.name, created_at=user.created_at
        )


class SessionResponse(CamelModel):
    user: UserResponse
    token: str
    token_type: str = "bearer"


@router.post(
    "/register",
    response_model=DataResponse[SessionResponse],
    status_code=status.HTTP_201_CREATED,
)
def register_user_endpoint(req: RegisterRequest, db: Session = Depends(get_db)):
    user, token = register_user(db, req.email, req.password, req.name)
    return DataResponse[SessionResponse](
        data=SessionResponse(user=UserResponse.from_domain(user), token=token),
        message="User registered successfully",
    )


@router.post("/login", response_model=DataResponse[SessionResponse])
def login_endpoint(req: LoginRequest, db: Session = Depends(get_db)):
    user, token = login_user(db, req.email, req.password)
    return DataResponse[SessionResponse](
        data=SessionResponse(user=UserResponse.from_domain(user), token=token),
        message="Login successful",
    )


@router.post("/logout", response_model=MessageResponse)
def logout_endpoint():
    # Tokens are stateless; the client discards its copy.
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=DataResponse[UserResponse])
def read_users_me(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return DataResponse[UserResponse](
        data=UserResponse.from_domain(get_profile(db, current_user))
    )
