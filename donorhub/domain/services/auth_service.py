import os
from datetime import datetime, timedelta, timezone

import structlog
from dotenv import load_dotenv
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from donorhub.data.repositories.user_repository import (
    create_user,
    get_user,
    get_user_by_email,
)
from donorhub.domain.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from donorhub.domain.models import CurrentUser, User

load_dotenv()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    raise RuntimeError("SECRET_KEY environment variable is not set")

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 7 * 24 * 60))
MIN_PASSWORD_LENGTH = 8

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"

# auto_error=False so a missing header is reported as its own error code.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)

logger = structlog.get_logger()


def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    return pwd_context.hash(password)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def create_access_token(data: dict, expires_delta: timedelta | None = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def create_user_token(user: User, expires_delta: timedelta | None = None) -> str:
    return create_access_token(
        data={"sub": str(user.id), "email": user.email}, expires_delta=expires_delta
    )


def decode_access_token(token: str) -> CurrentUser:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise AuthenticationError(
            "Your session has expired. Please log in again.",
            code="auth.token_expired",
        )
    except JWTError:
        raise AuthenticationError(
            "The provided token is invalid or malformed.", code="auth.invalid_token"
        )
    subject = payload.get("sub")
    email = payload.get("email")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        user_id = None
    if user_id is None or not email:
        raise AuthenticationError(
            "The provided token is invalid or malformed.", code="auth.invalid_token"
        )
    return CurrentUser(id=user_id, email=email)


def get_current_user(token: str | None = Depends(oauth2_scheme)) -> CurrentUser:
    if not token:
        raise AuthenticationError(
            "Authorization header with Bearer token is required",
            code="auth.missing_token",
        )
    try:
        return decode_access_token(token)
    except AuthenticationError as e:
        logger.warning("Token verification failed", code=e.code)
        raise


def authenticate_user(db: Session, email: str, password: str) -> User | None:
    user = get_user_by_email(db, normalize_email(email))
    if not user or not verify_password(password, user.hashed_password):
        return None
    return user


def login_user(db: Session, email: str, password: str) -> tuple[User, str]:
    user = authenticate_user(db, email, password)
    if not user:
        # Same message for unknown email and wrong password.
        logger.warning("Login failed")
        raise AuthenticationError(
            INVALID_CREDENTIALS_MESSAGE, code="auth.invalid_credentials"
        )
    return user, create_user_token(user)


def register_user(db: Session, email: str, password: str, name: str) -> tuple[User, str]:
    email = normalize_email(email)
    name = name.strip()
    if not name:
        raise ValidationError("Name is required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )
    if get_user_by_email(db, email):
        raise ConflictError("User with this email already exists", code="user.email_taken")
    user = create_user(db, email, name, get_password_hash(password))
    logger.info("User registered", user_id=user.id)
    return user, create_user_token(user)


def get_profile(db: Session, current_user: CurrentUser) -> User:
    user = get_user(db, current_user.id)
    if user is None:
        raise NotFoundError("User not found", code="user.not_found")
    return user
