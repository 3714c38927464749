from __future__ import annotations

from fastapi import Depends, HTTPException, status, Request
import jwt
from sqlalchemy.orm import Session

from . import crud, models, security
from .database import get_db
from .errors import BadRequestError


def authenticate_user(db: Session, email: str, password: str) -> models.User | None:
    """
    Authenticates a user by email and password.

    In FastAPI, the `OAuth2PasswordRequestForm` uses the field name `username`,
    but we are using it to hold the user's email address.

    Returns the user object if authentication is successful, otherwise None.
    """
    user = crud.get_user_by_email(db, email)
    if not user or not security.verify_password(password, user.hashed_password):
        return None
    return user


def get_token_from_cookie_or_header(request: Request) -> str | None:
    """Extract token from either Authorization header or access_token cookie"""
    authorization = request.headers.get("Authorization")
    if authorization and authorization.startswith("Bearer "):
        return authorization[7:]

    cookie_token = request.cookies.get("access_token")
    if cookie_token and cookie_token.startswith("Bearer "):
        return cookie_token[7:]

    return None


def get_current_user(
    request: Request, db: Session = Depends(get_db)
) -> models.User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    token = get_token_from_cookie_or_header(request)
    if not token:
        raise credentials_exception

    try:
        email = security.decode_access_token(token)
        if email is None:
            raise credentials_exception
    except jwt.PyJWTError:
        raise credentials_exception
    user = crud.get_user_by_email(db, email=email)
    if user is None:
        raise credentials_exception
    return user


def get_writable_user(current_user: models.User = Depends(get_current_user)) -> models.User:
    """
    Read-only guard for mutating endpoints.

    The demo account may browse but never create, edit or delete; it is turned
    away here, before the endpoint body runs.
    """
    if current_user.is_test_user:
        raise BadRequestError("Test user is in Read-Only mode")
    return current_user
