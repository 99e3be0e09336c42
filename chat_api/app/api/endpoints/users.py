"""
User endpoints.

Provide signup, login, lookup, deletion and password reset.  Bodies
are validated here before the service is called: a missing or
incomplete body is answered with ``400 Invalid user body`` in plain
text.  Service errors are answered with ``{"error": ...}`` and the
status code matching the error kind.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, status

from ...core.errors import (
    InvalidCredentialsError,
    NotFoundError,
    ServiceError,
    UsernameExistsError,
)
from ...schemas.user import SafeUser, UserCredentials
from ...services.user_service import UserService
from ..deps import get_user_service
from ..responses import error_response, invalid_body, read_json_body


logger = logging.getLogger(__name__)

router = APIRouter()

INVALID_USER_BODY = "Invalid user body"
INTERNAL_ERROR = "Internal server error"


def is_user_body_valid(body: Any) -> bool:
    """Check that the body carries a non-blank username and a non-empty password."""
    if not isinstance(body, dict):
        return False
    username = body.get("username")
    password = body.get("password")
    return (
        isinstance(username, str)
        and isinstance(password, str)
        and len(username.strip()) > 0
        and len(password) > 0
    )


def is_reset_body_valid(body: Any) -> bool:
    """Like ``is_user_body_valid`` but a whitespace username is passed on to the lookup."""
    if not isinstance(body, dict):
        return False
    username = body.get("username")
    password = body.get("password")
    return isinstance(username, str) and isinstance(password, str) and bool(username) and bool(password)


@router.post("/signup", response_model=SafeUser)
async def create_user(request: Request, service: UserService = Depends(get_user_service)) -> Any:
    """Create a new user account.

    Answers 400 when the username is taken and 500 on any other
    failure.  The returned user never contains the password.
    """
    try:
        body = await read_json_body(request)
        if not is_user_body_valid(body):
            return invalid_body(INVALID_USER_BODY)
        credentials = UserCredentials(username=body["username"], password=body["password"])
        return await service.create_user(credentials)
    except UsernameExistsError as exc:
        return error_response(status.HTTP_400_BAD_REQUEST, exc.message)
    except ServiceError as exc:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)
    except Exception:
        logger.exception("Unexpected error during signup")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR)


@router.post("/login", response_model=SafeUser)
async def user_login(request: Request, service: UserService = Depends(get_user_service)) -> Any:
    """Check a username and password and return the user on success."""
    try:
        body = await read_json_body(request)
        if not is_user_body_valid(body):
            return invalid_body(INVALID_USER_BODY)
        credentials = UserCredentials(username=body["username"], password=body["password"])
        return await service.login_user(credentials)
    except InvalidCredentialsError as exc:
        return error_response(status.HTTP_401_UNAUTHORIZED, exc.message)
    except ServiceError as exc:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)
    except Exception:
        logger.exception("Unexpected error during login")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR)


@router.get("/getUser/{username}", response_model=SafeUser)
async def get_user(username: str, service: UserService = Depends(get_user_service)) -> Any:
    """Retrieve a user by username."""
    try:
        if not username:
            return error_response(status.HTTP_400_BAD_REQUEST, "Username is required")
        return await service.get_user_by_username(username)
    except NotFoundError as exc:
        return error_response(status.HTTP_404_NOT_FOUND, exc.message)
    except ServiceError as exc:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)
    except Exception:
        logger.exception("Unexpected error while fetching user %s", username)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR)


@router.delete("/deleteUser/{username}", response_model=SafeUser)
async def delete_user(username: str, service: UserService = Depends(get_user_service)) -> Any:
    """Delete a user by username and return the deleted record."""
    try:
        if not username:
            return error_response(status.HTTP_400_BAD_REQUEST, "Username is required")
        return await service.delete_user_by_username(username)
    except NotFoundError as exc:
        return error_response(status.HTTP_404_NOT_FOUND, exc.message)
    except ServiceError as exc:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)
    except Exception:
        logger.exception("Unexpected error while deleting user %s", username)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR)


@router.patch("/resetPassword", response_model=SafeUser)
async def reset_password(request: Request, service: UserService = Depends(get_user_service)) -> Any:
    """Set a new password for a user.

    The body carries the username and the new password.  Only the
    password is changed even though the service accepts any subset of
    fields.
    """
    try:
        body = await read_json_body(request)
        if not is_reset_body_valid(body):
            return invalid_body(INVALID_USER_BODY)
        return await service.update_user(body["username"], {"password": body["password"]})
    except NotFoundError as exc:
        return error_response(status.HTTP_404_NOT_FOUND, exc.message)
    except ServiceError as exc:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)
    except Exception:
        logger.exception("Unexpected error during password reset")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR)
