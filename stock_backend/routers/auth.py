import json

from fastapi import APIRouter, Depends, HTTPException, Request, status

from stock_backend.dependencies import get_auth_service, get_current_user_id
from stock_backend.errors import EmailAlreadyExists, StockBackendError, ValidationError
from stock_backend.schemas.auth import (
    LoginRequest,
    LoginResponse,
    LogoutRequest,
    MessageResponse,
    RefreshRequest,
    RefreshResponse,
    SignupRequest,
)
from stock_backend.services.auth_service import AuthService
from stock_backend.utils.logger import create_logger

logger = create_logger(__name__)
router = APIRouter(prefix="/v1", tags=["Auth"])


def client_ip(request: Request) -> str:
    return request.client.host if request.client else ""


@router.post(
    "/signup",
    status_code=status.HTTP_201_CREATED,
    response_model=MessageResponse,
    summary="Register a new user",
    responses={409: {"description": "Signup failed (e.g. email already registered)."}},
)
def signup(
    body: SignupRequest,
    request: Request,
    auth: AuthService = Depends(get_auth_service),
):
    """
    Registers a user with email and password.

    The failure response never says whether the email exists.
    """
    try:
        auth.signup(body.email, body.password)
    except (EmailAlreadyExists, ValidationError) as e:
        logger.warning(
            json.dumps({"event": "signup_failed", "error": str(e), "remote_addr": client_ip(request)})
        )
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="signup failed")

    logger.info(json.dumps({"event": "signup_successful", "remote_addr": client_ip(request)}))
    return {"message": "ok"}


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Authenticate and open a session",
    responses={401: {"description": "Invalid email or password."}},
)
def login(
    body: LoginRequest,
    request: Request,
    auth: AuthService = Depends(get_auth_service),
):
    """
    Verifies credentials and returns an access token and a refresh token.
    """
    try:
        result = auth.login(
            body.email,
            body.password,
            user_agent=request.headers.get("user-agent", ""),
            ip_address=client_ip(request),
        )
    except StockBackendError as e:
        logger.warning(
            json.dumps({"event": "login_failed", "error": str(e), "remote_addr": client_ip(request)})
        )
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid email or password")

    logger.info(json.dumps({"event": "login_successful", "remote_addr": client_ip(request)}))
    return LoginResponse(
        access_token=result.access_token,
        refresh_token=result.refresh_token,
        expires_in=result.expires_in,
        token_type=result.token_type,
    )


@router.post(
    "/refresh",
    response_model=RefreshResponse,
    summary="Rotate a refresh token",
    responses={401: {"description": "Invalid, revoked or expired refresh token."}},
)
def refresh(
    body: RefreshRequest,
    request: Request,
    auth: AuthService = Depends(get_auth_service),
):
    """
    Revokes the presented refresh token and issues a new token pair.
    """
    try:
        result = auth.refresh_token(
            body.refresh_token,
            user_agent=request.headers.get("user-agent", ""),
            ip_address=client_ip(request),
        )
    except StockBackendError as e:
        logger.warning(
            json.dumps({"event": "refresh_failed", "error": str(e), "remote_addr": client_ip(request)})
        )
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid refresh token")

    logger.info(json.dumps({"event": "refresh_successful", "remote_addr": client_ip(request)}))
    return RefreshResponse(
        access_token=result.access_token,
        refresh_token=result.refresh_token,
        expires_in=result.expires_in,
    )


@router.post("/logout", response_model=MessageResponse, summary="Revoke a refresh token")
def logout(
    body: LogoutRequest,
    request: Request,
    auth: AuthService = Depends(get_auth_service),
):
    """
    Always answers 200 so that callers cannot tell which tokens exist.
    """
    auth.logout(body.refresh_token)
    logger.info(json.dumps({"event": "logout", "remote_addr": client_ip(request)}))
    return {"message": "logged out"}


@router.post("/logout-all", response_model=MessageResponse, summary="Revoke every session of the user")
def logout_all(
    user_id: int = Depends(get_current_user_id),
    auth: AuthService = Depends(get_auth_service),
):
    auth.logout_all(user_id)
    logger.info(json.dumps({"event": "logout_all", "user_id": user_id}))
    return {"message": "logged out everywhere"}
