"""Authentication endpoints."""

from fastapi import APIRouter, Request, Response, status

from app.config import Settings
from app.dependencies import AppSettings, CurrentUser, DatabaseSession, Store
from app.schemas.auth import (
    AccessTokenResponse,
    AuthStatusResponse,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
)
from app.schemas.common import ApiResponse, MessageResponse
from app.schemas.users import UserSummary
from app.services.auth_service import AuthService

router = APIRouter()


def set_refresh_cookie(response: Response, token: str, settings: Settings) -> None:
    """Attach the refresh token as an HTTP-only cookie."""
    response.set_cookie(
        key=settings.refresh_cookie_name,
        value=token,
        max_age=settings.refresh_token_expire_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


@router.post(
    "/register",
    response_model=ApiResponse[LoginResponse],
    status_code=status.HTTP_201_CREATED,
    tags=["Authentication"],
    summary="Register a patient or doctor",
)
async def register(
    data: RegisterRequest,
    response: Response,
    db: DatabaseSession,
    store: Store,
    settings: AppSettings,
) -> ApiResponse[LoginResponse]:
    """
    Register a new account and sign it in.

    Doctors must supply ``doctorLicense``. The refresh token is set as an
    HTTP-only cookie; the access token is returned in the body.
    """
    login, refresh_token = await AuthService(store).register(db, data)
    set_refresh_cookie(response, refresh_token, settings)
    return ApiResponse(data=login)


@router.post(
    "/login",
    response_model=ApiResponse[LoginResponse],
    status_code=status.HTTP_200_OK,
    tags=["Authentication"],
    summary="Login with email and password",
)
async def login(
    data: LoginRequest,
    response: Response,
    db: DatabaseSession,
    store: Store,
    settings: AppSettings,
) -> ApiResponse[LoginResponse]:
    """
    Login with email (``username``) and password.

    Args:
        data: Credentials
        response: Response used to set the refresh cookie
        db: Database session
        store: Key/value store
        settings: Application settings

    Returns:
        Access token and user summary
    """
    login_response, refresh_token = await AuthService(store).login(db, data)
    set_refresh_cookie(response, refresh_token, settings)
    return ApiResponse(data=login_response)


@router.post(
    "/refresh",
    response_model=ApiResponse[AccessTokenResponse],
    status_code=status.HTTP_200_OK,
    tags=["Authentication"],
    summary="Refresh access token",
)
async def refresh(
    request: Request,
    db: DatabaseSession,
    store: Store,
    settings: AppSettings,
) -> ApiResponse[AccessTokenResponse]:
    """Issue a new access token from the refresh cookie."""
    token = request.cookies.get(settings.refresh_cookie_name)
    access_token = await AuthService(store).refresh(db, token)
    return ApiResponse(data=AccessTokenResponse(access_token=access_token))


@router.post(
    "/logout",
    response_model=ApiResponse[MessageResponse],
    status_code=status.HTTP_200_OK,
    tags=["Authentication"],
    summary="Logout",
)
async def logout(
    request: Request,
    response: Response,
    store: Store,
    settings: AppSettings,
) -> ApiResponse[MessageResponse]:
    """Revoke the refresh token and clear its cookie."""
    AuthService(store).revoke_token(request.cookies.get(settings.refresh_cookie_name))
    response.delete_cookie(settings.refresh_cookie_name)
    return ApiResponse(data=MessageResponse(message="Logged out successfully"))


@router.get(
    "/status",
    response_model=ApiResponse[AuthStatusResponse],
    status_code=status.HTTP_200_OK,
    tags=["Authentication"],
    summary="Authentication status",
)
async def auth_status(current_user: CurrentUser) -> ApiResponse[AuthStatusResponse]:
    """Return the authenticated user."""
    return ApiResponse(
        data=AuthStatusResponse(
            authenticated=True,
            user=UserSummary.model_validate(current_user),
        )
    )
