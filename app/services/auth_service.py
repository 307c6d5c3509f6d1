"""Authentication service for password login and JWT tokens."""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidCredentialsException, UnauthorizedException
from app.core.redis_client import RedisStore
from app.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    token_subject,
    verify_password,
)
from app.schemas.auth import LoginRequest, LoginResponse, RegisterRequest
from app.schemas.users import UserSummary
from app.services.user_service import UserService

logger = structlog.get_logger(__name__)

# Blacklist entries outlive any refresh token
REVOKED_TOKEN_TTL = 86400 * 30


class AuthService:
    """Authentication service for registration, login and token handling."""

    def __init__(self, store: RedisStore):
        """Initialize auth service with the key/value store used for revocation."""
        self.store = store

    @staticmethod
    def create_tokens(user: dict) -> tuple[str, str]:
        """
        Create access and refresh tokens for a user.

        Args:
            user: User row

        Returns:
            Tuple of (access token, refresh token)
        """
        claims = {"sub": str(user["id"]), "role": user["role"]}
        return create_access_token(claims), create_refresh_token(claims)

    def _login_response(self, user: dict) -> tuple[LoginResponse, str]:
        access_token, refresh_token = self.create_tokens(user)
        response = LoginResponse(
            access_token=access_token,
            user=UserSummary.model_validate(user),
        )
        return response, refresh_token

    async def register(self, db: AsyncSession, data: RegisterRequest) -> tuple[LoginResponse, str]:
        """
        Register a patient or doctor and sign them in.

        Returns:
            Login payload and the refresh token for the cookie

        Raises:
            UserExistsException: If the email is already registered
        """
        user = await UserService.create_user(
            db,
            email=data.email,
            password=data.password,
            role=data.role,
            doctor_license=data.doctor_license,
            profile=data.profile,
        )
        await UserService.update_last_login(db, user["id"])

        logger.info("user_registered", user_id=str(user["id"]), role=user["role"])
        return self._login_response(user)

    async def login(self, db: AsyncSession, data: LoginRequest) -> tuple[LoginResponse, str]:
        """
        Authenticate with email and password.

        Raises:
            InvalidCredentialsException: If the email is unknown, the password
                is wrong or the account is deactivated
        """
        user = await UserService.get_user_by_email(db, data.username)

        if not user or not verify_password(data.password, user["password_hash"]):
            logger.info("login_failed", username=data.username)
            raise InvalidCredentialsException()

        if not user["is_active"]:
            raise InvalidCredentialsException("Account is deactivated")

        await UserService.update_last_login(db, user["id"])

        logger.info("user_logged_in", user_id=str(user["id"]))
        return self._login_response(user)

    async def refresh(self, db: AsyncSession, refresh_token: str | None) -> str:
        """
        Issue a new access token from a refresh token.

        Raises:
            UnauthorizedException: If the token is missing, invalid, revoked or
                belongs to an unknown or inactive user
        """
        if not refresh_token:
            raise UnauthorizedException("Refresh token required")

        payload = decode_refresh_token(refresh_token)
        user_id = token_subject(payload) if payload else None
        if user_id is None:
            raise UnauthorizedException("Invalid refresh token")

        if self.store.exists(f"blacklist:{refresh_token}"):
            raise UnauthorizedException("Token has been revoked")

        # Role may have changed since the refresh token was issued
        user = await UserService.get_user_by_id(db, user_id)
        if not user or not user["is_active"]:
            raise UnauthorizedException("Invalid refresh token")

        access_token, _ = self.create_tokens(user)
        return access_token

    def revoke_token(self, token: str | None) -> None:
        """Revoke a refresh token by adding it to the blacklist."""
        if token:
            self.store.set(f"blacklist:{token}", "1", ttl=REVOKED_TOKEN_TTL)
