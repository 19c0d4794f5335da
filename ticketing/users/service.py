from datetime import UTC, datetime
from uuid import uuid4

import aiosqlite
import structlog

from ticketing.auth import create_access_token, hash_password, verify_password
from ticketing.commands import CommandService, command
from ticketing.config import settings
from ticketing.exceptions import AuthenticationError, BusinessRuleError, NotFoundError
from ticketing.users.models import CurrentUser, UserRole
from ticketing.users.repository import UserRepository
from ticketing.users.schemas import LoginRequest, ProfileResponse, SignupRequest, TokenResponse

logger = structlog.get_logger()


class UserService(CommandService):
    def __init__(self, db: aiosqlite.Connection) -> None:
        super().__init__(db)
        self._repo = UserRepository(db)

    @command("signup")
    async def signup(self, data: SignupRequest) -> ProfileResponse:
        if await self._repo.email_exists(data.email):
            raise BusinessRuleError(
                "DUPLICATE_EMAIL",
                "An account with this email already exists",
                {"email": data.email},
            )

        now = datetime.now(UTC).isoformat()
        profile = {
            "id": str(uuid4()),
            "email": data.email,
            "full_name": data.full_name,
            "password_hash": hash_password(data.password),
            "role": data.role,
            "created_at": now,
            "updated_at": now,
        }
        await self._repo.insert(profile)

        logger.info("user_signed_up", user_id=profile["id"], role=data.role)
        return ProfileResponse(
            id=profile["id"],
            email=profile["email"],
            full_name=profile["full_name"],
            role=profile["role"],
            created_at=now,
        )

    async def login(self, data: LoginRequest) -> TokenResponse:
        credentials = await self._repo.get_credentials(data.email)
        if not credentials or not verify_password(data.password, credentials["password_hash"]):
            logger.info("login_failed", email=data.email)
            raise AuthenticationError("Invalid email or password")

        token = create_access_token(credentials["id"], credentials["role"])
        logger.info("user_logged_in", user_id=credentials["id"])
        return TokenResponse(access_token=token, expires_in=settings.jwt_expire_minutes * 60)

    async def load_current_user(self, user_id: str) -> CurrentUser | None:
        profile = await self._repo.get_by_id(user_id)
        if not profile:
            return None
        return CurrentUser(
            id=profile["id"],
            email=profile["email"],
            full_name=profile["full_name"],
            role=UserRole(profile["role"]),
        )

    async def get_profile(self, user_id: str) -> ProfileResponse:
        profile = await self._repo.get_by_id(user_id)
        if not profile:
            raise NotFoundError("User", user_id)
        return ProfileResponse(**profile)
