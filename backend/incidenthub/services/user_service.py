import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from incidenthub.core.exceptions import (
    AlreadyExistsError,
    AuthenticationError,
    InvalidInputError,
    NotFoundError,
)
from incidenthub.core.security import get_password_hash, verify_password
from incidenthub.models.user import Role, User
from incidenthub.repositories.users import UserRepository
from incidenthub.schemas.user import UserRegister

logger = logging.getLogger(__name__)


class UserService:
    """Registration and lookups for authentication."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = UserRepository(db)

    async def register_user(self, data: UserRegister) -> User:
        """
        Register a reporter account.

        Both uniqueness checks run before anything is written, so a failed
        registration leaves no row behind. The role is always ``Role.USER``.
        """
        logger.info("Attempting to register new user: %s", data.username)

        if not data.passwords_match:
            raise InvalidInputError("Passwords do not match")

        if await self.repo.username_exists(data.username):
            logger.warning("Registration failed - username already exists: %s", data.username)
            raise AlreadyExistsError(f"Username already exists: {data.username}")

        if await self.repo.email_exists(data.email):
            logger.warning("Registration failed - email already exists: %s", data.email)
            raise AlreadyExistsError(f"Email already exists: {data.email}")

        user = User(
            username=data.username,
            email=data.email,
            password=get_password_hash(data.password),
            role=Role.USER,
            enabled=True,
        )
        try:
            await self.repo.add(user)
            await self.db.commit()
        except IntegrityError:
            # a concurrent registration won the unique constraint
            await self.db.rollback()
            logger.warning("Registration failed - username or email taken concurrently: %s", data.username)
            raise AlreadyExistsError("Username or email already exists")
        logger.info("Successfully registered user: %s with ID: %s", user.username, user.id)
        return user

    async def find_by_username(self, username: str) -> User:
        user = await self.repo.get_by_username(username)
        if user is None:
            raise NotFoundError(f"User not found: {username}")
        return user

    async def find_by_id(self, user_id: int) -> User:
        user = await self.repo.get(user_id)
        if user is None:
            raise NotFoundError(f"User not found with ID: {user_id}")
        return user

    async def load_for_authentication(self, username: str) -> User:
        logger.info("Attempting to load user: %s", username)
        user = await self.repo.get_by_username(username)
        if user is None:
            logger.warning("User not found: %s", username)
            raise NotFoundError(f"User not found: {username}")
        return user

    async def authenticate(self, username: str, password: str) -> User:
        try:
            user = await self.load_for_authentication(username)
        except NotFoundError:
            raise AuthenticationError("Invalid username or password")

        if not verify_password(password, user.password):
            logger.warning("Failed login attempt for user: %s", username)
            raise AuthenticationError("Invalid username or password")
        if not user.enabled:
            logger.warning("Login attempt for disabled user: %s", username)
            raise AuthenticationError("Invalid username or password")
        return user

    async def ensure_admin(self, username: str, email: str, password: str) -> User:
        """Create the bootstrap administrator unless the username already exists."""
        existing = await self.repo.get_by_username(username)
        if existing is not None:
            if existing.role != Role.ADMIN:
                logger.warning("Bootstrap admin %s exists without the admin role", username)
            return existing

        user = User(
            username=username,
            email=email,
            password=get_password_hash(password),
            role=Role.ADMIN,
            enabled=True,
        )
        await self.repo.add(user)
        await self.db.commit()
        logger.info("Created administrator account: %s", username)
        return user
