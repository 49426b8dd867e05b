"""User service for business logic."""

from datetime import UTC, datetime
from uuid import UUID

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictException, NotFoundException
from app.core.redis_client import CacheManager
from app.models.rides import ride_passengers, rides
from app.models.users import users
from app.schemas.rides import RideResponse
from app.schemas.users import (
    UserCreate,
    UserUpdate,
    UserWithHostedRides,
    UserWithJoinedRides,
)

logger = structlog.get_logger(__name__)


class UserService:
    """Service for user operations."""

    # Cache TTL in seconds (30 minutes for user profiles)
    USER_CACHE_TTL = 1800

    def __init__(self, cache_manager: CacheManager | None = None):
        """Initialize service with optional cache manager."""
        self.cache = cache_manager

    @staticmethod
    def _get_user_cache_key(user_id: UUID) -> str:
        """Generate cache key for user."""
        return f"user:{user_id}"

    def _invalidate(self, user_id: UUID) -> None:
        if self.cache:
            self.cache.delete(self._get_user_cache_key(user_id))

    async def create_user(self, db: AsyncSession, user_data: UserCreate) -> dict:
        """Create a new user."""
        query = users.insert().values(**user_data.model_dump()).returning(users)

        try:
            result = await db.execute(query)
            user = result.mappings().first()
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            raise ConflictException("Email is already in use") from e

        if not user:
            raise ValueError("Failed to create user")

        logger.info("user_created", user_id=str(user["id"]))
        return dict(user)

    async def get_user_by_id(self, db: AsyncSession, user_id: UUID) -> dict | None:
        """Get user by ID, going through the profile cache."""
        if self.cache:
            cached_user = self.cache.get_json(self._get_user_cache_key(user_id))
            if cached_user:
                return cached_user

        result = await db.execute(select(users).where(users.c.id == user_id))
        user = result.mappings().first()

        if not user:
            return None

        user_dict = dict(user)

        if self.cache:
            self.cache.set_json(
                self._get_user_cache_key(user_id), user_dict, ttl=self.USER_CACHE_TTL
            )

        return user_dict

    async def get_user_by_firebase_uid(self, db: AsyncSession, firebase_uid: str) -> dict | None:
        """Get user by Firebase UID."""
        result = await db.execute(select(users).where(users.c.firebase_uid == firebase_uid))
        user = result.mappings().first()
        return dict(user) if user else None

    async def get_or_create_user(self, db: AsyncSession, user_data: UserCreate) -> dict:
        """Return the user behind a Firebase identity, creating it on first sign-in."""
        user = await self.get_user_by_firebase_uid(db, user_data.firebase_uid)

        if user:
            await self.update_last_login(db, user["id"])
            return user

        return await self.create_user(db, user_data)

    async def update_user(
        self, db: AsyncSession, user_id: UUID, user_data: UserUpdate
    ) -> dict | None:
        """Update the profile fields present in ``user_data``."""
        update_data = user_data.model_dump(mode="json", exclude_unset=True)
        if not update_data:
            return await self.get_user_by_id(db, user_id)

        update_data["updated_at"] = datetime.now(UTC)

        query = update(users).where(users.c.id == user_id).values(**update_data).returning(users)

        try:
            result = await db.execute(query)
            user = result.mappings().first()
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            raise ConflictException("Email is already in use") from e

        if not user:
            return None

        self._invalidate(user_id)
        logger.info("user_profile_updated", user_id=str(user_id), fields=sorted(update_data))
        return dict(user)

    async def update_last_login(self, db: AsyncSession, user_id: UUID) -> None:
        """Update user's last login timestamp."""
        query = update(users).where(users.c.id == user_id).values(last_login_at=datetime.now(UTC))
        await db.execute(query)
        await db.commit()

        self._invalidate(user_id)

    async def _require_user(self, db: AsyncSession, user_id: UUID) -> dict:
        result = await db.execute(select(users).where(users.c.id == user_id))
        user = result.mappings().first()
        if not user:
            raise NotFoundException("User not found")
        return dict(user)

    async def get_joined_rides(self, db: AsyncSession, user_id: UUID) -> UserWithJoinedRides:
        """Load the user with every ride they have joined."""
        user = await self._require_user(db, user_id)

        stmt = (
            select(rides)
            .join(ride_passengers, ride_passengers.c.ride_id == rides.c.id)
            .where(ride_passengers.c.user_id == user_id)
            .order_by(rides.c.time)
        )
        result = await db.execute(stmt)
        joined = [RideResponse.model_validate(dict(row)) for row in result.mappings()]

        return UserWithJoinedRides.model_validate({**user, "joined_rides": joined})

    async def get_hosted_rides(self, db: AsyncSession, user_id: UUID) -> UserWithHostedRides:
        """Load the user with every ride they drive."""
        user = await self._require_user(db, user_id)

        stmt = select(rides).where(rides.c.driver_id == user_id).order_by(rides.c.time)
        result = await db.execute(stmt)
        hosted = [RideResponse.model_validate(dict(row)) for row in result.mappings()]

        return UserWithHostedRides.model_validate({**user, "hosted_rides": hosted})
