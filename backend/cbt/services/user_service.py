"""
User Service - accounts and profiles

Handles:
- Signup (User + Profile in one transaction)
- Credential checks for signin
- Teacher and student lookups used by admin screens
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from typing import Optional, List
import logging

from cbt.core.exceptions import UserAlreadyExistsError, InvalidCredentialsError, ValidationError
from cbt.core.security import get_password_hash, verify_password
from cbt.models.user import User, Profile, UserRole

logger = logging.getLogger(__name__)


class UserService:
    """Service for user accounts"""

    async def get_user_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()

    async def get_user_by_id(self, db: AsyncSession, user_id: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def create_user(
        self,
        db: AsyncSession,
        email: str,
        password: str,
        full_name: Optional[str],
        role: UserRole,
        allowed_roles: Optional[List[str]] = None,
    ) -> User:
        """
        Create a user and its profile.

        Args:
            allowed_roles: when given, ``role`` must be one of these values
                (self-signup passes the configured list; the seed command
                passes None)
        """
        email = email.strip().lower()
        if allowed_roles is not None and role.value not in allowed_roles:
            raise ValidationError(f"Signup is not allowed for role '{role.value}'", field="role")

        if await self.get_user_by_email(db, email):
            raise UserAlreadyExistsError(email)

        user = User(
            email=email,
            hashed_password=get_password_hash(password),
            profile=Profile(email=email, full_name=full_name, role=role),
        )
        db.add(user)
        await db.commit()

        logger.info(f"Created {role.value} account {email}")
        return user

    async def authenticate(self, db: AsyncSession, email: str, password: str) -> User:
        """Return the user for valid credentials, raise InvalidCredentialsError otherwise"""
        user = await self.get_user_by_email(db, email)
        if not user or not verify_password(password, user.hashed_password):
            raise InvalidCredentialsError()
        return user

    async def list_by_role(self, db: AsyncSession, role: UserRole) -> List[User]:
        result = await db.execute(
            select(User)
            .join(Profile, Profile.user_id == User.id)
            .where(Profile.role == role)
            .order_by(Profile.full_name, User.email)
        )
        return list(result.scalars().all())

    async def search_students(self, db: AsyncSession, search: Optional[str] = None) -> List[User]:
        """Students matching ``search`` in name or email (case-insensitive), newest first"""
        query = (
            select(User)
            .join(Profile, Profile.user_id == User.id)
            .where(Profile.role == UserRole.STUDENT)
        )
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            query = query.where(or_(Profile.full_name.ilike(pattern), Profile.email.ilike(pattern)))

        result = await db.execute(query.order_by(User.created_at.desc()))
        return list(result.scalars().all())

    async def count_by_role(self, db: AsyncSession, role: UserRole) -> int:
        result = await db.execute(select(func.count(Profile.id)).where(Profile.role == role))
        return result.scalar() or 0


user_service = UserService()
