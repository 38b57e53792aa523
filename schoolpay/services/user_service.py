"""User Service - Business Logic Layer"""

from typing import List, Optional
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolpay.core.exceptions import AuthenticationError, InvalidInputError, NotFoundError
from schoolpay.core.logging import get_logger
from schoolpay.core.security import get_password_hash, verify_password
from schoolpay.models.enums import UserRole
from schoolpay.models.school import School
from schoolpay.models.user import User
from schoolpay.schemas.auth import BankDetails, SignupRequest
from schoolpay.schemas.user import UserUpdate
from schoolpay.services.cascade_service import CascadeService

logger = get_logger(__name__)


class UserService:
    """Service layer for account operations"""

    @staticmethod
    async def create_user(
        db: AsyncSession,
        email: str,
        password: str,
        name: str,
        role: UserRole = UserRole.GUARDIAN,
        school_id: Optional[UUID] = None,
        phone_number: Optional[str] = None,
        bank_details: Optional[BankDetails] = None,
        auto_commit: bool = True,
    ) -> User:
        """
        Create a new account.
        When auto_commit=False, uses flush instead of commit (for multi-row units of work).
        """
        existing = await UserService.get_user_by_email(db, email)
        if existing:
            raise InvalidInputError("Email already registered", details={"email": email})

        db_user = User(
            email=email,
            hashed_password=get_password_hash(password),
            session_version=0,
            name=name,
            phone_number=phone_number,
            role=role,
            school_id=school_id,
            is_active=True,
        )
        if bank_details:
            db_user.bank_name = bank_details.bank_name
            db_user.account_name = bank_details.account_name
            db_user.account_number = bank_details.account_number

        db.add(db_user)
        if auto_commit:
            await db.commit()
            await db.refresh(db_user)
        else:
            await db.flush()
        return db_user

    @staticmethod
    async def signup(db: AsyncSession, data: SignupRequest) -> User:
        """
        Self-service signup. School administrators must name an existing school;
        guardians and students carry no affiliation.
        """
        school_id = None
        if data.role == UserRole.SCHOOL_ADMINISTRATOR:
            if data.school_id is None:
                raise InvalidInputError("school_id is required for school administrators")
            if await db.get(School, data.school_id) is None:
                raise NotFoundError("School", data.school_id)
            school_id = data.school_id

        user = await UserService.create_user(
            db,
            email=data.email,
            password=data.password,
            name=data.name,
            role=data.role,
            school_id=school_id,
            phone_number=data.phone_number,
            bank_details=data.bank_details,
        )
        logger.info("Account created", extra={"actor_id": user.id, "role": user.role.value})
        return user

    @staticmethod
    async def get_user_by_id(db: AsyncSession, user_id: UUID) -> Optional[User]:
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    @staticmethod
    async def authenticate_user(db: AsyncSession, email: str, password: str) -> User:
        """
        Check credentials.

        Raises:
            AuthenticationError: unknown email, wrong password or inactive account
        """
        user = await UserService.get_user_by_email(db, email)
        if not user or not verify_password(password, user.hashed_password):
            raise AuthenticationError("Incorrect email or password")
        if not user.is_active:
            raise AuthenticationError("Inactive user")
        return user

    @staticmethod
    async def revoke_sessions(db: AsyncSession, user: User) -> User:
        """Invalidate every token issued so far by bumping the session version."""
        user.session_version = (user.session_version or 0) + 1
        await db.commit()
        logger.info("Sessions revoked", extra={"actor_id": user.id})
        return user

    @staticmethod
    async def update_profile(db: AsyncSession, user: User, data: UserUpdate) -> User:
        update_data = data.model_dump(exclude_unset=True)
        password = update_data.pop("password", None)
        if password:
            user.hashed_password = get_password_hash(password)
        for field, value in update_data.items():
            setattr(user, field, value)

        await db.commit()
        await db.refresh(user)
        return user

    @staticmethod
    async def list_users(
        db: AsyncSession,
        role: Optional[UserRole] = None,
        school_id: Optional[UUID] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[User]:
        query = select(User)
        if role:
            query = query.where(User.role == role)
        if school_id:
            query = query.where(User.school_id == school_id)
        query = query.order_by(User.created_at.desc()).offset(skip).limit(limit)

        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def delete_user(db: AsyncSession, user_id: UUID, actor_id: UUID) -> dict:
        """
        Delete an account and everything it owns. An owner impersonating the
        deleted account falls back to its own view on the next request.
        """
        if user_id == actor_id:
            raise InvalidInputError("You cannot delete your own account")
        return await CascadeService.delete_account(db, user_id)
