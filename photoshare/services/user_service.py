"""
User service layer implementing business logic for user operations.
Separates business logic from API routes and database operations.
"""

from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from photoshare.core.exceptions import NotFoundError, ValidationError
from photoshare.core.logging import get_logger
from photoshare.core.security import dummy_verify, get_password_hash, verify_password
from photoshare.models.user import User, UserRole
from photoshare.schemas.user import UserCreate, normalize_email
from photoshare.services.token_service import TokenService

logger = get_logger(__name__)

EMAIL_TAKEN_MESSAGE = "The email has already been taken."


class UserService:
    """Service class for user-related operations."""

    @staticmethod
    def get_by_email(session: Session, email: str) -> Optional[User]:
        """
        Retrieve a user by email address, ignoring case.

        Args:
            session: Database session
            email: Email address to search for

        Returns:
            User if found, None otherwise
        """
        statement = select(User).where(User.email == email.strip().lower())
        return session.exec(statement).first()

    @staticmethod
    def get_by_id(session: Session, user_id: int) -> Optional[User]:
        """
        Retrieve a user by ID.

        Args:
            session: Database session
            user_id: User ID to search for

        Returns:
            User if found, None otherwise
        """
        return session.get(User, user_id)

    @staticmethod
    def create(session: Session, user_create: UserCreate, role: Optional[UserRole] = None) -> User:
        """
        Create a new user with hashed password.

        Args:
            session: Database session
            user_create: User creation data
            role: Overrides the requested role (used to provision admins)

        Returns:
            Created user instance

        Raises:
            ValidationError: If the email is already registered
        """
        email = normalize_email(user_create.email)
        if UserService.get_by_email(session, email) is not None:
            raise ValidationError.for_field("email", EMAIL_TAKEN_MESSAGE)

        db_user = User(
            name=user_create.name,
            email=email,
            hashed_password=get_password_hash(user_create.password),
            role=role or user_create.role,
        )
        session.add(db_user)
        try:
            session.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            session.rollback()
            raise ValidationError.for_field("email", EMAIL_TAKEN_MESSAGE)
        session.refresh(db_user)
        return db_user

    @staticmethod
    def authenticate(session: Session, email: str, password: str) -> Optional[User]:
        """
        Authenticate a user by email and password.

        Unknown emails still pay for one hash verification so that both
        failure cases cost the same.

        Args:
            session: Database session
            email: User's email
            password: Plain text password

        Returns:
            User if authentication successful, None otherwise
        """
        user = UserService.get_by_email(session, email)
        if not user:
            dummy_verify()
            return None
        if not verify_password(password, user.hashed_password):
            return None
        return user

    @staticmethod
    def list_except(session: Session, user_id: Optional[int]) -> List[User]:
        """All users other than the given one, oldest first."""
        statement = select(User).order_by(User.id)
        if user_id is not None:
            statement = statement.where(User.id != user_id)
        return list(session.exec(statement).all())

    @staticmethod
    def delete(session: Session, user_id: int) -> None:
        """
        Delete a user together with every token they own, in one transaction.

        Args:
            session: Database session
            user_id: ID of the user to delete

        Raises:
            NotFoundError: If no such user exists
        """
        user = session.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found.")

        revoked = TokenService.revoke_all_for_user(session, user_id, commit=False)
        session.delete(user)
        session.commit()
        logger.info(f"Deleted user {user_id} and revoked {revoked} tokens")
