"""
Admin routes for user and category management.
Every route here requires the admin role.
"""

from typing import Annotated, List

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from photoshare.api.deps import get_current_admin_user
from photoshare.core.logging import get_logger
from photoshare.db.session import get_session
from photoshare.models.user import User
from photoshare.schemas.auth import MessageResponse
from photoshare.schemas.category import CategoryCreate, CategoryResponse
from photoshare.schemas.user import UserResponse
from photoshare.services.category_service import CategoryService
from photoshare.services.user_service import UserService

logger = get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/users", response_model=List[UserResponse])
def list_users(
    admin: Annotated[User, Depends(get_current_admin_user)],
    session: Annotated[Session, Depends(get_session)],
) -> List[UserResponse]:
    """List every user except the calling admin."""
    users = UserService.list_except(session, admin.id)
    return [UserResponse.model_validate(u) for u in users]


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    admin: Annotated[User, Depends(get_current_admin_user)],
    session: Annotated[Session, Depends(get_session)],
) -> MessageResponse:
    """
    Delete a user and revoke all of their tokens.

    Raises:
        NotFoundError: If the user does not exist
    """
    admin_id = admin.id
    UserService.delete(session, user_id)
    logger.info(f"Admin {admin_id} deleted user {user_id}")
    return MessageResponse(message="User deleted successfully")


@router.get("/categories", response_model=List[CategoryResponse])
def list_categories(
    _admin: Annotated[User, Depends(get_current_admin_user)],
    session: Annotated[Session, Depends(get_session)],
) -> List[CategoryResponse]:
    return [CategoryResponse.model_validate(c) for c in CategoryService.list(session)]


@router.post("/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    category_in: CategoryCreate,
    _admin: Annotated[User, Depends(get_current_admin_user)],
    session: Annotated[Session, Depends(get_session)],
) -> CategoryResponse:
    return CategoryResponse.model_validate(CategoryService.create(session, category_in))


@router.delete("/categories/{category_id}", response_model=MessageResponse)
def delete_category(
    category_id: int,
    _admin: Annotated[User, Depends(get_current_admin_user)],
    session: Annotated[Session, Depends(get_session)],
) -> MessageResponse:
    CategoryService.delete(session, category_id)
    return MessageResponse(message="Category deleted successfully")
