"""
Category service for the admin category endpoints.
"""

import re
from datetime import datetime, timezone
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, or_, select

from photoshare.core.exceptions import NotFoundError, ValidationError
from photoshare.core.logging import get_logger
from photoshare.models.category import Category
from photoshare.schemas.category import CategoryCreate

logger = get_logger(__name__)

CATEGORY_TAKEN_MESSAGE = "The name has already been taken."


def slugify(text: str) -> str:
    """
    Convert a category name to a URL slug.

    Examples:
        "Wedding Photos" -> "wedding-photos"
        "B&W / Film" -> "b-w-film"
    """
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower().strip())
    return slug.strip("-")


class CategoryService:
    """Service class for category operations."""

    @staticmethod
    def list(session: Session) -> List[Category]:
        return list(session.exec(select(Category).order_by(Category.name)).all())

    @staticmethod
    def create(session: Session, category_in: CategoryCreate) -> Category:
        """
        Create a category, deriving its slug from the name.

        Raises:
            ValidationError: If the name is taken or has no usable characters
        """
        slug = slugify(category_in.name)
        if not slug:
            raise ValidationError.for_field("name", "The name must contain letters or digits.")

        statement = select(Category).where(
            or_(Category.name == category_in.name, Category.slug == slug)
        )
        if session.exec(statement).first() is not None:
            raise ValidationError.for_field("name", CATEGORY_TAKEN_MESSAGE)

        now = datetime.now(timezone.utc)
        category = Category(name=category_in.name, slug=slug, created_at=now, updated_at=now)
        session.add(category)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            raise ValidationError.for_field("name", CATEGORY_TAKEN_MESSAGE)
        session.refresh(category)
        logger.info(f"Created category {category.id} ({category.slug})")
        return category

    @staticmethod
    def delete(session: Session, category_id: int) -> None:
        """
        Delete a category.

        Raises:
            NotFoundError: If no such category exists
        """
        category = session.get(Category, category_id)
        if category is None:
            raise NotFoundError("Category not found.")
        session.delete(category)
        session.commit()
        logger.info(f"Deleted category {category_id}")
