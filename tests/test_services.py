"""
Tests for service layer.
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlmodel import Session, select

from photoshare.core.config import settings
from photoshare.core.exceptions import NotFoundError, ValidationError
from photoshare.core.security import hash_token
from photoshare.models.token import PersonalAccessToken
from photoshare.models.user import User, UserRole
from photoshare.schemas.user import UserCreate
from photoshare.services.category_service import slugify
from photoshare.services.token_service import TokenService
from photoshare.services.user_service import UserService


def test_create_user(session: Session) -> None:
    """Test user creation."""
    user_create = UserCreate(
        name="Service Test User",
        email="Service@Example.com",
        password="password123",
    )
    user = UserService.create(session, user_create)

    assert user.id is not None
    assert user.email == "service@example.com"
    assert user.name == "Service Test User"
    assert user.role == UserRole.CLIENT
    assert user.hashed_password != "password123"


def test_create_user_duplicate_email(session: Session, test_user: User) -> None:
    user_create = UserCreate(name="Again", email="TEST@example.com", password="password123")
    with pytest.raises(ValidationError) as exc_info:
        UserService.create(session, user_create)
    assert "email" in exc_info.value.errors


def test_get_user_by_email(session: Session, test_user: User) -> None:
    """Test retrieving user by email, ignoring case."""
    user = UserService.get_by_email(session, "TEST@EXAMPLE.COM")
    assert user is not None
    assert user.id == test_user.id


def test_get_user_by_id(session: Session, test_user: User) -> None:
    """Test retrieving user by ID."""
    user = UserService.get_by_id(session, test_user.id)  # type: ignore
    assert user is not None
    assert user.email == test_user.email


def test_authenticate_user_success(session: Session, test_user: User) -> None:
    """Test successful user authentication."""
    user = UserService.authenticate(session, "test@example.com", "testpassword123")
    assert user is not None
    assert user.id == test_user.id


def test_authenticate_user_wrong_password(session: Session, test_user: User) -> None:
    """Test authentication with wrong password."""
    assert UserService.authenticate(session, "test@example.com", "wrongpassword") is None


def test_authenticate_nonexistent_user(session: Session) -> None:
    """Test authentication with non-existent user."""
    assert UserService.authenticate(session, "nobody@example.com", "password") is None


def test_list_except(session: Session, test_admin: User, test_user: User, test_photographer: User) -> None:
    users = UserService.list_except(session, test_admin.id)
    assert [u.id for u in users] == [test_user.id, test_photographer.id]


def test_delete_missing_user(session: Session) -> None:
    with pytest.raises(NotFoundError):
        UserService.delete(session, 12345)


def test_resolve_issued_token(session: Session, test_user: User, test_photographer: User) -> None:
    """resolve(issue(user)) returns that user, for every user."""
    for user in (test_user, test_photographer):
        token = TokenService.issue(session, user)
        resolved = TokenService.resolve(session, token)
        assert resolved is not None
        assert resolved.id == user.id


def test_token_stored_as_digest(session: Session, test_user: User) -> None:
    token = TokenService.issue(session, test_user)
    record = session.exec(select(PersonalAccessToken)).one()
    assert record.token_hash == hash_token(token)
    assert record.token_hash != token
    assert record.name == settings.TOKEN_NAME
    assert record.expires_at is None


def test_resolve_updates_last_used(session: Session, test_user: User) -> None:
    token = TokenService.issue(session, test_user)
    record = TokenService.find(session, token)
    assert record is not None
    assert record.last_used_at is not None


def test_unknown_and_malformed_tokens_are_invalid(session: Session, test_user: User) -> None:
    TokenService.issue(session, test_user)
    for token in ("", "unknown", "a|b|c", "é" * 80):
        assert TokenService.resolve(session, token) is None


def test_revoke_only_affects_one_token(session: Session, test_user: User) -> None:
    first = TokenService.issue(session, test_user)
    second = TokenService.issue(session, test_user)

    assert TokenService.revoke(session, first) is True

    assert TokenService.resolve(session, first) is None
    assert TokenService.resolve(session, second) is not None


def test_revoke_is_idempotent(session: Session, test_user: User) -> None:
    token = TokenService.issue(session, test_user)
    assert TokenService.revoke(session, token) is True
    assert TokenService.revoke(session, token) is False
    assert TokenService.revoke(session, "never-issued") is False


def test_delete_user_cascades_to_tokens(session: Session, test_user: User, test_photographer: User) -> None:
    tokens = [TokenService.issue(session, test_user) for _ in range(3)]
    survivor = TokenService.issue(session, test_photographer)

    UserService.delete(session, test_user.id)  # type: ignore[arg-type]

    for token in tokens:
        assert TokenService.resolve(session, token) is None
    assert TokenService.resolve(session, survivor) is not None
    remaining = session.exec(select(PersonalAccessToken)).all()
    assert len(remaining) == 1


def test_token_of_vanished_user_is_invalid(session: Session, test_user: User) -> None:
    """A token whose owner was removed without the cascade still resolves as invalid."""
    token = TokenService.issue(session, test_user)
    session.delete(test_user)
    session.commit()

    assert TokenService.resolve(session, token) is None
    assert session.exec(select(PersonalAccessToken)).all() == []


def test_token_expiry_is_configurable(
    session: Session, test_user: User, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(settings, "TOKEN_EXPIRE_MINUTES", 30)
    token = TokenService.issue(session, test_user)

    record = TokenService.find(session, token)
    assert record is not None
    assert record.expires_at is not None

    record.expires_at = datetime.now(timezone.utc) - timedelta(seconds=1)
    session.add(record)
    session.commit()

    assert TokenService.resolve(session, token) is None
    assert session.exec(select(PersonalAccessToken)).all() == []


def test_prune_expired(session: Session, test_user: User, monkeypatch: pytest.MonkeyPatch) -> None:
    TokenService.issue(session, test_user)  # never expires
    monkeypatch.setattr(settings, "TOKEN_EXPIRE_MINUTES", 5)
    live = TokenService.issue(session, test_user)
    stale = TokenService.issue(session, test_user)

    record = session.exec(
        select(PersonalAccessToken).where(PersonalAccessToken.token_hash == hash_token(stale))
    ).one()
    record.expires_at = datetime.now(timezone.utc) - timedelta(minutes=1)
    session.add(record)
    session.commit()

    assert TokenService.prune_expired(session) == 1
    assert TokenService.resolve(session, live) is not None
    assert len(session.exec(select(PersonalAccessToken)).all()) == 2


def test_revoke_all_for_user(session: Session, test_user: User) -> None:
    for _ in range(2):
        TokenService.issue(session, test_user)
    assert TokenService.revoke_all_for_user(session, test_user.id) == 2  # type: ignore[arg-type]
    assert TokenService.revoke_all_for_user(session, test_user.id) == 0  # type: ignore[arg-type]


def test_slugify() -> None:
    assert slugify("Wedding Photos") == "wedding-photos"
    assert slugify("  B&W / Film ") == "b-w-film"
    assert slugify("!!!") == ""
