"""Use case for creating users."""

from sqlalchemy.orm import Session

from scholarhub.domain.entities import ROLE_ADMIN, ROLE_STUDENT, User
from scholarhub.infrastructure.repositories import UserRepository
from scholarhub.infrastructure.security import get_password_hash


def create_user(
    session: Session,
    *,
    name: str,
    email: str,
    password: str,
    role: str = ROLE_STUDENT,
) -> User:
    """Create a new user with a hashed password."""

    if role not in (ROLE_ADMIN, ROLE_STUDENT):
        raise ValueError(f"Unknown role '{role}'")
    if "@" not in email:
        raise ValueError("A valid email address is required")

    repository = UserRepository(session)
    if repository.get_by_email(email):
        raise ValueError("Email already registered")

    user = User(
        id=None,
        name=name,
        email=email,
        password=get_password_hash(password),
        role=role,
        is_active=True,
    )
    return repository.create(user)
