"""Base factory configuration for polyfactory."""

import secrets
from uuid import UUID, uuid4

from polyfactory.factories.sqlalchemy_factory import SQLAlchemyFactory

from src.backoffice.models import utc_now


def generate_uuid() -> UUID:
    """Generate a UUID for primary keys and shop/warehouse ids."""
    return uuid4()


def generate_phone() -> str:
    """Random canonical phone identity."""
    return f"+79{secrets.randbelow(10**9):09d}"


class BaseFactory(SQLAlchemyFactory):
    """Base factory with common configuration for all models.

    Provides:
    - UUID generation for primary keys
    - UTC timestamp generation
    - Disabled auto-relationship setting (we control relationships manually)
    """

    __is_base_factory__ = True
    __set_relationships__ = False
    __set_foreign_keys__ = False  # We set FK values explicitly

