"""
SQLAlchemy 2.0 async DeclarativeBase for the card normalizer.

Constraint names follow the same convention as the alembic migrations, so
metadata.create_all() and `alembic upgrade` produce identical schemas
(e.g. the unique source_id constraint is "uq_cards_source_id").
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
}


class Base(DeclarativeBase):
    """Base class for all card normalizer database models."""
    metadata = MetaData(naming_convention=NAMING_CONVENTION)
