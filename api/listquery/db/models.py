"""SQLAlchemy table definitions for the listable entities.

The application queries through asyncpg; these models exist for alembic
and for tests that inspect the schema.
"""

from sqlalchemy import (
    BigInteger, Boolean, Column, DateTime, Identity, Index, Numeric, Text, text
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

# Create base class for models
Base = declarative_base()


class ListableMixin:
    """Columns every listable entity table carries.

    ``position`` records insertion order and is the final sort tie-break.
    """

    id = Column(Text, primary_key=True)
    position = Column(BigInteger, Identity(always=False), nullable=False, unique=True)
    name = Column(Text, nullable=False)
    description = Column(Text)
    active = Column(Boolean, nullable=False, server_default=text('true'))
    date_created = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    date_modified = Column(DateTime(timezone=True))


class Workspace(ListableMixin, Base):
    """Workspaces table model."""
    __tablename__ = 'workspaces'

    private = Column(Boolean, nullable=False, server_default=text('false'))

    __table_args__ = (
        Index('workspaces_active_created_desc', 'active', 'date_created', postgresql_ops={'date_created': 'DESC'}),
    )


class Product(ListableMixin, Base):
    """Products table model."""
    __tablename__ = 'products'

    price = Column(Numeric(12, 2), nullable=False)
    currency = Column(Text, nullable=False, server_default=text("'USD'"))

    __table_args__ = (
        Index('products_active_created_desc', 'active', 'date_created', postgresql_ops={'date_created': 'DESC'}),
        Index('products_price', 'price'),
    )
