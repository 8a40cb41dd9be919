"""Pydantic models for the built-in list entities."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict


class EntityBase(BaseModel):
    """Fields shared by every listable entity."""

    id: str = Field(description="Entity identifier")
    name: str = Field(description="Display name")
    description: Optional[str] = Field(default=None, description="Free-text description")
    active: bool = Field(default=True, description="False once the entity is soft-deleted")
    date_created: datetime = Field(description="Creation timestamp")
    date_modified: Optional[datetime] = Field(default=None, description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True)


class Workspace(EntityBase):
    """Workspace list item."""

    private: bool = Field(default=False, description="Whether the workspace is private")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "ws-001",
                "name": "Marketing",
                "description": "Campaign planning and assets",
                "active": True,
                "private": False,
                "date_created": "2024-01-01T12:00:00Z",
                "date_modified": "2024-01-02T08:30:00Z"
            }
        }
    )


class Product(EntityBase):
    """Product list item."""

    price: Decimal = Field(description="Unit price")
    currency: str = Field(default="USD", description="ISO 4217 currency code")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "prod-001",
                "name": "Standing Desk",
                "description": "Electric height-adjustable desk",
                "active": True,
                "price": "499.00",
                "currency": "USD",
                "date_created": "2024-01-01T12:00:00Z",
                "date_modified": None
            }
        }
    )
