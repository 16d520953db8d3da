"""Base model class for all stored records."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class DBModel(BaseModel):
    """Base model for all stored records."""

    created_at: Optional[datetime] = Field(None, description="Creation timestamp, set once at first write")
    updated_at: Optional[datetime] = Field(None, description="Last write timestamp")

    class Config:
        """Pydantic config."""

        from_attributes = True
        populate_by_name = True
        alias_generator = to_camel
