"""
Notely Backend — User Request/Response Schemas
===============================================

What:  Pydantic models defining the users API contract.

Secret handling:
    UserCreatedResponse is the only schema that carries `api_key` and is used
    only by POST /v1/users. Listings use UserResponse, which has no such
    field, so the key cannot leak through them.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class UserCreate(BaseModel):
    """Body of POST /v1/users. Emptiness is checked by UserService."""
    name: Optional[str] = Field(default=None, description="Display name")


class UserResponse(BaseModel):
    """Public view of a user."""
    id: uuid.UUID = Field(description="Unique user identifier (UUID)")
    created_at: datetime = Field(description="When the user was created (UTC)")
    updated_at: datetime = Field(description="When the user was last updated (UTC)")
    name: str = Field(description="Display name")

    model_config = {"from_attributes": True}


class UserCreatedResponse(UserResponse):
    """Returned once, on creation, including the secret key."""
    api_key: str = Field(description="Secret key for `Authorization: ApiKey <key>`")
