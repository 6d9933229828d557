from datetime import datetime

from pydantic import BaseModel, ConfigDict


class PublicUser(BaseModel):
    """User as returned by the API. Never carries the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    created_at: datetime
