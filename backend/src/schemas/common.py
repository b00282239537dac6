"""Schemas shared across routers."""
from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Bare acknowledgement, e.g. after a revoke or delete."""

    message: str
