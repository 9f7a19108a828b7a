"""Common response schemas."""

from typing import Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    ok: bool = False
    error: str
    code: Optional[str] = None
