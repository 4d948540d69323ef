"""
Pydantic schemas for the import source and API responses.

Design principles:
- Separate input/output schemas for clear boundaries
- Import records are validated strictly: a wrong type anywhere rejects the source
"""
from typing import Annotated, Optional, Any
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr


# === Quote Schemas ===

class QuoteIn(BaseModel):
    """One record of an import source."""
    model_config = ConfigDict(extra="ignore")

    id: Annotated[StrictInt, Field(ge=-(2 ** 63), le=2 ** 63 - 1)]  # SQLite INTEGER range
    quote: StrictStr
    author: StrictStr


class QuoteOut(BaseModel):
    """Output schema for a quote."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    quote: str
    author: str


# === Health Check Schemas ===

class HealthStatus(BaseModel):
    """System health status."""
    status: str  # ok, unhealthy
    service: str
    timestamp: datetime
    database: dict[str, Any]


# === Error Schemas ===

class ErrorResponse(BaseModel):
    """Standard error response."""
    detail: str
    code: Optional[str] = None
