"""Shared Pydantic schema bases."""

from __future__ import annotations

from pydantic import BaseModel


class RecordForm(BaseModel):
    """Base for multipart form bodies; unknown form fields are rejected."""

    model_config = {
        "extra": "forbid",
        "str_strip_whitespace": True,
    }


class RecordOut(BaseModel):
    """Base for record responses, built straight from ORM rows."""

    model_config = {"from_attributes": True}


class HealthResponse(BaseModel):
    """Health-check response returned by /health."""
    status: str = "ok"
    app: str
    env: str
