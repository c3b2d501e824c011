"""
cafe_crawler/schemas/upload.py

Wire schemas for the product upload mutation.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class UploadResultResponse(BaseModel):
    """
    Counts returned after the backing store reconciles one brand's products.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    processed: int = Field(0, ge=0)
    created: int = Field(0, ge=0)
    updated: int = Field(0, ge=0)
    unchanged: int = Field(0, ge=0)
    skipped: int = Field(0, ge=0)
    removed: int = Field(0, ge=0)
    reactivated: int = Field(0, ge=0)
    errors: list[str] = Field(default_factory=list)
    message: str | None = None
    processing_time_ms: float | None = Field(None, alias="processingTime")


class MutationResponse(BaseModel):
    """
    Envelope returned by the backend's HTTP mutation endpoint.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    status: str
    value: Any = None
    error_message: str | None = Field(None, alias="errorMessage")
