"""Job result data models."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class AssetJobResult(BaseModel, Generic[T]):
    """Outcome of processing one asset inside a batch job."""

    symbol: str = Field(..., description="Asset processed")
    success: bool = Field(..., description="Whether the asset was processed")
    data: T | None = Field(default=None, description="Produced data")
    error: str | None = Field(default=None, description="Error message if processing failed")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Additional metadata")


class JobSummary(BaseModel):
    """Aggregate outcome of a batch job run."""

    processed: list[str] = Field(default_factory=list)
    skipped: dict[str, str] = Field(default_factory=dict, description="symbol -> error")
    rows_written: int = 0

    @property
    def ok(self) -> bool:
        return not self.skipped
