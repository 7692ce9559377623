from __future__ import annotations

from typing import Dict, List, Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    ok: bool = True


class TableInfo(BaseModel):
    value: str
    label: str


class ImportResponse(BaseModel):
    table: str
    records: int = Field(examples=[30])


class SampleDataRequest(BaseModel):
    kind: Literal["all", "sales", "traffic", "performance"] = "all"
    count: int = Field(default=30, ge=1, le=365)


class SampleDataResponse(BaseModel):
    inserted: Dict[str, int] = Field(default_factory=dict)


class ClearDataResponse(BaseModel):
    cleared: List[str] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    detail: str
