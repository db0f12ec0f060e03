from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class Delimiter(str, Enum):
    TAB = "\t"
    COMMA = ","

    @property
    def label(self) -> str:
        return "tab" if self is Delimiter.TAB else "comma"


class FormatSelector(str, Enum):
    TSV = "tsv"
    CSV = "csv"
    AUTO = "auto"


class Resolution(str, Enum):
    FORMAT = "format"
    EXTENSION = "extension"
    CONTENT = "content"


class SniffCandidate(BaseModel):
    delimiter: Delimiter
    field_count: int = 0
    ok: bool = True
    error: Optional[str] = None


class RenderSummary(BaseModel):
    records: int = 0
    fields: int = 0


class SourceReport(BaseModel):
    name: str
    delimiter: Delimiter
    resolution: Resolution
    encoding: str = Field(default="utf-8")
    records: int = 0
    fields: int = 0


class ConvertResponse(BaseModel):
    html: str
    sources: List[SourceReport] = Field(default_factory=list)


class HealthResponse(BaseModel):
    ok: bool = True
