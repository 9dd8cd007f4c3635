from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class SelectionRequest(BaseModel):
    category: Optional[str] = None


class SelectionResponse(BaseModel):
    category: Optional[str] = None
    version: int = 0
    rendered: bool = True


class MetaListResponse(BaseModel):
    values: List[str]


class ChartsResponse(BaseModel):
    selection: Optional[str] = None
    version: int = 0
    charts: Dict[str, dict] = Field(default_factory=dict)
