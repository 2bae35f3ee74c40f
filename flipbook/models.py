from __future__ import annotations

from datetime import datetime
from typing import List, Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UploadResult(CamelModel):
    identifier: str
    storage_url: str
    shareable_url: str


class LinkOut(CamelModel):
    identifier: str
    storage_url: str
    uploaded_at: datetime


class HistoryOut(CamelModel):
    items: List[LinkOut]


class HealthOut(CamelModel):
    status: Literal["ok", "error"]
    registry: Literal["connected", "unreachable"]


class PageGeometryOut(CamelModel):
    width: int
    height: int


class ViewerConfigOut(CamelModel):
    history_enabled: bool
    drag_and_drop_enabled: bool
    progress_bar_enabled: bool
