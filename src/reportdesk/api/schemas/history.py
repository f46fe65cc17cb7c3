import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field

from reportdesk.api.schemas.base import CamelModel, Pagination
from reportdesk.domain.models.history import Metadata


class HistoryEntryResponse(CamelModel):
    id: uuid.UUID
    status: str
    previous_status: Optional[str] = None
    sequence: int
    changed_at: datetime
    changed_by: Optional[str] = None
    comment: Optional[str] = None
    # ORM attribute is ``details``; the column and the wire name are ``metadata``
    metadata: Optional[Metadata] = Field(None, validation_alias="details", serialization_alias="metadata")


class HistoryList(CamelModel):
    task_id: uuid.UUID
    history: list[HistoryEntryResponse]
    pagination: Pagination
