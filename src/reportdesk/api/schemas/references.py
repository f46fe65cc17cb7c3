import uuid
from typing import Optional

from reportdesk.api.schemas.base import CamelModel


class BranchResponse(CamelModel):
    id: uuid.UUID
    code: str
    name: str


class SourceResponse(CamelModel):
    code: str
    name: str
    ris: Optional[str] = None


class CodeNameResponse(CamelModel):
    code: str
    name: str
