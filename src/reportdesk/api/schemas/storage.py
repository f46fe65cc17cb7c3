from typing import Optional

from reportdesk.api.schemas.base import CamelModel


class StorageVolumeResponse(CamelModel):
    total_bytes: int
    used_bytes: int
    free_bytes: int
    used_percent: float
    total_human: str
    used_human: str
    free_human: str
    warning: Optional[str] = None
