from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk.api.deps import get_db, get_settings
from reportdesk.api.schemas.storage import StorageVolumeResponse
from reportdesk.config import Settings
from reportdesk.report.storage import StorageAdmissionController

router = APIRouter(prefix="/api/v1/report-6406/storage", tags=["report-6406-storage"])

DbDep = Annotated[AsyncSession, Depends(get_db)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


@router.get("/volume", response_model=StorageVolumeResponse)
async def get_storage_volume(db: DbDep, settings: SettingsDep) -> StorageVolumeResponse:
    snapshot = await StorageAdmissionController(db, settings).snapshot()
    return StorageVolumeResponse.model_validate(snapshot.model_dump())
