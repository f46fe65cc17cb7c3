from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk.api.deps import get_db
from reportdesk.api.schemas.references import BranchResponse, CodeNameResponse, SourceResponse
from reportdesk.db.repos.reference_repo import ReferenceRepo
from reportdesk.domain.enums import Currency, FileFormat, ReportType

router = APIRouter(prefix="/api/v1/report-6406/references", tags=["report-6406-references"])

DbDep = Annotated[AsyncSession, Depends(get_db)]

CURRENCY_NAMES = {Currency.RUB: "Russian ruble", Currency.FOREIGN: "Foreign currency"}
FORMAT_NAMES = {FileFormat.TXT: "Text file", FileFormat.XLSX: "Excel workbook", FileFormat.XML: "XML document"}


@router.get("/branches", response_model=list[BranchResponse])
async def list_branches(db: DbDep) -> list[BranchResponse]:
    return [BranchResponse.model_validate(b) for b in await ReferenceRepo(db).list_branches()]


@router.get("/sources", response_model=list[SourceResponse])
async def list_sources(db: DbDep) -> list[SourceResponse]:
    return [SourceResponse.model_validate(s) for s in await ReferenceRepo(db).list_sources()]


@router.get("/currencies", response_model=list[CodeNameResponse])
async def list_currencies() -> list[CodeNameResponse]:
    return [CodeNameResponse(code=c.value, name=CURRENCY_NAMES[c]) for c in Currency]


@router.get("/formats", response_model=list[CodeNameResponse])
async def list_formats() -> list[CodeNameResponse]:
    return [CodeNameResponse(code=f.value, name=FORMAT_NAMES[f]) for f in FileFormat]


@router.get("/report-types", response_model=list[CodeNameResponse])
async def list_report_types() -> list[CodeNameResponse]:
    return [CodeNameResponse(code=r.value, name=r.value.replace("_", " ")) for r in ReportType]
