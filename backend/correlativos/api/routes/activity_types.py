from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from correlativos.core.db import get_session
from correlativos.schemas.activity_type import ReportActivityTypeOut
from correlativos.services.catalog import list_report_activity_types

router = APIRouter(prefix="/tipos-actividad-informe", tags=["tipos-actividad"])


@router.get("", response_model=List[ReportActivityTypeOut])
async def list_report_types(
    session: AsyncSession = Depends(get_session),
) -> List[ReportActivityTypeOut]:
    items = await list_report_activity_types(session)
    return [ReportActivityTypeOut.model_validate(item) for item in items]
