"""Read access to archived (deleted) records."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas import ArchivedRecordResponse
from app.services.archive_service import list_archived

router = APIRouter(prefix="/archive", tags=["archive"])


@router.get("", response_model=List[ArchivedRecordResponse])
async def list_archived_records(
    entity_type: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    return await list_archived(db, entity_type=entity_type)
