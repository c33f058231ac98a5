"""Generic archive for deleted records."""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import ArchivedRecord


def _jsonable(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def archive_entity(
    db: AsyncSession,
    entity_type: str,
    entity_id: Any,
    payload: Dict[str, Any],
    deleted_by: Optional[str] = None,
) -> ArchivedRecord:
    """Stage a snapshot of an entity about to be deleted. Caller commits."""
    record = ArchivedRecord(
        entity_type=entity_type,
        entity_id=str(entity_id),
        payload=_jsonable(payload),
        deleted_by=deleted_by,
        deleted_at=datetime.utcnow(),
    )
    db.add(record)
    return record


async def list_archived(db: AsyncSession, entity_type: Optional[str] = None) -> List[ArchivedRecord]:
    stmt = select(ArchivedRecord)
    if entity_type:
        stmt = stmt.where(ArchivedRecord.entity_type == entity_type)
    stmt = stmt.order_by(ArchivedRecord.deleted_at.desc(), ArchivedRecord.id.desc())
    return list((await db.execute(stmt)).scalars().all())
