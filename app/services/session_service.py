"""Test session lifecycle."""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.choices import TestSessionStatus
from app.core.errors import NotFoundError, ValidationFailedError
from app.models import Test, TestSession

logger = logging.getLogger(__name__)


async def start_session(db: AsyncSession, uli: str, test_code: str) -> TestSession:
    code = test_code.strip().upper()
    test = (await db.execute(select(Test).where(Test.test_code == code))).scalar_one_or_none()
    if test is None:
        raise NotFoundError("Test not found")

    session = TestSession(
        uli=uli,
        test_id=test.id,
        test_code=code,
        start_time=datetime.utcnow(),
        status=TestSessionStatus.IN_PROGRESS.value,
    )
    db.add(session)
    await db.commit()
    await db.refresh(session)
    logger.info("Session %s started: uli=%s test=%s", session.id, uli, code)
    return session


async def get_session(db: AsyncSession, session_id: int) -> TestSession:
    session = await db.get(TestSession, session_id)
    if session is None:
        raise NotFoundError("Test session not found")
    return session


async def _close(db: AsyncSession, session_id: int, status: TestSessionStatus, end_time: Optional[datetime]) -> TestSession:
    session = await get_session(db, session_id)
    if session.status != TestSessionStatus.IN_PROGRESS.value:
        raise ValidationFailedError(f"Test session is already {session.status}")
    session.status = status.value
    session.end_time = end_time or datetime.utcnow()
    await db.commit()
    await db.refresh(session)
    return session


async def end_session(db: AsyncSession, session_id: int, end_time: Optional[datetime] = None) -> TestSession:
    return await _close(db, session_id, TestSessionStatus.COMPLETED, end_time)


async def abandon_session(db: AsyncSession, session_id: int) -> TestSession:
    return await _close(db, session_id, TestSessionStatus.ABANDONED, None)
