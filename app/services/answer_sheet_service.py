"""Answer sheet submission and lookup."""

import logging
from datetime import datetime
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import NotFoundError
from app.models import AnswerSheet, SheetAnswer, Test
from app.schemas import AnswerSheetCreate

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    "first_name",
    "last_name",
    "middle_initial",
    "contact_number",
    "address",
    "school",
    "qualifications",
)


async def _resolve_test(db: AsyncSession, payload: AnswerSheetCreate) -> Test:
    if payload.test_id is not None:
        test = await db.get(Test, payload.test_id)
    else:
        result = await db.execute(select(Test).where(Test.test_code == payload.test_code.strip().upper()))
        test = result.scalar_one_or_none()
    if test is None:
        raise NotFoundError("Test not found")
    return test


async def create_answer_sheet(db: AsyncSession, payload: AnswerSheetCreate) -> AnswerSheet:
    test = await _resolve_test(db, payload)

    sheet = AnswerSheet(
        uli=payload.uli,
        test_id=test.id,
        date=payload.date or datetime.utcnow(),
        sex=payload.sex.value if payload.sex else None,
        civil_status=payload.civil_status.value if payload.civil_status else None,
        highest_educational_attainment=(
            payload.highest_educational_attainment.value if payload.highest_educational_attainment else None
        ),
        **{field: getattr(payload, field) for field in PROFILE_FIELDS},
    )
    sheet.answers = [
        SheetAnswer(position=idx, question_id=a.question_id, selected_option_id=a.selected_option)
        for idx, a in enumerate(payload.answers)
    ]
    db.add(sheet)
    await db.commit()
    logger.info("Answer sheet %s submitted by uli=%s for test %s", sheet.id, sheet.uli, test.test_code)

    result = await db.execute(
        select(AnswerSheet)
        .where(AnswerSheet.id == sheet.id)
        .options(selectinload(AnswerSheet.answers))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def get_answer_sheets_by_uli(db: AsyncSession, uli: str) -> List[AnswerSheet]:
    result = await db.execute(
        select(AnswerSheet)
        .where(AnswerSheet.uli == uli)
        .options(selectinload(AnswerSheet.answers))
        .order_by(AnswerSheet.date.desc(), AnswerSheet.id.desc())
    )
    sheets = list(result.scalars().all())
    if not sheets:
        raise NotFoundError("Answer sheet not found")
    return sheets
