"""Result calculation and bookkeeping."""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config import get_settings
from app.core.errors import NotFoundError
from app.models import AnswerSheet, Question, Result, Test
from app.services.archive_service import archive_entity
from app.services.scoring_service import (
    count_correct,
    is_passed,
    percentage,
    performance_remark,
    review_answers,
)

logger = logging.getLogger(__name__)
settings = get_settings()


def _test_with_questions():
    return selectinload(Test.questions).selectinload(Question.options)


def result_snapshot(result: Result) -> dict:
    return {
        "uli": result.uli,
        "test_id": result.test_id,
        "test_code": result.test_code,
        "subject": result.subject,
        "score": result.score,
        "total_questions": result.total_questions,
        "remarks": result.remarks,
        "created_at": result.created_at,
        "updated_at": result.updated_at,
    }


async def _find_result(db: AsyncSession, uli: str, test_id: int) -> Optional[Result]:
    result = await db.execute(
        select(Result)
        .where(Result.uli == uli, Result.test_id == test_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _find_result_by_code(db: AsyncSession, uli: str, test_code: str) -> Optional[Result]:
    result = await db.execute(
        select(Result)
        .where(Result.uli == uli, Result.test_code == test_code.strip().upper())
        .order_by(Result.created_at.desc(), Result.id.desc())
        .limit(1)
    )
    return result.scalars().first()


def _insert_for(db: AsyncSession):
    if db.get_bind().dialect.name == "sqlite":
        return sqlite_insert
    return pg_insert


async def _upsert_result(db: AsyncSession, sheet: AnswerSheet, test: Test) -> Result:
    """Create or overwrite the (uli, test) result from the given sheet.

    A single INSERT ... ON CONFLICT statement, so concurrent writers for the
    same pair both succeed and the last one wins. Remarks survive an
    overwrite.
    """
    uli, test_id = sheet.uli, test.id
    now = datetime.utcnow()
    values = {
        "test_code": test.test_code,
        "subject": test.subject,
        "score": count_correct(sheet.answers, test.questions),
        "total_questions": len(test.questions),
    }

    stmt = _insert_for(db)(Result).values(
        uli=uli, test_id=test_id, remarks="", created_at=now, updated_at=now, **values
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[Result.uli, Result.test_id],
        set_={**{key: stmt.excluded[key] for key in values}, "updated_at": now},
    )
    await db.execute(stmt)
    await db.commit()

    result = await _find_result(db, uli, test_id)
    logger.info(
        "Scored uli=%s test=%s: %s/%s",
        result.uli,
        result.test_code,
        result.score,
        result.total_questions,
    )
    return result


async def calculate_result(db: AsyncSession, uli: str, force: bool = True) -> Result:
    """Score the learner's answer sheet and store the result.

    The learner's first submitted sheet is used. With force=False an
    existing result for the same test is returned untouched.
    """
    sheet = (
        await db.execute(
            select(AnswerSheet)
            .where(AnswerSheet.uli == uli)
            .order_by(AnswerSheet.id.asc())
            .limit(1)
            .options(selectinload(AnswerSheet.answers))
        )
    ).scalars().first()
    if sheet is None:
        raise NotFoundError("Answersheet not found")

    test = None
    if sheet.test_id is not None:
        test = (
            await db.execute(select(Test).where(Test.id == sheet.test_id).options(_test_with_questions()))
        ).scalar_one_or_none()
    if test is None:
        raise NotFoundError("Test not found")

    if not force:
        existing = await _find_result(db, uli, test.id)
        if existing is not None:
            return existing

    return await _upsert_result(db, sheet, test)


async def calculate_all_results(db: AsyncSession, force: bool = False) -> List[Result]:
    """Score every answer sheet that has no result yet.

    Sheets are handled one at a time and committed individually, so a crash
    part-way leaves the earlier results in place. Sheets whose test is gone
    are skipped. With force=True existing results are recalculated too.
    """
    sheets = (
        await db.execute(
            select(AnswerSheet)
            .order_by(AnswerSheet.id.asc())
            .options(
                selectinload(AnswerSheet.answers),
                selectinload(AnswerSheet.test).selectinload(Test.questions).selectinload(Question.options),
            )
        )
    ).scalars().all()

    # keyed by result id: two sheets of one learner for one test share a row
    processed: Dict[int, Result] = {}
    for sheet in sheets:
        test = sheet.test
        if test is None:
            logger.warning("Skipping answer sheet %s - no test found", sheet.id)
            continue

        if not force:
            existing = await _find_result(db, sheet.uli, test.id)
            if existing is not None:
                logger.info("Result already exists for ULI %s and test %s", sheet.uli, test.test_code)
                continue

        result = await _upsert_result(db, sheet, test)
        processed[result.id] = result

    logger.info("Batch scoring finished: %d result(s) written from %d sheet(s)", len(processed), len(sheets))
    return list(processed.values())


async def list_results(db: AsyncSession, test_code: Optional[str] = None) -> List[Result]:
    stmt = select(Result)
    if test_code:
        stmt = stmt.where(Result.test_code == test_code.strip().upper())
    stmt = stmt.order_by(Result.created_at.desc(), Result.id.desc())
    return list((await db.execute(stmt)).scalars().all())


async def get_result(db: AsyncSession, uli: str, test_code: str) -> Result:
    result = await _find_result_by_code(db, uli, test_code)
    if result is None:
        raise NotFoundError("Result not found")
    return result


async def update_remarks(db: AsyncSession, uli: str, test_code: str, remarks: str) -> Result:
    result = await get_result(db, uli, test_code)
    result.remarks = remarks
    await db.commit()
    await db.refresh(result)
    return result


async def delete_result(db: AsyncSession, uli: str, test_code: str, deleted_by: Optional[str] = None) -> None:
    result = await get_result(db, uli, test_code)
    archive_entity(db, "result", result.id, result_snapshot(result), deleted_by=deleted_by)
    await db.delete(result)
    await db.commit()
    logger.info("Deleted result uli=%s test=%s", uli, result.test_code)


async def list_user_results(db: AsyncSession, uli: str) -> List[Result]:
    """Learner's results, newest first. No results is reported as not found."""
    rows = (
        await db.execute(
            select(Result)
            .where(Result.uli == uli)
            .order_by(Result.created_at.desc(), Result.id.desc())
        )
    ).scalars().all()
    if not rows:
        raise NotFoundError("No results found for this ULI")
    return list(rows)


async def review_result(db: AsyncSession, uli: str, test_code: str) -> dict:
    """Per-question breakdown of the learner's sheet for a test."""
    test = (
        await db.execute(
            select(Test).where(Test.test_code == test_code.strip().upper()).options(_test_with_questions())
        )
    ).scalar_one_or_none()
    if test is None:
        raise NotFoundError("Test not found")

    sheet = (
        await db.execute(
            select(AnswerSheet)
            .where(AnswerSheet.uli == uli, AnswerSheet.test_id == test.id)
            .order_by(AnswerSheet.id.asc())
            .limit(1)
            .options(selectinload(AnswerSheet.answers))
        )
    ).scalars().first()
    if sheet is None:
        raise NotFoundError("Answersheet not found")

    items = review_answers(sheet.answers, test.questions)
    score = sum(1 for item in items if item["is_correct"])
    total = len(test.questions)
    percent = percentage(score, total)
    return {
        "uli": uli,
        "test_code": test.test_code,
        "subject": test.subject,
        "score": score,
        "total_questions": total,
        "percentage": percent,
        "passed": is_passed(score, total, settings.PASSING_RATE),
        "performance": performance_remark(percent),
        "items": items,
    }
