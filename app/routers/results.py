"""Result calculation, lookup and export endpoints."""

import csv
from io import StringIO
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse, StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.database import get_db
from app.models import Result
from app.schemas import (
    BackgroundTaskResponse,
    CalculateAllResponse,
    MessageResponse,
    RemarksUpdate,
    ResultResponse,
    ResultReviewResponse,
)
from app.services import result_service
from app.services.scoring_service import is_passed, percentage
from app.workers.tasks_results import calculate_all_results_task

router = APIRouter(prefix="/results", tags=["results"])
settings = get_settings()


def _result_response(result: Result) -> ResultResponse:
    return ResultResponse(
        id=result.id,
        uli=result.uli,
        test_id=result.test_id,
        test_code=result.test_code,
        subject=result.subject,
        score=result.score,
        total_questions=result.total_questions,
        remarks=result.remarks or "",
        percentage=percentage(result.score, result.total_questions),
        passed=is_passed(result.score, result.total_questions, settings.PASSING_RATE),
        created_at=result.created_at,
        updated_at=result.updated_at,
    )


@router.get("", response_model=List[ResultResponse])
async def list_results(
    test_code: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    rows = await result_service.list_results(db, test_code=test_code)
    return [_result_response(r) for r in rows]


@router.get("/export.csv")
async def export_results_csv(
    test_code: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    rows = await result_service.list_results(db, test_code=test_code)

    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(
        ["uli", "test_code", "subject", "score", "total_questions", "percentage", "passed", "remarks", "created_at"]
    )
    for r in rows:
        writer.writerow(
            [
                r.uli,
                r.test_code,
                r.subject or "",
                r.score,
                r.total_questions,
                f"{percentage(r.score, r.total_questions):.2f}",
                "yes" if is_passed(r.score, r.total_questions, settings.PASSING_RATE) else "no",
                r.remarks or "",
                r.created_at.isoformat() if r.created_at else "",
            ]
        )

    return StreamingResponse(
        iter([buffer.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=results.csv"},
    )


@router.post("/calculate-all", response_model=CalculateAllResponse)
async def calculate_all_results(
    force: bool = Query(default=False, description="Recalculate results that already exist"),
    background: bool = Query(default=False, description="Queue the batch on the worker instead"),
    db: AsyncSession = Depends(get_db),
):
    if background:
        task = calculate_all_results_task.delay(force=force)
        body = BackgroundTaskResponse(message="Result calculation queued", task_id=task.id)
        return JSONResponse(status_code=status.HTTP_202_ACCEPTED, content=body.model_dump())

    results = await result_service.calculate_all_results(db, force=force)
    if force:
        message = f"Recalculated {len(results)} results"
    else:
        message = f"Generated {len(results)} new results"
    return CalculateAllResponse(
        message=message,
        results=[_result_response(r) for r in results],
    )


@router.post("/calculate/{uli}", response_model=ResultResponse)
async def calculate_result(
    uli: str,
    force: bool = Query(default=True, description="Overwrite an existing result"),
    db: AsyncSession = Depends(get_db),
):
    result = await result_service.calculate_result(db, uli, force=force)
    return _result_response(result)


@router.post("/getuser/{uli}", response_model=List[ResultResponse])
async def get_user_results(uli: str, db: AsyncSession = Depends(get_db)):
    rows = await result_service.list_user_results(db, uli)
    return [_result_response(r) for r in rows]


@router.get("/{uli}/{test_code}", response_model=ResultResponse)
async def get_result(uli: str, test_code: str, db: AsyncSession = Depends(get_db)):
    result = await result_service.get_result(db, uli, test_code)
    return _result_response(result)


@router.get("/{uli}/{test_code}/review", response_model=ResultReviewResponse)
async def review_result(uli: str, test_code: str, db: AsyncSession = Depends(get_db)):
    return ResultReviewResponse(**await result_service.review_result(db, uli, test_code))


@router.patch("/{uli}/{test_code}/remarks", response_model=ResultResponse)
async def update_remarks(
    uli: str,
    test_code: str,
    payload: RemarksUpdate,
    db: AsyncSession = Depends(get_db),
):
    result = await result_service.update_remarks(db, uli, test_code, payload.remarks)
    return _result_response(result)


@router.delete("/{uli}/{test_code}", response_model=MessageResponse)
async def delete_result(uli: str, test_code: str, db: AsyncSession = Depends(get_db)):
    await result_service.delete_result(db, uli, test_code)
    return MessageResponse(message="Result deleted successfully")
