"""Answer sheet submission endpoints."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas import AnswerSheetCreate, AnswerSheetResponse
from app.services import answer_sheet_service

router = APIRouter(prefix="/answer-sheets", tags=["answer-sheets"])


@router.post("", response_model=AnswerSheetResponse, status_code=status.HTTP_201_CREATED)
async def create_answer_sheet(payload: AnswerSheetCreate, db: AsyncSession = Depends(get_db)):
    return await answer_sheet_service.create_answer_sheet(db, payload)


@router.get("/answers/{uli}", response_model=List[AnswerSheetResponse])
async def get_answer_sheets_by_uli(uli: str, db: AsyncSession = Depends(get_db)):
    return await answer_sheet_service.get_answer_sheets_by_uli(db, uli)
