"""Test authoring endpoints."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas import MessageResponse, TestCreate, TestResponse
from app.services import test_service

router = APIRouter(prefix="/tests", tags=["tests"])


@router.post("", response_model=TestResponse, status_code=status.HTTP_201_CREATED)
async def create_test(payload: TestCreate, db: AsyncSession = Depends(get_db)):
    """Create a test. The 8-character test code is generated server side."""
    return await test_service.create_test(db, payload)


@router.get("", response_model=List[TestResponse])
async def list_tests(db: AsyncSession = Depends(get_db)):
    return await test_service.list_tests(db)


@router.get("/code/{test_code}", response_model=TestResponse)
async def get_test_by_code(test_code: str, db: AsyncSession = Depends(get_db)):
    return await test_service.get_test_by_code(db, test_code)


@router.get("/{test_id}", response_model=TestResponse)
async def get_test(test_id: int, db: AsyncSession = Depends(get_db)):
    return await test_service.get_test(db, test_id)


@router.put("/{test_id}", response_model=TestResponse)
async def update_test(test_id: int, payload: TestCreate, db: AsyncSession = Depends(get_db)):
    return await test_service.update_test(db, test_id, payload)


@router.delete("/{test_id}", response_model=MessageResponse)
async def delete_test(test_id: int, db: AsyncSession = Depends(get_db)):
    await test_service.delete_test(db, test_id)
    return MessageResponse(message="Test deleted successfully")
