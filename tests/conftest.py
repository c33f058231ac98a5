"""
Test configuration and fixtures.
"""
import os
from typing import AsyncGenerator, List, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["REDIS_URL"] = "redis://localhost:6379/15"

from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.schemas import AnswerIn, AnswerSheetCreate, OptionIn, QuestionIn, TestCreate  # noqa: E402
from app.services import answer_sheet_service, test_service  # noqa: E402



def build_test_payload(n_questions: int = 2, correct_index: int = 0, subject: str = "Carpentry NC II") -> TestCreate:
    return TestCreate(
        subject=subject,
        instruction="Choose the best answer.",
        questions=[
            QuestionIn(
                question_text=f"Question {i + 1}",
                options=[OptionIn(text=f"Q{i + 1} option {j}", is_correct=(j == correct_index)) for j in range(4)],
            )
            for i in range(n_questions)
        ],
    )


@pytest.fixture
def make_test_body():
    """JSON body for POST /api/tests."""

    def _payload(n_questions: int = 2, correct_index: int = 0, subject: str = "Carpentry NC II") -> dict:
        return build_test_payload(n_questions, correct_index, subject).model_dump()

    return _payload


@pytest.fixture
async def db_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app, one database session per request."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_test(db_session):
    async def _make(n_questions: int = 2, correct_index: int = 0, subject: str = "Carpentry NC II"):
        return await test_service.create_test(db_session, build_test_payload(n_questions, correct_index, subject))

    return _make


@pytest.fixture
def make_sheet(db_session):
    """Submit a sheet; picks[i] is the option index chosen for question i (None = unanswered)."""

    async def _make(uli: str, test, picks: List[Optional[int]]):
        answers = [
            AnswerIn(question_id=q.id, selected_option=q.options[idx].id)
            for q, idx in zip(test.questions, picks)
            if idx is not None
        ]
        payload = AnswerSheetCreate(uli=uli, test_id=test.id, answers=answers)
        return await answer_sheet_service.create_answer_sheet(db_session, payload)

    return _make
