import asyncio

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from app.core.errors import NotFoundError
from app.models import AnswerSheet, ArchivedRecord, Result
from app.services import result_service, test_service

SAMPLE_ULI = "ABC-24-001-03907-001"


async def _results(db, **criteria):
    stmt = select(Result).filter_by(**criteria).order_by(Result.id).execution_options(populate_existing=True)
    return list((await db.execute(stmt)).scalars().all())


async def test_score_counts_correct_answers(db_session, make_test, make_sheet):
    test = await make_test(n_questions=2, correct_index=0)
    await make_sheet(SAMPLE_ULI, test, [0, 2])

    result = await result_service.calculate_result(db_session, SAMPLE_ULI)

    assert result.score == 1
    assert result.total_questions == 2
    assert result.test_code == test.test_code
    assert result.subject == "Carpentry NC II"
    assert result.remarks == ""


async def test_score_twice_keeps_single_row(db_session, make_test, make_sheet):
    test = await make_test(n_questions=3)
    await make_sheet(SAMPLE_ULI, test, [0, 0, 1])

    first = await result_service.calculate_result(db_session, SAMPLE_ULI)
    second = await result_service.calculate_result(db_session, SAMPLE_ULI)

    rows = await _results(db_session, uli=SAMPLE_ULI)
    assert len(rows) == 1
    assert first.id == second.id
    assert (second.score, second.total_questions, second.test_code) == (2, 3, test.test_code)


async def test_score_without_force_returns_existing(db_session, make_test, make_sheet):
    test = await make_test(n_questions=2)
    await make_sheet(SAMPLE_ULI, test, [0, 0])
    result = await result_service.calculate_result(db_session, SAMPLE_ULI)
    result.score = 0
    await db_session.commit()

    kept = await result_service.calculate_result(db_session, SAMPLE_ULI, force=False)
    assert kept.score == 0

    rescored = await result_service.calculate_result(db_session, SAMPLE_ULI, force=True)
    assert rescored.score == 2


async def test_score_uses_first_submitted_sheet(db_session, make_test, make_sheet):
    test = await make_test(n_questions=2)
    await make_sheet(SAMPLE_ULI, test, [1, 1])
    await make_sheet(SAMPLE_ULI, test, [0, 0])

    result = await result_service.calculate_result(db_session, SAMPLE_ULI)
    assert result.score == 0


async def test_score_unknown_uli(db_session):
    with pytest.raises(NotFoundError) as exc_info:
        await result_service.calculate_result(db_session, "NO-SUCH-ULI")
    assert exc_info.value.message == "Answersheet not found"
    assert exc_info.value.status_code == 404


async def test_score_with_missing_test(db_session):
    db_session.add(AnswerSheet(uli=SAMPLE_ULI, test_id=9999))
    await db_session.commit()

    with pytest.raises(NotFoundError) as exc_info:
        await result_service.calculate_result(db_session, SAMPLE_ULI)
    assert exc_info.value.message == "Test not found"


async def test_unknown_question_ids_are_ignored(db_session, make_test):
    from app.schemas import AnswerIn, AnswerSheetCreate
    from app.services import answer_sheet_service

    test = await make_test(n_questions=2)
    q1 = test.questions[0]
    payload = AnswerSheetCreate(
        uli=SAMPLE_ULI,
        test_id=test.id,
        answers=[
            AnswerIn(question_id=q1.id, selected_option=q1.options[0].id),
            AnswerIn(question_id=424242, selected_option=1),
        ],
    )
    await answer_sheet_service.create_answer_sheet(db_session, payload)

    result = await result_service.calculate_result(db_session, SAMPLE_ULI)
    assert result.score == 1
    assert result.total_questions == 2


async def test_calculate_all_skips_existing_results(db_session, make_test, make_sheet):
    test = await make_test(n_questions=2)
    await make_sheet("ULI-A", test, [0, 0])
    await make_sheet("ULI-B", test, [0, 1])

    existing = await result_service.calculate_result(db_session, "ULI-A")
    existing.score = 99
    await db_session.commit()

    created = await result_service.calculate_all_results(db_session)

    assert [r.uli for r in created] == ["ULI-B"]
    assert created[0].score == 1
    (kept,) = await _results(db_session, uli="ULI-A")
    assert kept.score == 99


async def test_calculate_all_with_force_rescores(db_session, make_test, make_sheet):
    test = await make_test(n_questions=2)
    await make_sheet("ULI-A", test, [0, 0])
    existing = await result_service.calculate_result(db_session, "ULI-A")
    existing.score = 99
    existing.remarks = "checked"
    await db_session.commit()

    created = await result_service.calculate_all_results(db_session, force=True)

    assert len(created) == 1
    (row,) = await _results(db_session, uli="ULI-A")
    assert row.score == 2
    assert row.remarks == "checked"


async def test_calculate_all_skips_sheets_without_test(db_session, make_test, make_sheet):
    test = await make_test(n_questions=2)
    await make_sheet("ULI-A", test, [0, 0])
    db_session.add(AnswerSheet(uli="ULI-ORPHAN", test_id=9999))
    await db_session.commit()

    created = await result_service.calculate_all_results(db_session)

    assert [r.uli for r in created] == ["ULI-A"]
    assert await _results(db_session, uli="ULI-ORPHAN") == []


async def test_calculate_all_on_empty_store(db_session):
    assert await result_service.calculate_all_results(db_session) == []


async def test_result_is_unique_per_learner_and_test(db_session, make_test):
    test = await make_test()
    db_session.add(Result(uli=SAMPLE_ULI, test_id=test.id, test_code=test.test_code, score=1, total_questions=2))
    await db_session.commit()

    db_session.add(Result(uli=SAMPLE_ULI, test_id=test.id, test_code=test.test_code, score=2, total_questions=2))
    with pytest.raises(IntegrityError):
        await db_session.commit()
    await db_session.rollback()


async def test_update_remarks_touches_only_that_result(db_session, make_test, make_sheet):
    first = await make_test(subject="Carpentry NC II")
    second = await make_test(subject="Masonry NC II")
    await make_sheet(SAMPLE_ULI, first, [0, 0])
    await make_sheet("ULI-OTHER", second, [0, 0])
    await result_service.calculate_all_results(db_session)
    before = await result_service.get_result(db_session, SAMPLE_ULI, first.test_code)
    scored = (before.score, before.total_questions)

    updated = await result_service.update_remarks(db_session, SAMPLE_ULI, first.test_code.lower(), "Passed")

    assert updated.remarks == "Passed"
    assert (updated.score, updated.total_questions) == scored == (2, 2)
    (other,) = await _results(db_session, uli="ULI-OTHER")
    assert other.remarks == ""


async def test_delete_result_archives_snapshot(db_session, make_test, make_sheet):
    test = await make_test()
    await make_sheet(SAMPLE_ULI, test, [0, 1])
    await result_service.calculate_result(db_session, SAMPLE_ULI)

    await result_service.delete_result(db_session, SAMPLE_ULI, test.test_code, deleted_by="registrar")

    assert await _results(db_session, uli=SAMPLE_ULI) == []
    archived = (await db_session.execute(select(ArchivedRecord))).scalars().one()
    assert archived.entity_type == "result"
    assert archived.deleted_by == "registrar"
    assert archived.payload["score"] == 1
    assert archived.payload["test_code"] == test.test_code

    with pytest.raises(NotFoundError):
        await result_service.get_result(db_session, SAMPLE_ULI, test.test_code)


async def test_list_user_results_newest_first(db_session, make_test, make_sheet):
    first = await make_test(subject="Carpentry NC II")
    second = await make_test(subject="Masonry NC II")
    await make_sheet(SAMPLE_ULI, first, [0, 0])
    await make_sheet(SAMPLE_ULI, second, [1, 1])
    await result_service.calculate_all_results(db_session)

    rows = await result_service.list_user_results(db_session, SAMPLE_ULI)

    assert [r.subject for r in rows] == ["Masonry NC II", "Carpentry NC II"]
    count = (await db_session.execute(select(func.count(Result.id)))).scalar_one()
    assert count == 2


async def test_list_user_results_empty_is_not_found(db_session):
    with pytest.raises(NotFoundError) as exc_info:
        await result_service.list_user_results(db_session, SAMPLE_ULI)
    assert exc_info.value.message == "No results found for this ULI"


async def test_review_result_breakdown(db_session, make_test, make_sheet):
    test = await make_test(n_questions=2)
    await make_sheet(SAMPLE_ULI, test, [0, 3])

    review = await result_service.review_result(db_session, SAMPLE_ULI, test.test_code)

    assert review["score"] == 1
    assert review["total_questions"] == 2
    assert review["percentage"] == 50.0
    assert review["passed"] is False
    assert [item["is_correct"] for item in review["items"]] == [True, False]
    assert review["items"][1]["selected_answer"] == "Q2 option 3"
    assert review["items"][1]["correct_answer"] == "Q2 option 0"


async def test_concurrent_scoring_of_one_learner(session_factory, make_test, make_sheet):
    test = await make_test(n_questions=2)
    await make_sheet(SAMPLE_ULI, test, [0, 1])

    async def score():
        async with session_factory() as db:
            result = await result_service.calculate_result(db, SAMPLE_ULI)
            return result.id, result.score

    first, second = await asyncio.gather(score(), score())

    assert first == second
    assert first[1] == 1
    async with session_factory() as db:
        assert len(await _results(db, uli=SAMPLE_ULI)) == 1


async def test_overlapping_batches_both_complete(session_factory, make_test, make_sheet):
    test = await make_test(n_questions=2)
    await make_sheet("ULI-A", test, [0, 0])
    await make_sheet("ULI-B", test, [0, 1])
    await make_sheet("ULI-C", test, [1, 1])

    async def batch():
        async with session_factory() as db:
            return await result_service.calculate_all_results(db)

    await asyncio.gather(batch(), batch())

    async with session_factory() as db:
        rows = await _results(db)
    assert sorted((r.uli, r.score) for r in rows) == [("ULI-A", 2), ("ULI-B", 1), ("ULI-C", 0)]


async def test_forced_batch_reports_each_result_once(db_session, make_test, make_sheet):
    test = await make_test(n_questions=2)
    await make_sheet(SAMPLE_ULI, test, [0, 0])
    await make_sheet(SAMPLE_ULI, test, [1, 1])

    rescored = await result_service.calculate_all_results(db_session, force=True)

    (row,) = await _results(db_session, uli=SAMPLE_ULI)
    assert [r.id for r in rescored] == [row.id]


async def test_orphaned_results_fall_outside_unique_pair(db_session, make_test, make_sheet):
    test = await make_test()
    test_code = test.test_code
    await make_sheet(SAMPLE_ULI, test, [0, 0])
    await result_service.calculate_result(db_session, SAMPLE_ULI)

    await test_service.delete_test(db_session, test.id)

    (orphan,) = await _results(db_session, uli=SAMPLE_ULI)
    assert orphan.test_id is None
    db_session.add(Result(uli=SAMPLE_ULI, test_id=None, test_code=test_code, score=0, total_questions=2))
    await db_session.commit()
    assert len(await _results(db_session, uli=SAMPLE_ULI)) == 2
