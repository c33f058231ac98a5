"""Scoring helpers for answer-sheet evaluation."""

from typing import Dict, Iterable, List, Optional

PERFORMANCE_BANDS = (
    (90.0, "Excellent performance! Outstanding grasp of the subject matter."),
    (80.0, "Very good! Strong understanding of the material."),
    (70.0, "Good job! Shows decent comprehension with room for improvement."),
    (60.0, "Fair. Additional study recommended to strengthen understanding."),
)
LOWEST_BAND = "Needs improvement. Consider reviewing the material and retaking the test."


def correct_option_ids(questions: Iterable) -> Dict[int, int]:
    """Map question id -> id of its first option flagged correct.

    Questions without a flagged option are left out.
    """
    mapping: Dict[int, int] = {}
    for question in questions:
        for option in question.options:
            if option.is_correct:
                mapping[question.id] = option.id
                break
    return mapping


def count_correct(answers: Iterable, questions: Iterable) -> int:
    """Count answers whose selected option is the question's correct option.

    Answers pointing at unknown questions, and questions with no correct
    option, are skipped rather than rejected.
    """
    key = correct_option_ids(questions)
    score = 0
    for answer in answers:
        expected = key.get(answer.question_id)
        if expected is not None and expected == answer.selected_option_id:
            score += 1
    return score


def review_answers(answers: Iterable, questions: Iterable) -> List[dict]:
    by_id = {q.id: q for q in questions}
    rows: List[dict] = []
    for answer in answers:
        question = by_id.get(answer.question_id)
        selected = correct = None
        if question is not None:
            for option in question.options:
                if option.id == answer.selected_option_id:
                    selected = option
                if correct is None and option.is_correct:
                    correct = option
        rows.append(
            {
                "question_id": answer.question_id,
                "question_text": question.question_text if question is not None else None,
                "selected_answer": selected.text if selected is not None else None,
                "correct_answer": correct.text if correct is not None else None,
                "is_correct": bool(correct is not None and selected is not None and correct.id == selected.id),
            }
        )
    return rows


def percentage(score: int, total_questions: int) -> float:
    if total_questions <= 0:
        return 0.0
    return round(score / total_questions * 100.0, 2)


def is_passed(score: int, total_questions: int, passing_rate: float) -> bool:
    if total_questions <= 0:
        return False
    return score / total_questions >= passing_rate


def performance_remark(percent: Optional[float]) -> str:
    value = percent or 0.0
    for threshold, remark in PERFORMANCE_BANDS:
        if value >= threshold:
            return remark
    return LOWEST_BAND
