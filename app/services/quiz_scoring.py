# app/services/quiz_scoring.py
"""
Grading of quiz submissions.

Answers correspond to questions by position: ``selections[i]`` is the index
of the option picked for ``questions[i]``. A selection that is missing, null
or outside the option list is graded as incorrect and earns no points; it is
never an error. Percentages are rounded half up, so 12.5% becomes 13%.
"""

from typing import List, Optional, Sequence

from app.schemas.quiz import AnswerRecord, GradedAttempt


def round_percentage(earned: int, possible: int) -> int:
    """round_half_up(100 * earned / possible) in exact integer arithmetic."""
    if possible <= 0:
        return 0
    return (200 * earned + possible) // (2 * possible)


def is_correct_selection(question, selected: Optional[int]) -> bool:
    if selected is None or not 0 <= selected < len(question.options):
        return False
    return bool(question.options[selected].is_correct)


def grade_submission(
    questions: Sequence,
    selections: Sequence[Optional[int]],
    passing_score: int,
) -> GradedAttempt:
    """
    Grade ``selections`` against ``questions``.

    ``questions`` are objects exposing ``id``, ``points`` and an ordered
    ``options`` list whose items expose ``is_correct``.
    """
    answers: List[AnswerRecord] = []
    score = 0
    correct_answers = 0

    for index, question in enumerate(questions):
        selected = selections[index] if index < len(selections) else None
        correct = is_correct_selection(question, selected)
        points_awarded = question.points if correct else 0

        if correct:
            correct_answers += 1
            score += points_awarded

        answers.append(
            AnswerRecord(
                question_id=question.id,
                selected_option=selected,
                is_correct=correct,
                points_awarded=points_awarded,
            )
        )

    total_points = sum(question.points for question in questions)
    percentage = round_percentage(score, total_points)

    return GradedAttempt(
        answers=answers,
        score=score,
        total_points=total_points,
        percentage=percentage,
        correct_answers=correct_answers,
        total_questions=len(questions),
        passed=percentage >= passing_score,
    )
