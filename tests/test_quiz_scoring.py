"""
Test cases for grading quiz submissions.
"""

from types import SimpleNamespace

import pytest

from app.services.quiz_scoring import (
    grade_submission,
    is_correct_selection,
    round_percentage,
)


def make_question(question_id, correct_index, option_count=4, points=1):
    options = [
        SimpleNamespace(is_correct=(i == correct_index)) for i in range(option_count)
    ]
    return SimpleNamespace(id=question_id, points=points, options=options)


@pytest.fixture
def questions():
    # Correct options: 1, 0, 3, 2
    return [
        make_question(1, 1),
        make_question(2, 0),
        make_question(3, 3),
        make_question(4, 2),
    ]


class TestRoundPercentage:
    """Percentages are whole numbers rounded half up."""

    @pytest.mark.parametrize(
        "earned, possible, expected",
        [
            (0, 4, 0),
            (2, 4, 50),
            (4, 4, 100),
            (1, 3, 33),
            (2, 3, 67),
            (1, 8, 13),  # 12.5 rounds up
            (5, 8, 63),  # 62.5 rounds up
        ],
    )
    def test_rounding(self, earned, possible, expected):
        assert round_percentage(earned, possible) == expected

    def test_no_possible_points(self):
        assert round_percentage(0, 0) == 0


class TestIsCorrectSelection:
    def test_correct_index(self):
        assert is_correct_selection(make_question(1, 2), 2) is True

    def test_wrong_index(self):
        assert is_correct_selection(make_question(1, 2), 1) is False

    @pytest.mark.parametrize("selected", [None, -1, 4, 99])
    def test_missing_or_out_of_range_is_incorrect(self, selected):
        assert is_correct_selection(make_question(1, 0), selected) is False


class TestGradeSubmission:
    """Test cases for grade_submission."""

    def test_half_correct_fails_at_70(self, questions):
        graded = grade_submission(questions, [1, 0, 0, 0], passing_score=70)

        assert graded.score == 2
        assert graded.correct_answers == 2
        assert graded.total_questions == 4
        assert graded.percentage == 50
        assert graded.passed is False

    def test_all_correct_passes(self, questions):
        graded = grade_submission(questions, [1, 0, 3, 2], passing_score=70)

        assert graded.score == 4
        assert graded.percentage == 100
        assert graded.passed is True

    def test_pass_threshold_is_inclusive(self):
        qs = [make_question(i, 0) for i in range(10)]
        graded = grade_submission(qs, [0] * 7 + [1] * 3, passing_score=70)

        assert graded.percentage == 70
        assert graded.passed is True

    def test_null_and_out_of_range_answers_earn_nothing(self, questions):
        graded = grade_submission(questions, [None, -1, 7, 2], passing_score=50)

        assert graded.correct_answers == 1
        assert graded.score == 1
        assert [a.is_correct for a in graded.answers] == [False, False, False, True]
        assert graded.answers[1].selected_option == -1

    def test_missing_answers_are_graded_unanswered(self, questions):
        graded = grade_submission(questions, [1], passing_score=70)

        assert graded.correct_answers == 1
        assert graded.total_questions == 4
        assert graded.answers[3].selected_option is None
        assert graded.answers[3].is_correct is False

    def test_points_are_weighted(self):
        qs = [make_question(1, 0, points=3), make_question(2, 0, points=1)]
        graded = grade_submission(qs, [0, 1], passing_score=70)

        assert graded.score == 3
        assert graded.total_points == 4
        assert graded.percentage == 75
        assert graded.passed is True
        assert [a.points_awarded for a in graded.answers] == [3, 0]

    def test_answer_records_follow_question_ids(self, questions):
        graded = grade_submission(questions, [1, 0, 3, 2], passing_score=70)

        assert [a.question_id for a in graded.answers] == [1, 2, 3, 4]
