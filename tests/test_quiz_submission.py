"""
Test cases for submitting quiz attempts and reading results back.
"""

from conftest import auth_headers, quiz_payload

from app.models import QuizResult
from app.services.quiz_attempt import QuizAttemptService


def submit(client, user, quiz_id, selections, **extra):
    body = {
        "quizId": quiz_id,
        "answers": [{"selectedOption": s} for s in selections],
    }
    body.update(extra)
    return client.post("/api/quiz/submit", json=body, headers=auth_headers(user))


class TestSubmitQuiz:
    """Test cases for POST /api/quiz/submit."""

    def test_requires_authentication(self, client, quiz):
        response = client.post(
            "/api/quiz/submit", json={"quizId": quiz["id"], "answers": []}
        )
        assert response.status_code == 401
        assert response.json() == {"message": "Not authorized, no token provided"}

    def test_invalid_token_rejected(self, client, quiz):
        response = client.post(
            "/api/quiz/submit",
            json={"quizId": quiz["id"], "answers": []},
            headers={"Authorization": "Bearer not-a-token"},
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Not authorized, invalid token"

    def test_all_correct(self, client, quiz, student):
        response = submit(client, student, quiz["id"], [1, 0], timeSpent=42)

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Quiz submitted successfully"
        assert data["result"] == {
            "score": 2,
            "percentage": 100,
            "correctAnswers": 2,
            "totalQuestions": 2,
            "passed": True,
            "attemptNumber": 1,
        }

    def test_half_correct_fails(self, client, quiz, student):
        response = submit(client, student, quiz["id"], [1, 1])

        result = response.json()["result"]
        assert result["percentage"] == 50
        assert result["passed"] is False

    def test_unanswered_and_out_of_range_are_incorrect(self, client, quiz, student):
        response = submit(client, student, quiz["id"], [None, 5])

        assert response.status_code == 201
        result = response.json()["result"]
        assert result["score"] == 0
        assert result["correctAnswers"] == 0

    def test_fewer_answers_than_questions(self, client, quiz, student):
        response = submit(client, student, quiz["id"], [1])

        assert response.status_code == 201
        assert response.json()["result"]["correctAnswers"] == 1
        assert response.json()["result"]["totalQuestions"] == 2

    def test_more_answers_than_questions_rejected(self, client, quiz, student, db):
        response = submit(client, student, quiz["id"], [1, 0, 0])

        assert response.status_code == 400
        assert db.query(QuizResult).count() == 0

    def test_unknown_quiz(self, client, student):
        response = submit(client, student, 9999, [0])

        assert response.status_code == 400
        assert response.json() == {"message": "Quiz not found"}

    def test_inactive_quiz(self, client, quiz, student, instructor):
        client.put(
            f"/api/quiz/{quiz['id']}",
            json={"isActive": False},
            headers=auth_headers(instructor),
        )

        response = submit(client, student, quiz["id"], [1, 0])

        assert response.status_code == 400
        assert response.json() == {"message": "Quiz is not active"}

    def test_malformed_body_is_validation_error(self, client, quiz, student):
        response = client.post(
            "/api/quiz/submit",
            json={"quizId": quiz["id"], "answers": "nope"},
            headers=auth_headers(student),
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Validation error"
        assert response.json()["errors"]


class TestAttemptLimit:
    """Attempts are numbered per user and quiz and capped at maxAttempts."""

    def test_attempts_are_numbered(self, client, quiz, student):
        numbers = [
            submit(client, student, quiz["id"], [1, 0]).json()["result"]["attemptNumber"]
            for _ in range(3)
        ]
        assert numbers == [1, 2, 3]

    def test_attempt_over_limit_is_rejected_and_not_stored(
        self, client, quiz, student, db
    ):
        for _ in range(3):
            assert submit(client, student, quiz["id"], [1, 0]).status_code == 201

        response = submit(client, student, quiz["id"], [1, 0])

        assert response.status_code == 400
        assert response.json() == {
            "message": "Maximum attempts (3) exceeded for this quiz"
        }
        assert db.query(QuizResult).filter_by(user_id=student.id).count() == 3

    def test_limit_is_per_user(self, client, quiz, student, other_student):
        for _ in range(3):
            submit(client, student, quiz["id"], [1, 0])

        response = submit(client, other_student, quiz["id"], [1, 0])

        assert response.status_code == 201
        assert response.json()["result"]["attemptNumber"] == 1

    def test_single_attempt_quiz(self, client, course, instructor, student):
        created = client.post(
            "/api/quiz/",
            json=quiz_payload(course.id, title="One shot", maxAttempts=1),
            headers=auth_headers(instructor),
        ).json()

        assert submit(client, student, created["id"], [0, 0]).status_code == 201
        assert submit(client, student, created["id"], [1, 0]).status_code == 400

    def test_concurrent_submission_conflicts(
        self, client, quiz, student, db, monkeypatch
    ):
        assert submit(client, student, quiz["id"], [1, 0]).status_code == 201

        # a second request that counted before the first one was stored
        monkeypatch.setattr(
            QuizAttemptService, "count_attempts", lambda self, user_id, quiz_id: 0
        )
        response = submit(client, student, quiz["id"], [1, 0])

        assert response.status_code == 409
        assert response.json() == {
            "message": "Another submission for this quiz was recorded at the same time. Please retry."
        }
        assert db.query(QuizResult).filter_by(user_id=student.id).count() == 1


class TestResults:
    """Test cases for reading stored results."""

    def test_stored_result_matches_submission(self, client, quiz, student, db):
        submit(client, student, quiz["id"], [1, None], timeSpent=30)

        result = db.query(QuizResult).one()
        assert result.user_id == student.id
        assert result.course_id == quiz["courseId"]
        assert result.score == 1
        assert result.percentage == 50
        assert result.time_spent == 30
        assert result.answers[1]["selected_option"] is None
        assert result.started_at is not None

    def test_own_results_newest_first(self, client, quiz, student):
        submit(client, student, quiz["id"], [0, 0])
        submit(client, student, quiz["id"], [1, 0])

        response = client.get(
            f"/api/quiz/results/{student.id}", headers=auth_headers(student)
        )

        assert response.status_code == 200
        results = response.json()
        assert [r["attemptNumber"] for r in results] == [2, 1]
        assert results[0]["quizTitle"] == "Basics Check"
        assert results[0]["courseTitle"] == "Python Basics"
        assert results[0]["answers"][0]["isCorrect"] is True

    def test_cannot_read_other_users_results(self, client, quiz, student, other_student):
        response = client.get(
            f"/api/quiz/results/{student.id}", headers=auth_headers(other_student)
        )
        assert response.status_code == 403

    def test_admin_reads_any_results(self, client, quiz, student, admin):
        submit(client, student, quiz["id"], [1, 0])

        response = client.get(
            f"/api/quiz/results/{student.id}", headers=auth_headers(admin)
        )

        assert response.status_code == 200
        assert len(response.json()) == 1

    def test_my_attempts_in_order(self, client, quiz, student, other_student):
        submit(client, student, quiz["id"], [0, 0])
        submit(client, student, quiz["id"], [1, 0])
        submit(client, other_student, quiz["id"], [1, 0])

        response = client.get(
            f"/api/quiz/{quiz['id']}/attempts/me", headers=auth_headers(student)
        )

        assert [r["attemptNumber"] for r in response.json()] == [1, 2]
        assert [r["percentage"] for r in response.json()] == [50, 100]

    def test_quiz_results_for_owner(self, client, quiz, student, other_student, instructor):
        submit(client, student, quiz["id"], [1, 0])
        submit(client, other_student, quiz["id"], [0, 0])

        response = client.get(
            f"/api/quiz/{quiz['id']}/results?page=1&size=1",
            headers=auth_headers(instructor),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert data["totalPages"] == 2
        assert len(data["results"]) == 1

    def test_quiz_results_hidden_from_other_instructors(
        self, client, quiz, other_instructor
    ):
        response = client.get(
            f"/api/quiz/{quiz['id']}/results", headers=auth_headers(other_instructor)
        )
        assert response.status_code == 403

    def test_quiz_results_hidden_from_students(self, client, quiz, student):
        response = client.get(
            f"/api/quiz/{quiz['id']}/results", headers=auth_headers(student)
        )
        assert response.status_code == 403
        assert response.json() == {"message": "Not authorized as instructor or admin"}
