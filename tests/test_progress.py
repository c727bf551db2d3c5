"""
Test cases for the learner progress dashboard.
"""

from conftest import auth_headers


def enroll(client, user, course_id):
    return client.post(
        "/api/users/enroll", json={"courseId": course_id}, headers=auth_headers(user)
    )


def complete(client, user, course_id, lesson_id):
    return client.post(
        "/api/users/complete-lesson",
        json={"courseId": course_id, "lessonId": lesson_id},
        headers=auth_headers(user),
    )


def submit(client, user, quiz_id, selections):
    return client.post(
        "/api/quiz/submit",
        json={"quizId": quiz_id, "answers": [{"selectedOption": s} for s in selections]},
        headers=auth_headers(user),
    )


class TestProgress:
    """Test cases for GET /api/progress/{user_id}."""

    def test_empty_progress(self, client, student):
        response = client.get(
            f"/api/progress/{student.id}", headers=auth_headers(student)
        )

        assert response.status_code == 200
        data = response.json()
        assert data["userName"] == "Sam Student"
        assert data["overallProgress"] == {
            "totalEnrolledCourses": 0,
            "totalCompletedLessons": 0,
            "totalQuizzesTaken": 0,
            "totalQuizzesPassed": 0,
            "averageQuizScore": 0,
        }
        assert data["courseProgress"] == []

    def test_course_and_quiz_progress(
        self, client, make_course, instructor, student, quiz, course
    ):
        three_lessons = make_course(instructor, title="Three lessons", lessons=3)
        enroll(client, student, course.id)
        enroll(client, student, three_lessons.id)
        complete(client, student, course.id, course.lessons[0].id)
        complete(client, student, three_lessons.id, three_lessons.lessons[0].id)
        submit(client, student, quiz["id"], [1, 1])  # 50%
        submit(client, student, quiz["id"], [1, 0])  # 100%

        data = client.get(
            f"/api/progress/{student.id}", headers=auth_headers(student)
        ).json()

        overall = data["overallProgress"]
        assert overall["totalEnrolledCourses"] == 2
        assert overall["totalCompletedLessons"] == 2
        assert overall["totalQuizzesTaken"] == 2
        assert overall["totalQuizzesPassed"] == 1
        assert overall["averageQuizScore"] == 75

        by_course = {c["courseId"]: c for c in data["courseProgress"]}
        assert by_course[course.id]["progressPercentage"] == 50
        assert by_course[course.id]["totalLessons"] == 2
        assert len(by_course[course.id]["quizResults"]) == 2
        assert by_course[three_lessons.id]["progressPercentage"] == 33
        assert by_course[three_lessons.id]["quizResults"] == []

        recent = data["recentActivity"]
        assert [q["attemptNumber"] for q in recent["recentQuizzes"]] == [2, 1]
        assert recent["recentQuizzes"][0]["quizTitle"] == "Basics Check"
        assert len(recent["recentLessons"]) == 2

    def test_recent_activity_is_capped(self, client, make_course, instructor, student):
        big = make_course(instructor, title="Big", lessons=7)
        enroll(client, student, big.id)
        for lesson in big.lessons:
            complete(client, student, big.id, lesson.id)

        data = client.get(
            f"/api/progress/{student.id}", headers=auth_headers(student)
        ).json()

        assert data["overallProgress"]["totalCompletedLessons"] == 7
        assert len(data["recentActivity"]["recentLessons"]) == 5
        assert data["courseProgress"][0]["progressPercentage"] == 100

    def test_other_student_forbidden(self, client, student, other_student):
        response = client.get(
            f"/api/progress/{student.id}", headers=auth_headers(other_student)
        )
        assert response.status_code == 403
        assert response.json() == {"message": "Not authorized to view this progress"}

    def test_admin_can_view(self, client, student, admin):
        response = client.get(f"/api/progress/{student.id}", headers=auth_headers(admin))
        assert response.status_code == 200

    def test_unknown_user(self, client, admin):
        response = client.get("/api/progress/9999", headers=auth_headers(admin))
        assert response.status_code == 404


    def test_achievements_listed(self, client, course, student):
        enroll(client, student, course.id)
        complete(client, student, course.id, course.lessons[0].id)

        data = client.get(
            f"/api/progress/{student.id}", headers=auth_headers(student)
        ).json()

        assert [a["code"] for a in data["achievements"]] == [
            "first_lesson",
            "first_enrollment",
        ]
        assert data["achievements"][1]["title"] == "Learning Journey Begins"


class TestCourseProgress:
    """Test cases for GET /api/users/{user_id}/progress/{course_id}."""

    def test_course_progress(self, client, make_course, instructor, student):
        three_lessons = make_course(instructor, title="Three lessons", lessons=3)
        enroll(client, student, three_lessons.id)
        complete(client, student, three_lessons.id, three_lessons.lessons[1].id)

        response = client.get(
            f"/api/users/{student.id}/progress/{three_lessons.id}",
            headers=auth_headers(student),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["courseTitle"] == "Three lessons"
        assert data["totalLessons"] == 3
        assert data["completedLessons"] == 1
        assert data["progressPercentage"] == 33
        assert len(data["completedLessonDetails"]) == 1
        detail = data["completedLessonDetails"][0]
        assert detail["lessonId"] == three_lessons.lessons[1].id
        assert detail["lessonTitle"] == "Lesson 2"
        assert detail["duration"] == "10 min"

    def test_only_counts_this_course(self, client, course, make_course, instructor, student):
        other = make_course(instructor, title="Other course")
        complete(client, student, other.id, other.lessons[0].id)

        data = client.get(
            f"/api/users/{student.id}/progress/{course.id}",
            headers=auth_headers(student),
        ).json()

        assert data["completedLessons"] == 0
        assert data["progressPercentage"] == 0
        assert data["completedLessonDetails"] == []

    def test_instructor_and_admin_can_view(self, client, course, student, instructor, admin):
        url = f"/api/users/{student.id}/progress/{course.id}"

        assert client.get(url, headers=auth_headers(instructor)).status_code == 200
        assert client.get(url, headers=auth_headers(admin)).status_code == 200

    def test_other_student_forbidden(self, client, course, student, other_student):
        response = client.get(
            f"/api/users/{student.id}/progress/{course.id}",
            headers=auth_headers(other_student),
        )

        assert response.status_code == 403
        assert response.json() == {"message": "Not authorized to view this progress"}

    def test_unknown_user_or_course(self, client, course, admin):
        headers = auth_headers(admin)

        assert client.get(
            f"/api/users/9999/progress/{course.id}", headers=headers
        ).status_code == 404
        assert client.get(
            f"/api/users/{admin.id}/progress/9999", headers=headers
        ).status_code == 404


class TestHealth:
    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["database"] == "healthy"

    def test_unknown_route_uses_message_envelope(self, client):
        response = client.get("/api/nothing-here")
        assert response.status_code == 404
        assert response.json() == {"message": "Not Found"}
