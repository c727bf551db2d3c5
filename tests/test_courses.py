"""
Test cases for course and lesson management.
"""

from conftest import auth_headers

from app.models import Course, Lesson


def course_payload(**overrides):
    payload = {
        "title": "Web Development",
        "description": "HTML, CSS and JavaScript",
        "category": "Web",
        "level": "Intermediate",
        "price": 79.5,
        "originalPrice": 99,
        "lessons": [
            {"title": "HTML", "description": "Markup", "duration": "20 min"},
            {
                "title": "CSS",
                "description": "Styles",
                "duration": "25 min",
                "resourcesUrls": ["https://example.com/css"],
            },
        ],
    }
    payload.update(overrides)
    return payload


class TestCreateCourse:
    """Test cases for POST /api/courses/."""

    def test_instructor_creates_course(self, client, instructor):
        response = client.post(
            "/api/courses/", json=course_payload(), headers=auth_headers(instructor)
        )

        assert response.status_code == 201
        data = response.json()
        assert data["instructorName"] == "Ivy Instructor"
        assert data["createdBy"] == instructor.id
        assert data["level"] == "Intermediate"
        assert data["price"] == 79.5
        assert data["students"] == 0
        assert [lesson["order"] for lesson in data["lessons"]] == [1, 2]
        assert data["lessons"][1]["resourcesUrls"] == ["https://example.com/css"]

    def test_student_cannot_create(self, client, student):
        response = client.post(
            "/api/courses/", json=course_payload(), headers=auth_headers(student)
        )
        assert response.status_code == 403

    def test_anonymous_cannot_create(self, client):
        response = client.post("/api/courses/", json=course_payload())
        assert response.status_code == 401

    def test_invalid_level(self, client, instructor):
        response = client.post(
            "/api/courses/",
            json=course_payload(level="Expert"),
            headers=auth_headers(instructor),
        )
        assert response.status_code == 400

    def test_negative_price(self, client, instructor):
        response = client.post(
            "/api/courses/",
            json=course_payload(price=-1),
            headers=auth_headers(instructor),
        )
        assert response.status_code == 400


class TestListCourses:
    """Test cases for GET /api/courses/."""

    def test_filters(self, client, make_course, instructor):
        make_course(instructor, title="Cheap", price=10, category="Web")
        make_course(instructor, title="Pricey", price=200, category="Web", level="Advanced")
        make_course(instructor, title="Data", price=50, category="Data", rating=4.5)

        web = client.get("/api/courses/?category=Web").json()
        advanced = client.get("/api/courses/?level=Advanced").json()
        mid_price = client.get("/api/courses/?min_price=20&max_price=100").json()
        rated = client.get("/api/courses/?min_rating=4").json()

        assert {c["title"] for c in web["courses"]} == {"Cheap", "Pricey"}
        assert [c["title"] for c in advanced["courses"]] == ["Pricey"]
        assert [c["title"] for c in mid_price["courses"]] == ["Data"]
        assert [c["title"] for c in rated["courses"]] == ["Data"]

    def test_search_title_and_description(self, client, make_course, instructor):
        make_course(instructor, title="Intro to Django")
        make_course(instructor, title="Flask", description="A micro framework like django")
        make_course(instructor, title="Rust")

        data = client.get("/api/courses/?search=DJANGO").json()

        assert {c["title"] for c in data["courses"]} == {"Intro to Django", "Flask"}

    def test_sort_and_paginate(self, client, make_course, instructor):
        for title, price in [("B", 30), ("A", 10), ("C", 20)]:
            make_course(instructor, title=title, price=price)

        page1 = client.get("/api/courses/?sort_by=price&order=asc&limit=2").json()
        page2 = client.get("/api/courses/?sort_by=price&order=asc&limit=2&page=2").json()

        assert [c["title"] for c in page1["courses"]] == ["A", "C"]
        assert [c["title"] for c in page2["courses"]] == ["B"]
        assert page1["total"] == 3
        assert page1["totalPages"] == 2
        assert page1["limit"] == 2

    def test_unknown_sort_field_rejected(self, client):
        response = client.get("/api/courses/?sort_by=hashed_password")
        assert response.status_code == 400

    def test_list_omits_lessons(self, client, course):
        data = client.get("/api/courses/").json()
        assert "lessons" not in data["courses"][0]

    def test_categories(self, client, make_course, instructor):
        make_course(instructor, title="One", category="Web")
        make_course(instructor, title="Two", category="Data")
        make_course(instructor, title="Three", category="Web")

        assert client.get("/api/courses/categories").json() == ["Data", "Web"]


class TestGetCourse:
    def test_includes_ordered_lessons(self, client, course):
        response = client.get(f"/api/courses/{course.id}")

        assert response.status_code == 200
        assert [lesson["title"] for lesson in response.json()["lessons"]] == [
            "Lesson 1",
            "Lesson 2",
        ]

    def test_unknown_course(self, client):
        response = client.get("/api/courses/9999")
        assert response.status_code == 404
        assert response.json() == {"message": "Course not found"}


class TestUpdateCourse:
    def test_owner_updates_fields(self, client, course, instructor):
        response = client.put(
            f"/api/courses/{course.id}",
            json={"price": 19.99, "badge": "Sale"},
            headers=auth_headers(instructor),
        )

        assert response.status_code == 200
        assert response.json()["price"] == 19.99
        assert response.json()["badge"] == "Sale"
        assert len(response.json()["lessons"]) == 2

    def test_lessons_are_replaced(self, client, course, instructor, db):
        response = client.put(
            f"/api/courses/{course.id}",
            json={
                "lessons": [
                    {"title": "Only", "description": "The one lesson", "duration": "5 min"}
                ]
            },
            headers=auth_headers(instructor),
        )

        assert response.status_code == 200
        assert [lesson["title"] for lesson in response.json()["lessons"]] == ["Only"]
        assert db.query(Lesson).filter_by(course_id=course.id).count() == 1

    def test_other_instructor_forbidden(self, client, course, other_instructor):
        response = client.put(
            f"/api/courses/{course.id}",
            json={"title": "Mine now"},
            headers=auth_headers(other_instructor),
        )
        assert response.status_code == 403

    def test_admin_can_update(self, client, course, admin):
        response = client.put(
            f"/api/courses/{course.id}",
            json={"title": "Admin edit"},
            headers=auth_headers(admin),
        )
        assert response.status_code == 200
        assert response.json()["title"] == "Admin edit"


class TestDeleteCourse:
    def test_owner_deletes_course_and_quizzes(self, client, course, quiz, instructor, db):
        response = client.delete(
            f"/api/courses/{course.id}", headers=auth_headers(instructor)
        )

        assert response.status_code == 200
        assert response.json() == {"message": "Course removed"}
        assert db.query(Course).count() == 0
        assert client.get(f"/api/quiz/{quiz['id']}").status_code == 404

    def test_course_with_results_cannot_be_deleted(
        self, client, course, quiz, instructor, student
    ):
        client.post(
            "/api/quiz/submit",
            json={"quizId": quiz["id"], "answers": [{"selectedOption": 1}]},
            headers=auth_headers(student),
        )

        response = client.delete(
            f"/api/courses/{course.id}", headers=auth_headers(instructor)
        )
        assert response.status_code == 400

    def test_other_instructor_forbidden(self, client, course, other_instructor):
        response = client.delete(
            f"/api/courses/{course.id}", headers=auth_headers(other_instructor)
        )
        assert response.status_code == 403
