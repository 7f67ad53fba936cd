"""
Tests for the Gurukul store: catalog, checkout, course content and learner progress.
"""

from decimal import Decimal

import pytest

from tests.conftest import account


def _material(client, headers, **overrides):
    payload = {"title": "Bhagavad Gita Commentary", "type": "Book", "price": "250.00", "is_published": True}
    payload.update(overrides)
    response = client.post("/study-materials/", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def course(client, admin_headers):
    course = _material(client, admin_headers, title="Vedanta Foundations", type="Course", price="1000.00")
    intro = client.post(f"/courses/{course['id']}/modules", json={"title": "Introduction"}, headers=admin_headers).json()
    deep = client.post(f"/courses/{course['id']}/modules", json={"title": "Upanishads"}, headers=admin_headers).json()
    lessons = [
        client.post(f"/courses/modules/{intro['id']}/lessons", json={
            "title": "Welcome", "video_url": "https://vimeo.com/123456", "video_duration_seconds": 600,
        }, headers=admin_headers).json(),
        client.post(f"/courses/modules/{deep['id']}/lessons", json={
            "title": "Isha", "video_url": "https://youtu.be/abcDEF_12", "video_duration_seconds": 3300,
        }, headers=admin_headers).json(),
    ]
    return {"course": course, "modules": [intro, deep], "lessons": lessons}


def _checkout(client, headers, material_ids, payment_mode="UPI"):
    return client.post("/gurukul/checkout", json={
        "items": [{"material_id": mid} for mid in material_ids],
        "payment_mode": payment_mode,
    }, headers=headers)


class TestCatalog:

    def test_free_material_has_zero_price(self, client, admin_headers):
        material = _material(client, admin_headers, is_free=True, price="99.00")
        assert Decimal(material["price"]) == Decimal("0")

    def test_catalog_shows_published_only(self, client, admin_headers, user_headers):
        _material(client, admin_headers)
        _material(client, admin_headers, title="Draft Notes", is_published=False)
        catalog = client.get("/study-materials/catalog", headers=user_headers).json()
        assert [m["title"] for m in catalog] == ["Bhagavad Gita Commentary"]

    def test_unpublished_material_hidden_from_learners(self, client, admin_headers, user_headers):
        draft = _material(client, admin_headers, is_published=False)
        assert client.get(f"/study-materials/{draft['id']}", headers=user_headers).status_code == 404
        assert client.get(f"/study-materials/{draft['id']}", headers=admin_headers).status_code == 200

    def test_download_requires_ownership(self, client, admin_headers, user_headers):
        book = _material(client, admin_headers)
        assert client.get(f"/study-materials/{book['id']}/download-urls", headers=user_headers).status_code == 403


class TestCheckout:

    def test_course_checkout_enrolls(self, client, user_headers, course):
        response = _checkout(client, user_headers, [course["course"]["id"]])
        assert response.status_code == 201, response.text
        result = response.json()
        assert result["enrolled_course_ids"] == [course["course"]["id"]]
        assert result["order"]["payment_status"] == "Pending"
        assert Decimal(result["order"]["total_amount"]) == Decimal("1000.00")
        assert result["order"]["order_number"].startswith("ORD-")

    def test_owned_items_are_skipped(self, client, admin_headers, user_headers, course):
        book = _material(client, admin_headers)
        _checkout(client, user_headers, [course["course"]["id"]])
        result = _checkout(client, user_headers, [course["course"]["id"], book["id"]]).json()
        assert result["skipped_material_ids"] == [course["course"]["id"]]
        assert [i["material_id"] for i in result["order"]["items"]] == [book["id"]]

    def test_everything_owned(self, client, user_headers, course):
        _checkout(client, user_headers, [course["course"]["id"]])
        response = _checkout(client, user_headers, [course["course"]["id"]])
        assert response.status_code == 400

    def test_payment_mode_required_for_priced_order(self, client, admin_headers, user_headers):
        book = _material(client, admin_headers)
        assert _checkout(client, user_headers, [book["id"]], payment_mode=None).status_code == 400

    def test_free_order_is_paid(self, client, admin_headers, user_headers):
        free = _material(client, admin_headers, title="Stotra Booklet", is_free=True)
        result = _checkout(client, user_headers, [free["id"]], payment_mode=None).json()
        assert result["order"]["payment_status"] == "Paid"
        assert Decimal(result["order"]["total_amount"]) == Decimal("0")

    def test_unpublished_material_cannot_be_bought(self, client, admin_headers, user_headers):
        draft = _material(client, admin_headers, is_published=False)
        assert _checkout(client, user_headers, [draft["id"]]).status_code == 400

    def test_my_orders(self, client, admin_headers, user_headers):
        book = _material(client, admin_headers)
        _checkout(client, user_headers, [book["id"]])
        assert len(client.get("/gurukul/my-orders", headers=user_headers).json()) == 1
        assert client.get("/gurukul/my-orders", headers=admin_headers).json() == []


class TestOrderStatus:

    def test_paid_order_posts_sales(self, client, admin_headers, user_headers, db, accounting):
        book = _material(client, admin_headers)
        order = _checkout(client, user_headers, [book["id"]]).json()["order"]
        response = client.patch(f"/gurukul/orders/{order['id']}/status", json={"payment_status": "Paid"},
                                headers=admin_headers)
        assert response.status_code == 200, response.text
        assert response.json()["is_posted"] is True
        assert account(db, "4200").current_balance == Decimal("250.00")
        assert account(db, "1000").current_balance == Decimal("250.00")

        # a second Paid update does not post again
        client.patch(f"/gurukul/orders/{order['id']}/status", json={"payment_status": "Paid", "delivery_status": "Shipped"},
                     headers=admin_headers)
        assert account(db, "4200").current_balance == Decimal("250.00")

    def test_paid_book_becomes_downloadable_list(self, client, admin_headers, user_headers, accounting):
        book = _material(client, admin_headers)
        order = _checkout(client, user_headers, [book["id"]]).json()["order"]
        client.patch(f"/gurukul/orders/{order['id']}/status", json={"payment_status": "Paid"}, headers=admin_headers)
        learning = client.get("/gurukul/my-learning", headers=user_headers).json()
        assert [m["id"] for m in learning["materials"]] == [book["id"]]

    def test_learners_cannot_update_orders(self, client, admin_headers, user_headers):
        book = _material(client, admin_headers)
        order = _checkout(client, user_headers, [book["id"]]).json()["order"]
        response = client.patch(f"/gurukul/orders/{order['id']}/status", json={"payment_status": "Paid"},
                                headers=user_headers)
        assert response.status_code == 403


class TestCourseContent:

    def test_tree_for_admin(self, client, admin_headers, course):
        tree = client.get(f"/courses/{course['course']['id']}/tree", headers=admin_headers).json()
        assert tree["lesson_count"] == 2
        assert tree["total_duration"] == "1h 5m"
        welcome = tree["modules"][0]["lessons"][0]
        assert welcome["video_type"] == "vimeo"
        assert welcome["embed_url"].startswith("https://player.vimeo.com/video/123456")
        assert tree["modules"][1]["lessons"][0]["embed_url"] == "https://www.youtube.com/embed/abcDEF_12"

    def test_tree_needs_enrollment(self, client, user_headers, course):
        assert client.get(f"/courses/{course['course']['id']}/tree", headers=user_headers).status_code == 403

    def test_learners_do_not_see_inactive_modules(self, client, admin_headers, user_headers, course):
        client.patch(f"/courses/modules/{course['modules'][1]['id']}", json={"is_active": False}, headers=admin_headers)
        _checkout(client, user_headers, [course["course"]["id"]])
        tree = client.get(f"/courses/{course['course']['id']}/tree", headers=user_headers).json()
        assert [m["title"] for m in tree["modules"]] == ["Introduction"]

    def test_modules_only_on_courses(self, client, admin_headers):
        book = _material(client, admin_headers)
        response = client.post(f"/courses/{book['id']}/modules", json={"title": "Nope"}, headers=admin_headers)
        assert response.status_code == 404


class TestProgress:

    def test_lesson_progress_requires_enrollment(self, client, user_headers, course):
        lesson = course["lessons"][0]
        response = client.put(f"/gurukul/courses/{course['course']['id']}/lessons/{lesson['id']}/progress",
                              json={"progress_percentage": "40"}, headers=user_headers)
        assert response.status_code == 403

    def test_lesson_progress_upsert(self, client, user_headers, course):
        _checkout(client, user_headers, [course["course"]["id"]])
        lesson = course["lessons"][0]
        url = f"/gurukul/courses/{course['course']['id']}/lessons/{lesson['id']}/progress"
        first = client.put(url, json={"progress_percentage": "40", "watch_time_seconds": 240}, headers=user_headers).json()
        second = client.put(url, json={"progress_percentage": "100", "watch_time_seconds": 600, "is_completed": True},
                            headers=user_headers).json()
        assert first["id"] == second["id"]
        assert second["is_completed"] is True
        assert second["completed_at"] is not None

    def test_lesson_from_another_course(self, client, admin_headers, user_headers, course):
        other = _material(client, admin_headers, title="Sanskrit Basics", type="Course")
        _checkout(client, user_headers, [other["id"]])
        lesson = course["lessons"][0]
        response = client.put(f"/gurukul/courses/{other['id']}/lessons/{lesson['id']}/progress",
                              json={"progress_percentage": "10"}, headers=user_headers)
        assert response.status_code == 404

    def test_module_completion_drives_course_progress(self, client, user_headers, course):
        _checkout(client, user_headers, [course["course"]["id"]])
        course_id = course["course"]["id"]
        intro, deep = course["modules"]

        half = client.post(f"/gurukul/courses/{course_id}/modules/{intro['id']}/complete", json={},
                           headers=user_headers).json()
        assert Decimal(half["progress_percentage"]) == Decimal("50.00")
        assert half["completed_at"] is None

        done = client.post(f"/gurukul/courses/{course_id}/modules/{deep['id']}/complete",
                           json={"last_lesson_id": course["lessons"][1]["id"]}, headers=user_headers).json()
        assert Decimal(done["progress_percentage"]) == Decimal("100.00")
        assert done["completed_at"] is not None
        assert done["last_accessed_lesson_id"] == course["lessons"][1]["id"]

    def test_my_learning_lists_enrollment(self, client, user_headers, course):
        _checkout(client, user_headers, [course["course"]["id"]])
        learning = client.get("/gurukul/my-learning", headers=user_headers).json()
        assert learning["materials"] == []
        assert learning["enrollments"][0]["course_title"] == "Vedanta Foundations"
