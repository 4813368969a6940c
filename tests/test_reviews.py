"""Tests for reviews: eligibility, moderation, helpful marks and stats."""

from types import SimpleNamespace

import pytest

from autologic.domain.reviews.schemas import average_rating, stars
from autologic.domain.reviews.service import initial_status
from autologic.models import Review

from .conftest import auth_headers, make_booking, make_service, make_user


def review_payload(booking, overall=5, **overrides):
    payload = {
        "booking": booking.id,
        "service": booking.service_id,
        "rating": {"overall": overall, "quality": 5, "timeliness": 4},
        "comment": "Fast and honest",
        "commentAr": "سريع وصادق",
        "pros": ["price"],
        "tags": ["brakes"],
        "language": "en",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def completed_booking(db, customer, service):
    return make_booking(db, customer, service, status="completed")


def post_review(client, user, booking, **kwargs):
    return client.post("/api/reviews", json=review_payload(booking, **kwargs), headers=auth_headers(user))


class TestReviewHelpers:
    def test_high_ratings_are_auto_approved(self):
        assert initial_status(4) == "approved"
        assert initial_status(5) == "approved"

    def test_low_ratings_wait_for_moderation(self):
        assert initial_status(3) == "pending"

    def test_moderated_status_is_kept(self):
        assert initial_status(5, "rejected") == "rejected"

    def test_average_includes_given_sub_ratings_only(self):
        review = SimpleNamespace(
            rating_overall=5, rating_quality=3, rating_timeliness=None, rating_communication=None, rating_value=None
        )
        assert average_rating(review) == 4

    def test_stars(self):
        assert stars(3) == "★★★☆☆"


class TestCreateReview:
    def test_customer_reviews_completed_booking(self, client, customer, completed_booking):
        resp = post_review(client, customer, completed_booking)
        assert resp.status_code == 201
        review = resp.json()["data"]["review"]
        assert review["isVerified"] is True
        assert review["status"] == "approved"
        assert review["customer"] == {"id": customer.id, "firstName": "Customer", "lastName": "Tester"}

    def test_low_rating_stays_pending(self, client, customer, completed_booking):
        resp = post_review(client, customer, completed_booking, overall=2)
        assert resp.json()["data"]["review"]["status"] == "pending"

    def test_only_completed_bookings(self, client, db, customer, service):
        booking = make_booking(db, customer, service, status="confirmed")
        resp = post_review(client, customer, booking)
        assert resp.status_code == 400
        assert resp.json()["message"] == "Can only review completed bookings"

    def test_only_the_booking_customer(self, client, other_customer, completed_booking):
        resp = post_review(client, other_customer, completed_booking)
        assert resp.status_code == 403

    def test_one_review_per_booking(self, client, customer, completed_booking):
        post_review(client, customer, completed_booking)
        resp = post_review(client, customer, completed_booking)
        assert resp.status_code == 400
        assert resp.json()["message"] == "Review already exists for this booking"

    def test_missing_booking(self, client, customer, completed_booking):
        payload = review_payload(completed_booking)
        payload["booking"] = 9999
        resp = client.post("/api/reviews", json=payload, headers=auth_headers(customer))
        assert resp.status_code == 404
        assert resp.json()["message"] == "Booking not found"

    def test_review_must_match_booked_service(self, client, db, customer, completed_booking):
        other = make_service(db, name="Battery", name_ar="بطارية")
        payload = review_payload(completed_booking)
        payload["service"] = other.id
        resp = client.post("/api/reviews", json=payload, headers=auth_headers(customer))
        assert resp.status_code == 400
        assert resp.json()["message"] == "Review must be for the booked service"
        assert db.query(Review).count() == 0

    def test_rating_out_of_range(self, client, customer, completed_booking):
        payload = review_payload(completed_booking)
        payload["rating"]["overall"] = 6
        resp = client.post("/api/reviews", json=payload, headers=auth_headers(customer))
        assert resp.status_code == 400


class TestPublicListing:
    def test_only_approved_public_reviews_are_listed(self, client, db, customer, service, completed_booking):
        post_review(client, customer, completed_booking, overall=5)
        second = make_booking(db, customer, service, status="completed", appointment_time="12:00")
        post_review(client, customer, second, overall=2)

        resp = client.get("/api/reviews", params={"service": service.id})
        body = resp.json()
        assert body["total"] == 1
        assert body["data"]["reviews"][0]["rating"]["overall"] == 5

    def test_service_stats(self, client, db, customer, service, completed_booking):
        post_review(client, customer, completed_booking, overall=5)
        second = make_booking(db, customer, service, status="completed", appointment_time="12:00")
        post_review(client, customer, second, overall=4)

        stats = client.get(f"/api/reviews/service/{service.id}/stats").json()["data"]["stats"]
        assert stats["totalReviews"] == 2
        assert stats["averageRating"] == 4.5
        assert stats["ratingDistribution"] == {"1": 0, "2": 0, "3": 0, "4": 1, "5": 1}

    def test_stats_for_unreviewed_service(self, client, service):
        stats = client.get(f"/api/reviews/service/{service.id}/stats").json()["data"]["stats"]
        assert stats["totalReviews"] == 0
        assert stats["averageRating"] == 0

    def test_comment_is_localized(self, client, customer, completed_booking):
        review_id = post_review(client, customer, completed_booking).json()["data"]["review"]["id"]
        resp = client.get(f"/api/reviews/{review_id}", params={"lang": "ar"})
        assert resp.json()["data"]["review"]["comment"] == "سريع وصادق"


class TestHelpfulMarks:
    def test_toggle_helpful(self, client, db, customer, completed_booking):
        review_id = post_review(client, customer, completed_booking).json()["data"]["review"]["id"]
        reader = make_user(db, "customer", email="reader@example.com")

        first = client.post(f"/api/reviews/{review_id}/helpful", headers=auth_headers(reader))
        assert first.json()["data"] == {"helpful": 1, "userMarkedHelpful": True}

        second = client.post(f"/api/reviews/{review_id}/helpful", headers=auth_headers(reader))
        assert second.json()["data"] == {"helpful": 0, "userMarkedHelpful": False}

    def test_marks_from_different_users_add_up(self, client, db, customer, completed_booking):
        review_id = post_review(client, customer, completed_booking).json()["data"]["review"]["id"]
        for i in range(3):
            reader = make_user(db, "customer", email=f"reader{i}@example.com")
            client.post(f"/api/reviews/{review_id}/helpful", headers=auth_headers(reader))
        db.expire_all()
        assert db.query(Review).filter(Review.id == review_id).one().helpful_count == 3


class TestOwnershipAndModeration:
    def test_author_updates_review(self, client, customer, completed_booking):
        review_id = post_review(client, customer, completed_booking).json()["data"]["review"]["id"]
        resp = client.put(
            f"/api/reviews/{review_id}", json={"comment": "Even better"}, headers=auth_headers(customer)
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["review"]["comment"] == "Even better"

    def test_admin_cannot_edit_someone_elses_review(self, client, admin, customer, completed_booking):
        review_id = post_review(client, customer, completed_booking).json()["data"]["review"]["id"]
        resp = client.put(f"/api/reviews/{review_id}", json={"comment": "x"}, headers=auth_headers(admin))
        assert resp.status_code == 403

    def test_admin_deletes_review(self, client, admin, customer, completed_booking, r2):
        review_id = post_review(client, customer, completed_booking).json()["data"]["review"]["id"]
        resp = client.delete(f"/api/reviews/{review_id}", headers=auth_headers(admin))
        assert resp.status_code == 204
        assert client.get(f"/api/reviews/{review_id}").status_code == 404

    def test_admin_responds_bilingually(self, client, admin, customer, completed_booking):
        review_id = post_review(client, customer, completed_booking).json()["data"]["review"]["id"]
        resp = client.post(
            f"/api/reviews/{review_id}/respond",
            json={"text": "Thank you!", "textAr": "شكرا لك"},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["review"]["response"]["text"] == "Thank you!"

    def test_customer_cannot_respond(self, client, customer, completed_booking):
        review_id = post_review(client, customer, completed_booking).json()["data"]["review"]["id"]
        resp = client.post(
            f"/api/reviews/{review_id}/respond",
            json={"text": "Me", "textAr": "أنا"},
            headers=auth_headers(customer),
        )
        assert resp.status_code == 403

    def test_moderation_can_hide_and_feature(self, client, admin, customer, completed_booking):
        review_id = post_review(client, customer, completed_booking).json()["data"]["review"]["id"]
        client.put(
            f"/api/reviews/{review_id}/moderate",
            json={"status": "approved", "isFeatured": True},
            headers=auth_headers(admin),
        )
        featured = client.get("/api/reviews/featured/list").json()
        assert featured["results"] == 1

        client.put(
            f"/api/reviews/{review_id}/moderate",
            json={"status": "rejected", "reason": "spam"},
            headers=auth_headers(admin),
        )
        assert client.get("/api/reviews").json()["total"] == 0
