"""API tests for the booking lifecycle."""

from datetime import date, timedelta

from autologic.domain.bookings.rules import TIME_SLOTS
from autologic.models import Booking

from .conftest import auth_headers, booking_payload, future_day, make_booking


class TestAvailableSlots:
    def test_date_is_required(self, client):
        resp = client.get("/api/bookings/available-slots")
        assert resp.status_code == 400
        assert resp.json()["message"] == "Please provide a date (YYYY-MM-DD)"

    def test_active_bookings_take_slots(self, client, db, customer, service):
        day = future_day()
        make_booking(db, customer, service, appointment_date=day, appointment_time="09:00")
        make_booking(db, customer, service, appointment_date=day, appointment_time="11:00", status="cancelled")

        resp = client.get("/api/bookings/available-slots", params={"date": day.isoformat()})
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert "09:00" not in data["availableSlots"]
        assert "11:00" in data["availableSlots"]
        assert data["bookedSlots"] == ["09:00"]

    def test_fully_booked_day(self, client, db, customer, service):
        day = future_day()
        for slot in TIME_SLOTS:
            make_booking(db, customer, service, appointment_date=day, appointment_time=slot)

        data = client.get("/api/bookings/available-slots", params={"date": day.isoformat()}).json()["data"]
        assert data["availableSlots"] == []
        assert data["bookedSlots"] == list(TIME_SLOTS)

    def test_repeated_queries_agree(self, client, db, customer, service):
        day = future_day()
        make_booking(db, customer, service, appointment_date=day, appointment_time="14:00")
        params = {"date": day.isoformat()}

        first = client.get("/api/bookings/available-slots", params=params).json()["data"]
        second = client.get("/api/bookings/available-slots", params=params).json()["data"]
        assert first == second
        assert len(first["availableSlots"]) == len(TIME_SLOTS) - 1


class TestCreateBooking:
    def test_requires_authentication(self, client, service):
        resp = client.post("/api/bookings", json=booking_payload(service.id))
        assert resp.status_code == 401
        assert resp.json() == {"status": "error", "message": "Not authorized, no token"}

    def test_customer_books_a_slot(self, client, customer, service, sent_emails):
        resp = client.post("/api/bookings", json=booking_payload(service.id), headers=auth_headers(customer))
        assert resp.status_code == 201
        body = resp.json()
        assert body["status"] == "success"
        assert body["message"] == "Booking created successfully"
        booking = body["data"]["booking"]
        assert booking["status"] == "pending"
        assert booking["customer"]["id"] == customer.id
        assert booking["estimatedCost"] == service.price
        assert booking["canBeCancelled"] is True
        assert [email["to"] for email in sent_emails] == [customer.email]

    def test_issue_is_localized(self, client, customer, service):
        resp = client.post(
            "/api/bookings?lang=ar", json=booking_payload(service.id), headers=auth_headers(customer)
        )
        body = resp.json()
        assert body["data"]["booking"]["issue"]["description"] == "صرير في الفرامل"
        assert body["language"] == {"code": "ar", "direction": "rtl", "isRTL": True}

    def test_taken_slot_is_rejected(self, client, db, customer, other_customer, service):
        make_booking(db, other_customer, service, appointment_date=future_day(), appointment_time="10:00")
        resp = client.post("/api/bookings", json=booking_payload(service.id), headers=auth_headers(customer))
        assert resp.status_code == 400
        assert resp.json()["message"] == "Time slot is already booked"

    def test_cancelled_booking_frees_the_slot(self, client, db, customer, other_customer, service):
        make_booking(db, other_customer, service, status="cancelled")
        resp = client.post("/api/bookings", json=booking_payload(service.id), headers=auth_headers(customer))
        assert resp.status_code == 201

    def test_past_appointment_is_rejected(self, client, customer, service):
        payload = booking_payload(service.id, day=date.today() - timedelta(days=1))
        resp = client.post("/api/bookings", json=payload, headers=auth_headers(customer))
        assert resp.status_code == 400
        assert resp.json()["message"] == "Appointment date cannot be in the past"

    def test_unknown_service(self, client, customer):
        resp = client.post("/api/bookings", json=booking_payload(9999), headers=auth_headers(customer))
        assert resp.status_code == 404
        assert resp.json()["message"] == "Service not found"

    def test_invalid_time_format(self, client, customer, service):
        payload = booking_payload(service.id, time="25:00")
        resp = client.post("/api/bookings", json=payload, headers=auth_headers(customer))
        assert resp.status_code == 400
        body = resp.json()
        assert body["message"] == "Validation Error"
        assert body["errors"][0]["field"] == "appointmentTime"

    def test_customer_cannot_book_for_someone_else(self, client, customer, other_customer, service):
        payload = booking_payload(service.id, customer=other_customer.id)
        resp = client.post("/api/bookings", json=payload, headers=auth_headers(customer))
        assert resp.status_code == 403
        assert resp.json()["message"] == "Only admins can book on behalf of another customer"

    def test_admin_books_on_behalf_of_customer(self, client, admin, customer, service):
        payload = booking_payload(service.id, customer=customer.id)
        resp = client.post("/api/bookings", json=payload, headers=auth_headers(admin))
        assert resp.status_code == 201
        assert resp.json()["data"]["booking"]["customer"]["id"] == customer.id


class TestReadingBookings:
    def test_my_bookings_only_lists_own(self, client, db, customer, other_customer, service):
        make_booking(db, customer, service, appointment_time="09:00")
        make_booking(db, other_customer, service, appointment_time="10:00")
        resp = client.get("/api/bookings/my-bookings", headers=auth_headers(customer))
        body = resp.json()
        assert body["total"] == 1
        assert body["results"] == 1
        assert body["data"]["bookings"][0]["customer"]["id"] == customer.id

    def test_admin_list_requires_admin(self, client, customer):
        resp = client.get("/api/bookings", headers=auth_headers(customer))
        assert resp.status_code == 403

    def test_admin_list_filters_by_status(self, client, db, admin, customer, service):
        make_booking(db, customer, service, appointment_time="09:00")
        make_booking(db, customer, service, appointment_time="10:00", status="confirmed")
        resp = client.get("/api/bookings", params={"status": "confirmed"}, headers=auth_headers(admin))
        body = resp.json()
        assert body["total"] == 1
        assert body["pages"] == 1
        assert body["data"]["bookings"][0]["status"] == "confirmed"

    def test_stranger_cannot_read_booking(self, client, db, customer, other_customer, service):
        booking = make_booking(db, customer, service)
        resp = client.get(f"/api/bookings/{booking.id}", headers=auth_headers(other_customer))
        assert resp.status_code == 403

    def test_assigned_technician_can_read(self, client, db, customer, technician, service):
        booking = make_booking(db, customer, service, technician_id=technician.id)
        resp = client.get(f"/api/bookings/{booking.id}", headers=auth_headers(technician))
        assert resp.status_code == 200

    def test_missing_booking(self, client, admin):
        resp = client.get("/api/bookings/424242", headers=auth_headers(admin))
        assert resp.status_code == 404
        assert resp.json()["message"] == "Booking not found"


class TestUpdateBooking:
    def test_reschedule_to_free_slot(self, client, db, customer, service):
        booking = make_booking(db, customer, service)
        resp = client.put(
            f"/api/bookings/{booking.id}",
            json={"appointmentTime": "15:00"},
            headers=auth_headers(customer),
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["booking"]["appointmentTime"] == "15:00"

    def test_reschedule_into_taken_slot(self, client, db, customer, other_customer, service):
        make_booking(db, other_customer, service, appointment_time="15:00")
        booking = make_booking(db, customer, service, appointment_time="10:00")
        resp = client.put(
            f"/api/bookings/{booking.id}",
            json={"appointmentTime": "15:00"},
            headers=auth_headers(customer),
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Time slot is already booked"

    def test_completed_booking_is_frozen(self, client, db, customer, service):
        booking = make_booking(db, customer, service, status="completed")
        resp = client.put(
            f"/api/bookings/{booking.id}", json={"priority": "high"}, headers=auth_headers(customer)
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Only pending or confirmed bookings can be updated"


class TestCancelBooking:
    def test_customer_cancels_with_default_reason(self, client, db, customer, service, sent_emails):
        booking = make_booking(db, customer, service)
        resp = client.put(f"/api/bookings/{booking.id}/cancel", headers=auth_headers(customer))
        assert resp.status_code == 200
        data = resp.json()["data"]["booking"]
        assert data["status"] == "cancelled"
        assert data["cancellation"]["reason"] == "Cancelled by user"
        assert data["cancellation"]["cancelledBy"] == customer.id
        assert data["cancellation"]["refundAmount"] is None
        assert len(sent_emails) == 1

    def test_inside_two_hour_window(self, client, db, customer, service):
        booking = make_booking(db, customer, service, appointment_date=date.today() - timedelta(days=1))
        resp = client.put(f"/api/bookings/{booking.id}/cancel", headers=auth_headers(customer))
        assert resp.status_code == 400
        assert resp.json()["message"] == "Booking cannot be cancelled"

    def test_admin_bypasses_window_and_sets_refund(self, client, db, admin, customer, service):
        booking = make_booking(db, customer, service, appointment_date=date.today() - timedelta(days=1))
        resp = client.put(
            f"/api/bookings/{booking.id}/cancel",
            json={"reason": "Shop closed", "refundAmount": 50},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 200
        cancellation = resp.json()["data"]["booking"]["cancellation"]
        assert cancellation["reason"] == "Shop closed"
        assert cancellation["refundAmount"] == 50

    def test_other_customer_cannot_cancel(self, client, db, customer, other_customer, service):
        booking = make_booking(db, customer, service)
        resp = client.put(f"/api/bookings/{booking.id}/cancel", headers=auth_headers(other_customer))
        assert resp.status_code == 403


class TestWorkflow:
    def test_confirm_only_from_pending(self, client, db, admin, customer, service, sent_emails):
        booking = make_booking(db, customer, service)
        resp = client.put(f"/api/bookings/{booking.id}/confirm", headers=auth_headers(admin))
        assert resp.status_code == 200
        assert resp.json()["data"]["booking"]["status"] == "confirmed"
        assert resp.json()["data"]["booking"]["confirmedAt"] is not None
        assert len(sent_emails) == 1

        again = client.put(f"/api/bookings/{booking.id}/confirm", headers=auth_headers(admin))
        assert again.status_code == 400
        assert again.json()["message"] == "Only pending bookings can be confirmed"

    def test_customer_cannot_confirm_or_assign(self, client, db, customer, technician, service):
        booking = make_booking(db, customer, service)
        confirm = client.put(f"/api/bookings/{booking.id}/confirm", headers=auth_headers(customer))
        assign = client.put(
            f"/api/bookings/{booking.id}/assign", json={"technician": technician.id}, headers=auth_headers(customer)
        )
        assert confirm.status_code == 403
        assert assign.status_code == 403
        db.expire_all()
        stored = db.query(Booking).filter(Booking.id == booking.id).one()
        assert stored.status == "pending"
        assert stored.technician_id is None

    def test_assign_requires_technician(self, client, db, admin, customer, technician, service):
        booking = make_booking(db, customer, service)
        bad = client.put(
            f"/api/bookings/{booking.id}/assign", json={"technician": customer.id}, headers=auth_headers(admin)
        )
        assert bad.status_code == 404
        assert bad.json()["message"] == "Technician not found"

        ok = client.put(
            f"/api/bookings/{booking.id}/assign", json={"technician": technician.id}, headers=auth_headers(admin)
        )
        assert ok.status_code == 200
        assert ok.json()["data"]["booking"]["technician"]["id"] == technician.id

    def test_technician_completes_assigned_job(self, client, db, customer, technician, service):
        booking = make_booking(db, customer, service, status="confirmed", technician_id=technician.id)
        started = client.put(
            f"/api/bookings/{booking.id}/status", json={"status": "in-progress"}, headers=auth_headers(technician)
        )
        assert started.status_code == 200

        done = client.put(
            f"/api/bookings/{booking.id}/status",
            json={"status": "completed", "actualCost": 180, "actualDuration": 1.5},
            headers=auth_headers(technician),
        )
        assert done.status_code == 200
        data = done.json()["data"]["booking"]
        assert data["status"] == "completed"
        assert data["actualCost"] == 180
        assert data["completedAt"] is not None

    def test_technician_cannot_jump_states(self, client, db, customer, technician, service):
        booking = make_booking(db, customer, service, technician_id=technician.id)
        resp = client.put(
            f"/api/bookings/{booking.id}/status", json={"status": "completed"}, headers=auth_headers(technician)
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Cannot change status from pending to completed"

    def test_unassigned_technician_is_forbidden(self, client, db, customer, technician, service):
        booking = make_booking(db, customer, service, status="confirmed")
        resp = client.put(
            f"/api/bookings/{booking.id}/status", json={"status": "in-progress"}, headers=auth_headers(technician)
        )
        assert resp.status_code == 403

    def test_reopening_into_taken_slot(self, client, db, admin, customer, other_customer, service):
        cancelled = make_booking(db, customer, service, status="cancelled")
        make_booking(db, other_customer, service)
        resp = client.put(
            f"/api/bookings/{cancelled.id}/status", json={"status": "pending"}, headers=auth_headers(admin)
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Time slot is already booked"

    def test_admin_status_cancel_records_cancellation(self, client, db, admin, customer, service):
        booking = make_booking(db, customer, service)
        resp = client.put(
            f"/api/bookings/{booking.id}/status", json={"status": "cancelled"}, headers=auth_headers(admin)
        )
        assert resp.json()["data"]["booking"]["cancellation"]["cancelledBy"] == admin.id


class TestNotesAndRatings:
    def test_internal_notes_hidden_from_customer(self, client, db, customer, technician, service):
        booking = make_booking(db, customer, service, technician_id=technician.id)
        client.post(
            f"/api/bookings/{booking.id}/notes",
            json={"text": "Check rotor wear", "isInternal": True},
            headers=auth_headers(technician),
        )
        client.post(
            f"/api/bookings/{booking.id}/notes", json={"text": "Please call me"}, headers=auth_headers(customer)
        )

        staff_view = client.get(f"/api/bookings/{booking.id}", headers=auth_headers(technician))
        customer_view = client.get(f"/api/bookings/{booking.id}", headers=auth_headers(customer))
        assert len(staff_view.json()["data"]["booking"]["notes"]) == 2
        assert [n["text"] for n in customer_view.json()["data"]["booking"]["notes"]] == ["Please call me"]

    def test_customer_cannot_add_internal_note(self, client, db, customer, service):
        booking = make_booking(db, customer, service)
        resp = client.post(
            f"/api/bookings/{booking.id}/notes",
            json={"text": "secret", "isInternal": True},
            headers=auth_headers(customer),
        )
        assert resp.status_code == 403

    def test_rate_completed_booking_once(self, client, db, customer, service):
        booking = make_booking(db, customer, service, status="completed")
        first = client.put(f"/api/bookings/{booking.id}/rating", json={"score": 5}, headers=auth_headers(customer))
        assert first.status_code == 200
        assert first.json()["data"]["booking"]["rating"]["score"] == 5

        second = client.put(f"/api/bookings/{booking.id}/rating", json={"score": 4}, headers=auth_headers(customer))
        assert second.status_code == 400
        assert second.json()["message"] == "Booking has already been rated"

    def test_cannot_rate_open_booking(self, client, db, customer, service):
        booking = make_booking(db, customer, service)
        resp = client.put(f"/api/bookings/{booking.id}/rating", json={"score": 3}, headers=auth_headers(customer))
        assert resp.status_code == 400

    def test_notes_are_appended(self, client, db, customer, service):
        booking = make_booking(db, customer, service)
        for text in ("first", "second"):
            client.post(f"/api/bookings/{booking.id}/notes", json={"text": text}, headers=auth_headers(customer))
        db.expire_all()
        stored = db.query(Booking).filter(Booking.id == booking.id).one()
        assert [note["text"] for note in stored.notes] == ["first", "second"]
