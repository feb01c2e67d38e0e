from __future__ import annotations

from conftest import booking_form, png_upload


def _stats(client, headers) -> dict:
    resp = client.get("/api/dashboard/stats", headers=headers)
    assert resp.status_code == 200
    return resp.json()


def _assert_consistent(stats: dict) -> None:
    assert stats["totalBookings"] == (
        stats["pendingBookings"] + stats["acceptedBookings"] + stats["declinedBookings"]
    )


def test_stats_empty(client, admin_headers) -> None:
    assert _stats(client, admin_headers) == {
        "totalBookings": 0,
        "pendingBookings": 0,
        "acceptedBookings": 0,
        "declinedBookings": 0,
    }


def test_stats_requires_admin(client) -> None:
    assert client.get("/api/dashboard/stats").status_code == 401


def test_stats_recomputed_after_each_mutation(client, admin_headers, create_booking) -> None:
    ids = [create_booking()["id"] for _ in range(4)]
    stats = _stats(client, admin_headers)
    _assert_consistent(stats)
    assert stats["pendingBookings"] == 4

    for booking_id, status in zip(ids, ["accepted", "declined", "accepted"]):
        client.patch(f"/api/bookings/{booking_id}/status", json={"status": status}, headers=admin_headers)
        _assert_consistent(_stats(client, admin_headers))

    assert _stats(client, admin_headers) == {
        "totalBookings": 4,
        "pendingBookings": 1,
        "acceptedBookings": 2,
        "declinedBookings": 1,
    }


def test_booking_review_end_to_end(client, admin_headers) -> None:
    before = _stats(client, admin_headers)

    created = client.post(
        "/api/bookings",
        data=booking_form(fullName="Jane Doe", email="jane@example.com", phone="5551234567", date="2025-06-01"),
        files=png_upload("valid.png"),
    )
    assert created.status_code == 201
    booking = created.json()["booking"]
    assert booking["status"] == "pending"

    listed = client.get("/api/bookings", headers=admin_headers).json()
    jane = [b for b in listed if b["id"] == booking["id"]]
    assert len(jane) == 1
    assert jane[0]["fullName"] == "Jane Doe"
    assert jane[0]["email"] == "jane@example.com"

    pending = _stats(client, admin_headers)
    assert pending["pendingBookings"] == before["pendingBookings"] + 1

    resp = client.patch(
        f"/api/bookings/{booking['id']}/status", json={"status": "accepted"}, headers=admin_headers
    )
    assert resp.status_code == 200
    assert resp.json()["booking"]["status"] == "accepted"

    after = _stats(client, admin_headers)
    assert after["acceptedBookings"] == pending["acceptedBookings"] + 1
    assert after["pendingBookings"] == pending["pendingBookings"] - 1
    _assert_consistent(after)
