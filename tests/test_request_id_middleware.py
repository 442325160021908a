from __future__ import annotations

import logging

from tests.conftest import _auth_headers


def test_generated_request_id_on_admin_list(client, store, admin_id):
    resp = client.get("/api/payout-requests", headers=_auth_headers(admin_id))
    assert resp.status_code == 200, resp.text
    assert resp.headers.get("X-Request-ID")


def test_request_end_log_for_denied_list(client, store, staff_id, caplog):
    caplog.set_level(logging.INFO, logger="cashbook.http")

    resp = client.get(
        "/api/payout-requests?status=pending",
        headers=_auth_headers(staff_id, request_id="rid-denied"),
    )
    assert resp.status_code == 403, resp.text

    lines = [r.message for r in caplog.records if r.name == "cashbook.http"]
    assert any(
        "http_request_end" in line
        and "request_id=rid-denied" in line
        and "method=GET" in line
        and "path=/api/payout-requests" in line
        and "status=403" in line
        and "duration_ms=" in line
        for line in lines
    )
    # query strings and headers stay out of the log line
    assert not any("status=pending" in line or "Bearer" in line for line in lines)


def test_generated_request_id_reaches_ledger_metadata(client, store, admin_id, staff_id):
    store.add_book(staff_id)
    payout = store.add_payout(user_id=staff_id)

    resp = client.patch(
        f"/api/payout-requests/{payout}/status",
        json={"status": "accepted"},
        headers=_auth_headers(admin_id),
    )
    assert resp.status_code == 200, resp.text
    generated = resp.headers["X-Request-ID"]
    assert store.transactions[0]["metadata"]["request_id"] == generated


def test_request_id_present_on_401(client):
    resp = client.post(
        "/api/payout-requests",
        json={"amount": "10.00", "utr": "UTR1", "remarks": "x", "proof": "data:,"},
        headers={"X-Request-ID": "rid-401"},
    )
    assert resp.status_code == 401, resp.text
    assert resp.headers.get("X-Request-ID") == "rid-401"
