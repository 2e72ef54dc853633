from datetime import datetime, timedelta, timezone

import pytest

from donorhub.data.repositories.campaign_repository import get_cached_raised
from donorhub.data.repositories.donation_repository import DonationORM
from donorhub.domain.services import donation_service


def _today():
    return datetime.now(timezone.utc).date()


def test_create_donation_schedules_thank_you_task(auth_client, make_donor, make_donation):
    donor = make_donor()
    body = make_donation(donor["id"], amount=100, date="2026-01-01", method="check")

    assert body["data"]["amount"] == 100
    assert body["data"]["thanked"] is False
    assert body["data"]["recurring"] is False
    due = (_today() + timedelta(days=7)).isoformat()
    assert body["scheduledTask"] == {
        "type": "thank-you",
        "description": "Send thank you message for donation",
        "dueDate": due,
        "priority": "high",
    }

    tasks = auth_client.get("/api/tasks", params={"donorId": donor["id"]}).json()["data"]
    assert len(tasks) == 1
    assert tasks[0]["type"] == "thank-you"
    assert tasks[0]["priority"] == "high"
    assert tasks[0]["completed"] is False
    assert tasks[0]["dueDate"] == due


def test_create_donation_for_missing_donor_persists_nothing(auth_client, db):
    response = auth_client.post(
        "/api/donations",
        json={"amount": 50, "date": "2026-01-01", "method": "cash", "donorId": 999},
    )
    assert response.status_code == 404
    assert response.json()["code"] == "donor.not_found"
    assert db.query(DonationORM).count() == 0


def test_create_donation_for_missing_campaign_is_404(auth_client, db, make_donor):
    donor = make_donor()
    response = auth_client.post(
        "/api/donations",
        json={
            "amount": 50,
            "date": "2026-01-01",
            "method": "cash",
            "donorId": donor["id"],
            "campaignId": 4242,
        },
    )
    assert response.status_code == 404
    assert response.json()["code"] == "campaign.not_found"
    assert db.query(DonationORM).count() == 0


def test_create_donation_rejects_non_positive_amount_and_bad_date(auth_client, make_donor):
    donor = make_donor()
    base = {"amount": 10, "date": "2026-01-01", "method": "cash", "donorId": donor["id"]}

    assert auth_client.post("/api/donations", json={**base, "amount": 0}).status_code == 400
    assert auth_client.post("/api/donations", json={**base, "amount": -5}).status_code == 400
    assert auth_client.post("/api/donations", json={**base, "date": "yesterday"}).status_code == 400
    assert auth_client.post("/api/donations", json={**base, "method": ""}).status_code == 400


def test_create_donation_accepts_full_timestamp(make_donor, make_donation):
    donor = make_donor()
    body = make_donation(donor["id"], date="2026-01-05T10:30:00Z")
    assert body["data"]["date"].startswith("2026-01-05T10:30:00")


def test_thank_you_hook_failure_does_not_undo_donation(auth_client, db, make_donor, monkeypatch):
    def boom(*args):
        raise RuntimeError("task store unavailable")

    monkeypatch.setattr(donation_service, "create_thank_you_task", boom)
    donor = make_donor()

    response = auth_client.post(
        "/api/donations",
        json={"amount": 75, "date": "2026-01-01", "method": "cash", "donorId": donor["id"]},
    )
    assert response.status_code == 201
    assert db.query(DonationORM).count() == 1
    tasks = auth_client.get("/api/tasks", params={"donorId": donor["id"]}).json()
    assert tasks["pagination"]["total"] == 0


def test_list_donations_filters(auth_client, make_donor, make_campaign, make_donation):
    first = make_donor()
    second = make_donor()
    campaign = make_campaign()
    make_donation(first["id"], method="credit_card", campaignId=campaign["id"])
    make_donation(first["id"], method="check")
    make_donation(second["id"], method="bank_transfer", campaignId=campaign["id"])

    by_donor = auth_client.get("/api/donations", params={"donorId": first["id"]}).json()
    assert by_donor["pagination"]["total"] == 2

    by_campaign = auth_client.get("/api/donations", params={"campaignId": campaign["id"]}).json()
    assert {d["donorId"] for d in by_campaign["data"]} == {first["id"], second["id"]}

    by_method = auth_client.get("/api/donations", params={"method": "CARD"}).json()
    assert [d["method"] for d in by_method["data"]] == ["credit_card"]


def test_list_donations_newest_first_with_refs(auth_client, make_donor, make_campaign, make_donation):
    donor = make_donor(name="Sarah")
    campaign = make_campaign(name="Gala")
    make_donation(donor["id"], date="2025-11-30")
    make_donation(donor["id"], date="2026-01-02", campaignId=campaign["id"])

    data = auth_client.get("/api/donations").json()["data"]
    assert [d["date"][:10] for d in data] == ["2026-01-02", "2025-11-30"]
    assert data[0]["donor"]["name"] == "Sarah"
    assert data[0]["campaign"] == {"id": campaign["id"], "name": "Gala", "goal": 1000}
    assert data[1]["campaign"] is None


def test_get_donation_by_id(auth_client, make_donor, make_donation):
    donor = make_donor()
    created = make_donation(donor["id"], notes="Year-end")["data"]

    response = auth_client.get(f"/api/donations/{created['id']}")
    assert response.status_code == 200
    assert response.json()["data"]["notes"] == "Year-end"
    assert auth_client.get("/api/donations/9999").status_code == 404


def test_thanked_is_one_way(auth_client, make_donor, make_donation):
    donor = make_donor()
    donation = make_donation(donor["id"])["data"]

    thanked = auth_client.patch(f"/api/donations/{donation['id']}", json={"thanked": True})
    assert thanked.status_code == 200
    assert thanked.json()["data"]["thanked"] is True

    reverted = auth_client.patch(f"/api/donations/{donation['id']}", json={"thanked": False})
    assert reverted.status_code == 409
    assert reverted.json()["code"] == "donation.thanked_irreversible"


def test_update_amount_resyncs_campaign_cache(auth_client, db, make_donor, make_campaign, make_donation):
    donor = make_donor()
    campaign = make_campaign()
    donation = make_donation(donor["id"], amount=300, campaignId=campaign["id"])["data"]
    assert get_cached_raised(db, campaign["id"]) == 300

    response = auth_client.patch(f"/api/donations/{donation['id']}", json={"amount": 450})
    assert response.status_code == 200
    assert get_cached_raised(db, campaign["id"]) == 450


def test_moving_donation_between_campaigns_resyncs_both(
    auth_client, db, make_donor, make_campaign, make_donation
):
    donor = make_donor()
    old = make_campaign(name="Old")
    new = make_campaign(name="New")
    donation = make_donation(donor["id"], amount=200, campaignId=old["id"])["data"]

    auth_client.patch(f"/api/donations/{donation['id']}", json={"campaignId": new["id"]})
    assert get_cached_raised(db, old["id"]) == 0
    assert get_cached_raised(db, new["id"]) == 200

    auth_client.patch(f"/api/donations/{donation['id']}", json={"campaignId": None})
    assert get_cached_raised(db, new["id"]) == 0


def test_update_rejects_null_for_required_field(auth_client, make_donor, make_donation):
    donor = make_donor()
    donation = make_donation(donor["id"])["data"]
    response = auth_client.patch(f"/api/donations/{donation['id']}", json={"method": None})
    assert response.status_code == 400


def test_delete_donation_decrements_campaign_cache(
    auth_client, db, make_donor, make_campaign, make_donation
):
    donor = make_donor()
    campaign = make_campaign()
    keep = make_donation(donor["id"], amount=300, campaignId=campaign["id"])["data"]
    gone = make_donation(donor["id"], amount=250, campaignId=campaign["id"])["data"]
    assert get_cached_raised(db, campaign["id"]) == 550

    response = auth_client.delete(f"/api/donations/{gone['id']}")
    assert response.status_code == 200
    assert response.json()["data"] == {
        "deletedId": gone["id"],
        "amount": 250,
        "campaignReverted": True,
    }
    assert get_cached_raised(db, campaign["id"]) == 300
    assert auth_client.get(f"/api/donations/{keep['id']}").status_code == 200
    assert auth_client.delete(f"/api/donations/{gone['id']}").status_code == 404


def test_method_filter_treats_wildcards_literally(auth_client, make_donor, make_donation):
    donor = make_donor()
    make_donation(donor["id"], method="credit_card")
    make_donation(donor["id"], method="check")

    underscore = auth_client.get("/api/donations", params={"method": "_"}).json()
    assert [d["method"] for d in underscore["data"]] == ["credit_card"]
    percent = auth_client.get("/api/donations", params={"method": "%"}).json()
    assert percent["pagination"]["total"] == 0


@pytest.mark.parametrize("amount", ["Infinity", "-Infinity", "NaN"])
def test_create_donation_rejects_non_finite_amount(auth_client, db, make_donor, amount):
    donor = make_donor()
    body = (
        f'{{"amount": {amount}, "date": "2026-01-01", '
        f'"method": "cash", "donorId": {donor["id"]}}}'
    )
    response = auth_client.post(
        "/api/donations", content=body, headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 400
    assert db.query(DonationORM).count() == 0


def test_delete_reports_revert_scheduled_even_if_hook_fails(
    auth_client, make_donor, make_campaign, make_donation, monkeypatch
):
    def boom(*args):
        raise RuntimeError("cache unavailable")

    donor = make_donor()
    campaign = make_campaign()
    donation = make_donation(donor["id"], amount=90, campaignId=campaign["id"])["data"]
    monkeypatch.setattr(donation_service, "adjust_campaign_raised", boom)

    response = auth_client.delete(f"/api/donations/{donation['id']}")
    assert response.status_code == 200
    assert response.json()["data"]["campaignReverted"] is True
    assert auth_client.get(f"/api/donations/{donation['id']}").status_code == 404
    # computed totals never depend on the cached counter
    assert auth_client.get(f"/api/campaigns/{campaign['id']}").json()["data"]["raised"] == 0
