from donorhub.data.repositories.campaign_repository import get_cached_raised, sum_campaign_donations


def test_create_campaign_defaults(make_campaign):
    campaign = make_campaign(description="  ")
    assert campaign["status"] == "active"
    assert campaign["raised"] == 0
    assert campaign["donationCount"] == 0
    assert campaign["description"] is None
    assert campaign["endDate"] is None


def test_create_campaign_validation(auth_client):
    base = {"name": "Gala", "goal": 500, "startDate": "2026-03-01"}
    assert auth_client.post("/api/campaigns", json={**base, "goal": 0}).status_code == 400
    assert auth_client.post("/api/campaigns", json={**base, "startDate": "03/01/2026"}).status_code == 400
    assert auth_client.post("/api/campaigns", json={**base, "startDate": "2026-02-30"}).status_code == 400
    assert auth_client.post("/api/campaigns", json={**base, "status": "archived"}).status_code == 400
    assert auth_client.post("/api/campaigns", json={k: v for k, v in base.items() if k != "name"}).status_code == 400


def test_end_date_before_start_is_rejected(auth_client):
    response = auth_client.post(
        "/api/campaigns",
        json={"name": "Gala", "goal": 500, "startDate": "2026-03-01", "endDate": "2026-02-01"},
    )
    assert response.status_code == 400


def test_upcoming_status_is_accepted(make_campaign):
    assert make_campaign(status="upcoming")["status"] == "upcoming"


def test_campaign_detail_computes_raised_from_donations(
    auth_client, make_donor, make_campaign, make_donation
):
    donor = make_donor()
    campaign = make_campaign()
    make_donation(donor["id"], amount=300, campaignId=campaign["id"])
    make_donation(donor["id"], amount=250, campaignId=campaign["id"])
    make_donation(donor["id"], amount=999)

    response = auth_client.get(f"/api/campaigns/{campaign['id']}")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["raised"] == 550
    assert data["donationCount"] == 2
    assert sorted(d["amount"] for d in data["donations"]) == [250, 300]


def test_list_campaigns_reports_computed_totals(auth_client, make_donor, make_campaign, make_donation):
    donor = make_donor()
    funded = make_campaign(name="Funded")
    make_campaign(name="Empty", status="paused")
    make_donation(donor["id"], amount=120, campaignId=funded["id"])

    body = auth_client.get("/api/campaigns").json()
    totals = {c["name"]: (c["raised"], c["donationCount"]) for c in body["data"]}
    assert totals == {"Funded": (120, 1), "Empty": (0, 0)}

    paused = auth_client.get("/api/campaigns", params={"status": "paused"}).json()
    assert [c["name"] for c in paused["data"]] == ["Empty"]


def test_cached_total_matches_computed_sum(auth_client, db, make_donor, make_campaign, make_donation):
    donor = make_donor()
    campaign = make_campaign()
    first = make_donation(donor["id"], amount=40, campaignId=campaign["id"])["data"]
    make_donation(donor["id"], amount=60, campaignId=campaign["id"])
    auth_client.patch(f"/api/donations/{first['id']}", json={"amount": 45})

    raised, count = sum_campaign_donations(db, campaign["id"])
    assert (raised, count) == (105, 2)
    assert get_cached_raised(db, campaign["id"]) == raised


def test_deleting_donor_resyncs_campaign_cache(auth_client, db, make_donor, make_campaign, make_donation):
    donor = make_donor()
    campaign = make_campaign()
    make_donation(donor["id"], amount=80, campaignId=campaign["id"])

    auth_client.delete(f"/api/donors/{donor['id']}")
    assert get_cached_raised(db, campaign["id"]) == 0
    assert auth_client.get(f"/api/campaigns/{campaign['id']}").json()["data"]["raised"] == 0


def test_partial_update_keeps_other_fields(auth_client, make_campaign):
    campaign = make_campaign(description="Annual", endDate="2026-02-01")

    response = auth_client.patch(f"/api/campaigns/{campaign['id']}", json={"status": "completed"})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "completed"
    assert data["description"] == "Annual"
    assert data["endDate"] == "2026-02-01"
    assert data["donations"] == []


def test_update_validates_window_against_stored_dates(auth_client, make_campaign):
    campaign = make_campaign(endDate="2026-02-01")
    response = auth_client.patch(f"/api/campaigns/{campaign['id']}", json={"startDate": "2026-03-01"})
    assert response.status_code == 400

    cleared = auth_client.patch(f"/api/campaigns/{campaign['id']}", json={"endDate": None})
    assert cleared.status_code == 200
    assert cleared.json()["data"]["endDate"] is None


def test_missing_campaign_is_404(auth_client):
    assert auth_client.get("/api/campaigns/77").status_code == 404
    assert auth_client.patch("/api/campaigns/77", json={"name": "x"}).status_code == 404


def test_create_campaign_rejects_infinite_goal(auth_client):
    response = auth_client.post(
        "/api/campaigns",
        content='{"name": "Gala", "goal": Infinity, "startDate": "2026-03-01"}',
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert auth_client.get("/api/campaigns").json()["pagination"]["total"] == 0
