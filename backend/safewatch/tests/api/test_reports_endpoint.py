SPOT = {"latitude": 40.4168, "longitude": -3.7038}


def _submit(client, **overrides):
    body = {"category": "Drug Activity", "description": "Dealing by the school", "location": SPOT}
    body.update(overrides)
    return client.post("/api/reports", json=body)


def test_submit_report_returns_id_without_alert(api_client):
    response = _submit(api_client, contactInfo="555-0101")
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["reportId"] == "R0001"
    assert body["hotspotAlert"] is False
    assert body["hotspotId"] is None
    assert "clusterInfo" not in body


def test_third_report_triggers_hotspot_alert(api_client):
    _submit(api_client)
    _submit(api_client)
    body = _submit(api_client).json()
    assert body["hotspotAlert"] is True
    assert body["hotspotId"] == "HS-0001"
    info = body["clusterInfo"]
    assert info["reportCount"] == 3
    assert info["radius"] == 0.005
    assert info["timeWindow"] == 86_400_000
    assert info["center"] == SPOT


def test_submit_rejects_unknown_category(api_client):
    response = _submit(api_client, category="Parking")
    assert response.status_code == 422
    assert "Unknown category" in response.json()["detail"]
    assert api_client.get("/api/reports").json() == []


def test_submit_rejects_empty_description(api_client):
    assert _submit(api_client, description="").status_code == 422


def test_submit_rejects_partial_location(api_client):
    response = _submit(api_client, location={"latitude": 40.0})
    assert response.status_code == 422
    assert api_client.get("/api/stats").json()["reportsSubmitted"] == 0


def test_get_report_and_not_found(api_client):
    report_id = _submit(api_client, location=None, mediaRef="upload-42.jpg").json()["reportId"]

    response = api_client.get(f"/api/reports/{report_id}")
    assert response.status_code == 200
    body = response.json()
    assert body["location"] is None
    assert body["mediaRef"] == "upload-42.jpg"
    assert body["status"] == "submitted"
    assert body["contactInfo"] is None

    missing = api_client.get("/api/reports/NOPE")
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Report not found"


def test_update_status(api_client):
    report_id = _submit(api_client).json()["reportId"]

    response = api_client.patch(f"/api/reports/{report_id}/status", json={"status": "under_review"})
    assert response.status_code == 200
    assert response.json()["status"] == "under_review"

    assert api_client.patch(f"/api/reports/{report_id}/status", json={"status": "closed"}).status_code == 422
    assert api_client.patch("/api/reports/NOPE/status", json={"status": "resolved"}).status_code == 404


def test_list_reports_in_submission_order(api_client):
    for text in ("first", "second", "third"):
        _submit(api_client, description=text)
    listed = api_client.get("/api/reports").json()
    assert [r["description"] for r in listed] == ["first", "second", "third"]


def test_stats_and_health(api_client):
    _submit(api_client)
    assert api_client.get("/api/stats").json() == {
        "reportsSubmitted": 1,
        "incidentsRecorded": 1,
        "communityMembers": 1,
    }
    health = api_client.get("/api/health").json()
    assert health["status"] == "OK"
    assert health["features"]["hotspotDetection"] is True
    assert health["features"]["notificationChannels"] == ["recording"]


def test_sql_backed_app_round_trip(sql_api_client):
    for _ in range(3):
        last = _submit(sql_api_client)
    assert last.json()["hotspotAlert"] is True
    report_id = last.json()["reportId"]
    assert sql_api_client.get(f"/api/reports/{report_id}").json()["location"] == SPOT
