import pytest


PROFILE = {
    "name": "morgan",
    "finances": {
        "income": 4000, "rent": 1200, "utilities": 200, "transport_cost": 300,
        "food": 500, "debt": 100, "subscriptions": 50, "savings": 600,
    },
    "strategies": [{"label": "Index Fund", "monthly_amount": 150}],
    "lifestyle_optimizations": [{"category": "Transportation", "monthly_savings": 100}],
    "claimed_subsidies": [{"name": "Fuel", "monthly_benefit": 30},
                          {"name": "Rent", "monthly_benefit": 70}],
    "subsidies_enabled": True,
}


@pytest.fixture
def onboarded(client):
    response = client.post("/onboard/", json=PROFILE)
    assert response.status_code == 200
    return client


def test_stateless_score(client):
    response = client.post("/score", json=PROFILE["finances"])
    assert response.status_code == 200
    body = response.json()
    assert body["score"] == 34
    assert body["band"] == "Moderate"
    assert body["category"] == "Moderate Stress"


def test_unknown_user(client):
    assert client.get("/user/nobody").status_code == 404
    assert client.get("/score/nobody").status_code == 404
    assert client.get("/allocation/nobody").status_code == 404


def test_analysis_matches_local_score(onboarded):
    body = onboarded.get("/analysis/morgan").json()
    assert body["financials"]["stress"]["score"] == onboarded.get("/score/morgan").json()["score"]
    assert body["subsidies"] == {"matches": 2, "monthly_total": 100}


def test_goal_lifecycle(onboarded):
    created = onboarded.post("/goals/morgan", json={
        "name": "Car", "target_amount": 3000, "deadline_months": 10, "category": "Car/Vehicle",
    })
    assert created.status_code == 200
    goal_id = created.json()["id"]

    listed = onboarded.get("/goals/morgan").json()
    assert listed[0]["goal"]["id"] == goal_id
    # 300/mo against 4000 - 1250 free income
    assert listed[0]["analysis"]["verdict"] == "Realistic"

    edited = onboarded.put(f"/goals/morgan/{goal_id}", json={
        "name": "Car", "target_amount": 30000, "deadline_months": 10, "category": "Yacht",
    })
    assert edited.status_code == 200
    assert edited.json()["category"] == "General"
    assert onboarded.get("/goals/morgan").json()[0]["analysis"]["verdict"] == "Danger"

    assert onboarded.delete(f"/goals/morgan/{goal_id}").status_code == 200
    assert onboarded.get("/goals/morgan").json() == []
    assert onboarded.delete(f"/goals/morgan/{goal_id}").status_code == 404


def test_invalid_goal_is_400(onboarded):
    response = onboarded.post("/goals/morgan", json={
        "name": "Trip", "target_amount": 1000, "deadline_months": 0,
    })
    assert response.status_code == 400
    assert "deadline" in response.json()["detail"]


def test_allocation(onboarded):
    body = onboarded.get("/allocation/morgan").json()
    labels = [b["label"] for b in body["buckets"]]
    assert labels[0] == "Balance Left"
    assert labels[-1] == "Subsidies"
    amounts = {b["label"]: b["amount"] for b in body["buckets"]}
    assert amounts["Balance Left"] == pytest.approx(4000 - 2350 - 600 - 150 + 100)
    assert amounts["Transport"] == pytest.approx(200)
    assert amounts["Subsidies"] == pytest.approx(100)
    assert body["income"] == 4000


def test_nan_goal_target_is_400_and_profile_stays_readable(onboarded):
    response = onboarded.post(
        "/goals/morgan",
        content='{"name": "Car", "target_amount": NaN, "deadline_months": 10}',
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert onboarded.get("/user/morgan").status_code == 200
    assert onboarded.get("/allocation/morgan").status_code == 200


def test_goal_routes_report_unknown_user(client):
    goal = {"name": "Car", "target_amount": 1000, "deadline_months": 10}
    assert client.post("/goals/nobody", json=goal).json()["detail"] == "User not found"
    assert client.put("/goals/nobody/abc", json=goal).json()["detail"] == "User not found"
    assert client.delete("/goals/nobody/abc").json()["detail"] == "User not found"


def test_edit_unknown_goal_is_404(onboarded):
    goal = {"name": "Car", "target_amount": 1000, "deadline_months": 10}
    response = onboarded.put("/goals/morgan/missing", json=goal)
    assert response.status_code == 404
    assert response.json()["detail"] == "Goal not found"
