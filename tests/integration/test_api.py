"""Integration tests for API endpoints"""

import pytest
from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from budgetwise.domain.exceptions import AdvisorUnavailableError

pytestmark = pytest.mark.integration


def save_budget(client: TestClient, user_id: str, budget: dict) -> dict:
    response = client.post("/v1/budget", json={"user_id": user_id, **budget})
    assert response.status_code == 200
    return response.json()


def make_premium(client: TestClient, user_id: str) -> None:
    response = client.put(f"/v1/profile/{user_id}", json={"subscription_tier": "premium"})
    assert response.status_code == 200


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["database"] == "ok"
    assert "X-Request-ID" in response.headers


def test_health_reports_database_failure(client: TestClient, db):
    with patch.object(db, "execute", side_effect=OperationalError("SELECT 1", {}, Exception("down"))):
        response = client.get("/health")

    assert response.status_code == 503
    assert response.json()["database"] == "unavailable"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "budgetwise_decision_total" in response.text
    assert 'endpoint="/health"' not in response.text


# --- Profile ---


def test_profile_created_with_defaults(client: TestClient):
    response = client.get("/v1/profile/new_user")

    assert response.status_code == 200
    data = response.json()
    assert data["subscription_tier"] == "free"
    assert data["savings_rate_threshold"] == 20
    assert data["expense_ratio_threshold"] == 80


def test_profile_update_partial(client: TestClient):
    client.put("/v1/profile/user_1", json={"display_name": "Sam"})
    response = client.put("/v1/profile/user_1", json={"savings_rate_threshold": 35})

    data = response.json()
    assert data["display_name"] == "Sam"
    assert data["savings_rate_threshold"] == 35
    assert data["expense_ratio_threshold"] == 80


def test_profile_rejects_out_of_range_threshold(client: TestClient):
    response = client.put("/v1/profile/user_1", json={"expense_ratio_threshold": 120})
    assert response.status_code == 422


# --- Budget ---


def test_save_and_get_budget(client: TestClient, sample_budget: dict):
    saved = save_budget(client, "user_1", sample_budget)

    assert saved["disposable_income"] == 1500
    assert saved["health"]["status"] == "healthy"
    assert saved["health"]["savings_rate_pct"] == 30
    assert saved["projection"]["projected_annual_savings"] == 18000

    response = client.get("/v1/budget?user_id=user_1")
    assert response.status_code == 200
    assert response.json()["budget_id"] == saved["budget_id"]


def test_new_budget_replaces_active_budget(client: TestClient, sample_budget: dict):
    save_budget(client, "user_1", sample_budget)
    second = save_budget(client, "user_1", {**sample_budget, "monthly_expenses": 4600})

    data = client.get("/v1/budget?user_id=user_1").json()
    assert data["budget_id"] == second["budget_id"]
    assert data["health"]["status"] == "needs_attention"


def test_budget_health_uses_profile_thresholds(client: TestClient, sample_budget: dict):
    client.put("/v1/profile/user_1", json={"savings_rate_threshold": 40, "expense_ratio_threshold": 60})
    save_budget(client, "user_1", sample_budget)

    health = client.get("/v1/budget?user_id=user_1").json()["health"]
    assert health["status"] == "fair"
    assert any("60% limit" in alert for alert in health["alerts"])


def test_get_budget_not_found(client: TestClient):
    response = client.get("/v1/budget?user_id=nobody")
    assert response.status_code == 404


def test_save_budget_rejects_negative_amounts(client: TestClient, sample_budget: dict):
    response = client.post("/v1/budget", json={"user_id": "user_1", **sample_budget, "savings": -1})
    assert response.status_code == 422


@pytest.mark.parametrize("field", ["monthly_income", "monthly_expenses", "savings", "emergency_fund"])
def test_save_budget_rejects_amounts_beyond_column_range(client: TestClient, sample_budget: dict, field: str):
    response = client.post("/v1/budget", json={"user_id": "user_1", **sample_budget, field: 1e13})
    assert response.status_code == 422


def test_inline_and_stored_budget_score_the_same(client: TestClient, sample_budget: dict):
    """Sub-cent figures are rounded to cents on both paths"""
    budget = {**sample_budget, "monthly_income": 5000.004, "monthly_expenses": 3500.006}
    saved = save_budget(client, "user_1", budget)
    assert saved["budget"]["monthly_income"] == 5000.0
    assert saved["budget"]["monthly_expenses"] == 3500.01

    decision = {"category": "rent", "monthly_rent": 400}
    inline = client.post("/v1/decision", json={"user_id": "user_1", "budget": budget, "decision": decision})
    stored = client.post("/v1/decision", json={"user_id": "user_1", "decision": decision})

    assert inline.json()["analysis"] == stored.json()["analysis"]


# --- Decisions ---


def test_decision_with_inline_budget(client: TestClient, sample_budget: dict):
    """Rent 400 on 1500 disposable income"""
    response = client.post(
        "/v1/decision",
        json={
            "user_id": "user_1",
            "budget": sample_budget,
            "decision": {"category": "rent", "monthly_rent": 400},
        },
    )

    assert response.status_code == 200
    analysis = response.json()["analysis"]
    assert analysis["affordability"] == "excellent"
    assert analysis["risk_level"] == 1
    assert analysis["annual_savings_impact"] == 13200
    assert analysis["alternatives"] is None


def test_decision_uses_active_budget(client: TestClient, sample_budget: dict):
    save_budget(client, "user_1", sample_budget)

    response = client.post(
        "/v1/decision",
        json={
            "user_id": "user_1",
            "decision": {"category": "moving", "moving_costs": 2000, "new_monthly_rent": 1800},
        },
    )

    assert response.status_code == 200
    analysis = response.json()["analysis"]
    assert analysis["affordability"] == "caution"
    assert analysis["annual_savings_impact"] == 9000


def test_decision_education_reports_recovery_time(client: TestClient):
    response = client.post(
        "/v1/decision",
        json={
            "user_id": "user_1",
            "budget": {"monthly_income": 4200, "monthly_expenses": 3000, "savings": 20000, "emergency_fund": 0},
            "decision": {"category": "education", "total_cost": 60000, "duration_years": 4},
        },
    )

    analysis = response.json()["analysis"]
    assert analysis["affordability"] == "high-risk"
    assert analysis["time_to_recover_months"] == 5
    assert analysis["monthly_impact"] == 1250
    assert len(analysis["alternatives"]) == 4


def test_decision_without_budget(client: TestClient):
    response = client.post(
        "/v1/decision",
        json={"user_id": "no_budget", "decision": {"category": "rent", "monthly_rent": 400}},
    )
    assert response.status_code == 422


@pytest.mark.parametrize(
    "decision",
    [
        {"category": "rent", "monthly_rent": -1},
        {"category": "education", "total_cost": 1000, "duration_years": 0},
        {"category": "boat", "price": 1000},
        {"category": "car", "down_payment": 100},
    ],
)
def test_decision_rejects_invalid_input(client: TestClient, sample_budget: dict, decision: dict):
    response = client.post(
        "/v1/decision",
        json={"user_id": "user_1", "budget": sample_budget, "decision": decision},
    )
    assert response.status_code == 422


def test_decision_history_newest_first(client: TestClient, sample_budget: dict):
    save_budget(client, "user_1", sample_budget)
    for decision in [
        {"category": "rent", "monthly_rent": 400},
        {"category": "car", "monthly_payment": 500, "down_payment": 3000},
        {"category": "moving", "moving_costs": 2000, "new_monthly_rent": 1800},
    ]:
        client.post("/v1/decision", json={"user_id": "user_1", "decision": decision})
    client.post(
        "/v1/decision",
        json={"user_id": "other_user", "budget": sample_budget, "decision": {"category": "rent", "monthly_rent": 1}},
    )

    response = client.get("/v1/decision/history?user_id=user_1")

    assert response.status_code == 200
    data = response.json()
    assert data["user_id"] == "user_1"
    assert [d["category"] for d in data["decisions"]] == ["moving", "car", "rent"]
    car = data["decisions"][1]
    assert car["input"] == {"category": "car", "monthly_payment": 500, "down_payment": 3000}
    assert car["analysis"]["affordability"] == "high-risk"

    limited = client.get("/v1/decision/history?user_id=user_1&limit=2").json()
    assert len(limited["decisions"]) == 2


def test_decision_history_limit_bounds(client: TestClient):
    assert client.get("/v1/decision/history?user_id=user_1&limit=0").status_code == 422
    assert client.get("/v1/decision/history?user_id=user_1&limit=500").status_code == 422


def test_rescore_against_new_budget(client: TestClient, sample_budget: dict):
    save_budget(client, "user_1", sample_budget)
    client.post("/v1/decision", json={"user_id": "user_1", "decision": {"category": "rent", "monthly_rent": 400}})

    # Expenses rise: disposable income falls to 500, so 400 rent is 80%
    save_budget(client, "user_1", {**sample_budget, "monthly_expenses": 4500})
    response = client.post("/v1/decision/rescore?user_id=user_1")

    assert response.status_code == 200
    data = response.json()
    assert data["skipped"] == []
    assert len(data["results"]) == 1
    assert data["results"][0]["previous_affordability"] == "excellent"
    assert data["results"][0]["analysis"]["affordability"] == "high-risk"


def test_rescore_without_budget(client: TestClient):
    """Same status as analyzing a decision with no budget"""
    response = client.post("/v1/decision/rescore?user_id=nobody")
    assert response.status_code == 422
    assert "budget" in response.json()["detail"]


# --- Chat ---


def test_chat_requires_premium(client: TestClient):
    response = client.post("/v1/chat/conversations", json={"user_id": "free_user"})
    assert response.status_code == 403


def test_start_conversation_welcome_mentions_budget(client: TestClient, sample_budget: dict):
    make_premium(client, "premium_user")
    save_budget(client, "premium_user", sample_budget)

    response = client.post("/v1/chat/conversations", json={"user_id": "premium_user"})

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Financial Advice Chat"
    assert "$5,000" in data["welcome_message"]["content"]


@patch("budgetwise.infrastructure.clients.advisor.AdvisorClient.get_advice")
def test_send_message_stores_both_sides(mock_advice: AsyncMock, client: TestClient, sample_budget: dict):
    mock_advice.return_value = "Put 20% of your income toward savings."
    make_premium(client, "premium_user")
    save_budget(client, "premium_user", sample_budget)
    conversation_id = client.post("/v1/chat/conversations", json={"user_id": "premium_user"}).json()["conversation_id"]

    response = client.post(
        f"/v1/chat/conversations/{conversation_id}/messages",
        json={"user_id": "premium_user", "content": "How much should I save?"},
    )

    assert response.status_code == 200
    assert response.json()["role"] == "assistant"
    assert response.json()["content"] == "Put 20% of your income toward savings."
    message, budget = mock_advice.call_args.args
    assert message == "How much should I save?"
    assert budget.monthly_income == 5000

    messages = client.get(
        f"/v1/chat/conversations/{conversation_id}/messages?user_id=premium_user"
    ).json()["messages"]
    assert [(m["role"], m["content"]) for m in messages] == [
        ("user", "How much should I save?"),
        ("assistant", "Put 20% of your income toward savings."),
    ]


@patch("budgetwise.infrastructure.clients.advisor.AdvisorClient.get_advice")
def test_send_message_advisor_unavailable(mock_advice: AsyncMock, client: TestClient):
    mock_advice.side_effect = AdvisorUnavailableError("AI API timeout after 30.0s")
    make_premium(client, "premium_user")
    conversation_id = client.post("/v1/chat/conversations", json={"user_id": "premium_user"}).json()["conversation_id"]

    response = client.post(
        f"/v1/chat/conversations/{conversation_id}/messages",
        json={"user_id": "premium_user", "content": "Hello?"},
    )

    assert response.status_code == 503
    messages = client.get(
        f"/v1/chat/conversations/{conversation_id}/messages?user_id=premium_user"
    ).json()["messages"]
    assert [m["role"] for m in messages] == ["user"]


def test_conversation_belongs_to_owner(client: TestClient):
    make_premium(client, "premium_user")
    make_premium(client, "someone_else")
    conversation_id = client.post("/v1/chat/conversations", json={"user_id": "premium_user"}).json()["conversation_id"]

    response = client.post(
        f"/v1/chat/conversations/{conversation_id}/messages",
        json={"user_id": "someone_else", "content": "Hi"},
    )
    assert response.status_code == 404

    assert client.get("/v1/chat/conversations/not-a-uuid/messages?user_id=premium_user").status_code == 404


def test_start_conversation_without_budget(client: TestClient):
    make_premium(client, "premium_user")

    response = client.post("/v1/chat/conversations", json={"user_id": "premium_user"})

    assert response.status_code == 200
    content = response.json()["welcome_message"]["content"]
    assert "can see your budget" not in content
    assert "don't have your budget yet" in content
