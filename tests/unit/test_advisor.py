"""Unit tests for the AI advisor client"""

import asyncio
import httpx
import pytest
from unittest.mock import AsyncMock, patch
from budgetwise.domain.exceptions import AdvisorUnavailableError
from budgetwise.infrastructure.clients.advisor import AdvisorClient, build_system_prompt, build_welcome_message

API_BASE = "https://ai.test/v1"


def completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def response(status_code, json=None):
    request = httpx.Request("POST", f"{API_BASE}/chat/completions")
    return httpx.Response(status_code, json=json, request=request)


@pytest.fixture
def advisor() -> AdvisorClient:
    client = AdvisorClient(api_base=API_BASE, api_key="test-key", timeout=1.0)
    client.backoff_base = 0
    return client


def test_system_prompt_includes_budget_figures(sample_snapshot):
    prompt = build_system_prompt(sample_snapshot)

    assert "Monthly Income: $5,000.00" in prompt
    assert "Monthly Disposable Income: $1,500.00" in prompt
    assert "Guidelines:" in prompt


def test_system_prompt_without_budget():
    prompt = build_system_prompt(None)

    assert "hasn't provided budget data" in prompt
    assert "Monthly Income" not in prompt


def test_welcome_message(sample_snapshot):
    welcome = build_welcome_message(sample_snapshot)

    assert "I can see your budget data" in welcome
    assert "monthly income of $5,000 and expenses of $3,500" in welcome


def test_welcome_message_without_budget():
    welcome = build_welcome_message(None)

    assert "can see your budget" not in welcome
    assert "don't have your budget yet" in welcome
    assert "$" not in welcome


@patch("httpx.AsyncClient.post", new_callable=AsyncMock)
def test_get_advice_returns_completion(mock_post: AsyncMock, advisor: AdvisorClient, sample_snapshot):
    mock_post.return_value = response(200, completion("Build your emergency fund first."))

    reply = asyncio.run(advisor.get_advice("What should I do?", sample_snapshot))

    assert reply == "Build your emergency fund first."
    payload = mock_post.call_args.kwargs["json"]
    assert payload["model"] == advisor.model
    assert payload["messages"][0]["role"] == "system"
    assert payload["messages"][1] == {"role": "user", "content": "What should I do?"}
    assert mock_post.call_args.kwargs["headers"]["Authorization"] == "Bearer test-key"


@patch("httpx.AsyncClient.post", new_callable=AsyncMock)
def test_get_advice_retries_server_errors(mock_post: AsyncMock, advisor: AdvisorClient):
    mock_post.side_effect = [response(503), response(200, completion("Recovered"))]

    assert asyncio.run(advisor.get_advice("Hi", None)) == "Recovered"
    assert mock_post.call_count == 2


@patch("httpx.AsyncClient.post", new_callable=AsyncMock)
def test_get_advice_gives_up_after_max_retries(mock_post: AsyncMock, advisor: AdvisorClient):
    mock_post.side_effect = httpx.ConnectTimeout("timed out")

    with pytest.raises(AdvisorUnavailableError, match="timeout"):
        asyncio.run(advisor.get_advice("Hi", None))
    assert mock_post.call_count == advisor.max_retries


@patch("httpx.AsyncClient.post", new_callable=AsyncMock)
def test_get_advice_does_not_retry_client_errors(mock_post: AsyncMock, advisor: AdvisorClient):
    mock_post.return_value = response(401, {"error": "bad key"})

    with pytest.raises(AdvisorUnavailableError, match="401"):
        asyncio.run(advisor.get_advice("Hi", None))
    assert mock_post.call_count == 1


@patch("httpx.AsyncClient.post", new_callable=AsyncMock)
def test_get_advice_rejects_empty_completion(mock_post: AsyncMock, advisor: AdvisorClient):
    mock_post.return_value = response(200, completion(""))

    with pytest.raises(AdvisorUnavailableError, match="No response"):
        asyncio.run(advisor.get_advice("Hi", None))


def test_get_advice_requires_api_key():
    client = AdvisorClient(api_base=API_BASE, api_key="")
    client.api_key = None

    with pytest.raises(AdvisorUnavailableError, match="not configured"):
        asyncio.run(client.get_advice("Hi", None))
