"""AI financial advisor HTTP client with timeout and exponential backoff retry"""

import asyncio
import httpx
from typing import Optional
from budgetwise.config import settings
from budgetwise.domain.exceptions import AdvisorUnavailableError
from budgetwise.domain.models import BudgetSnapshot
from budgetwise.infrastructure.observability.metrics import advisor_latency_histogram, advisor_failure_counter

PROMPT_GUIDELINES = """Guidelines:
1. Always reference their specific financial situation when giving advice
2. Be encouraging but realistic about their financial position
3. Provide actionable steps they can take immediately
4. Consider their risk tolerance based on their emergency fund and disposable income
5. Suggest specific dollar amounts or percentages when appropriate
6. Keep responses conversational but professional"""

PROMPT_FOOTER = """Always:
- Keep responses concise but comprehensive (2-3 paragraphs max)
- Use encouraging language while being realistic
- Provide specific, actionable advice
- Ask follow-up questions to better understand their goals
- Focus on practical steps they can implement today"""


def build_system_prompt(budget: Optional[BudgetSnapshot]) -> str:
    """System prompt carrying the user's budget figures"""
    intro = (
        "You are an expert financial advisor AI. You provide personalized, "
        "practical financial advice based on the user's budget data."
    )
    if budget is None:
        context = (
            "The user hasn't provided budget data yet. Encourage them to share "
            "their financial information for personalized advice."
        )
    else:
        context = (
            "User's Financial Profile:\n"
            f"- Monthly Income: ${budget.monthly_income:,.2f}\n"
            f"- Monthly Expenses: ${budget.monthly_expenses:,.2f}\n"
            f"- Total Savings: ${budget.savings:,.2f}\n"
            f"- Emergency Fund: ${budget.emergency_fund:,.2f}\n"
            f"- Monthly Disposable Income: ${budget.disposable_income:,.2f}\n\n"
            f"{PROMPT_GUIDELINES}"
        )
    return f"{intro}\n\n{context}\n\n{PROMPT_FOOTER}"


def build_welcome_message(budget: Optional[BudgetSnapshot]) -> str:
    greeting = "Hello! I'm your AI financial advisor."
    if budget is None:
        return (
            f"{greeting} I don't have your budget yet, so my advice will be general. "
            "Add your monthly income and expenses for personalized guidance. "
            "What would you like to know about your finances?"
        )
    return (
        f"{greeting} I can see your budget data and help you make smart financial decisions. "
        f"With your monthly income of ${budget.monthly_income:,.0f} and "
        f"expenses of ${budget.monthly_expenses:,.0f}, what would you like to know about your finances?"
    )


class AdvisorClient:
    """Client for an OpenAI-compatible chat completions API"""

    def __init__(
        self,
        api_base: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
    ):
        self.api_base = (api_base or settings.ai_api_base).rstrip("/")
        self.api_key = api_key or settings.ai_api_key
        self.timeout = timeout or settings.ai_timeout_seconds
        self.model = settings.ai_model
        self.max_tokens = settings.ai_max_tokens
        self.temperature = settings.ai_temperature
        self.max_retries = settings.ai_max_retries
        self.backoff_base = settings.ai_backoff_base

    async def get_advice(self, message: str, budget: Optional[BudgetSnapshot]) -> str:
        """
        Ask the language model for advice on a user message.

        Retry strategy:
        - Exponential backoff: base * 2^(attempt-1)
        - Retries on timeouts, network failures and 5xx errors
        - 4xx errors fail immediately

        Raises:
            AdvisorUnavailableError: On missing API key, exhausted retries,
                HTTP errors, or an empty completion
        """
        if not self.api_key:
            raise AdvisorUnavailableError("AI API key is not configured")

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": build_system_prompt(budget)},
                {"role": "user", "content": message},
            ],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        attempt = 0
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            while True:
                try:
                    with advisor_latency_histogram.time():
                        response = await client.post(
                            f"{self.api_base}/chat/completions",
                            json=payload,
                            headers=headers,
                        )
                        response.raise_for_status()
                    return self._extract_content(response)

                except httpx.HTTPStatusError as e:
                    advisor_failure_counter.inc()
                    attempt += 1
                    if e.response.status_code < 500 or attempt >= self.max_retries:
                        raise AdvisorUnavailableError(f"AI API error: {e.response.status_code}") from e

                except httpx.TimeoutException as e:
                    advisor_failure_counter.inc()
                    attempt += 1
                    if attempt >= self.max_retries:
                        raise AdvisorUnavailableError(f"AI API timeout after {self.timeout}s") from e

                except httpx.RequestError as e:
                    advisor_failure_counter.inc()
                    attempt += 1
                    if attempt >= self.max_retries:
                        raise AdvisorUnavailableError(f"AI API unreachable: {e}") from e

                backoff = self.backoff_base * (2 ** (attempt - 1))
                await asyncio.sleep(backoff)

    @staticmethod
    def _extract_content(response: httpx.Response) -> str:
        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise AdvisorUnavailableError(f"Invalid response from AI API: {e}") from e
        if not content:
            raise AdvisorUnavailableError("No response from AI API")
        return content
