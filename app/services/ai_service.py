"""AI 제안 게이트웨이 — Gemini generateContent 단발 호출.

AI Suggestion Gateway — Thin pass-through to the Gemini text-generation
REST API for two fixed prompts. Best effort: no retries, one request per
call, and every failure degrades to a placeholder string. Nothing here
raises to the caller.
"""

import logging
from typing import Any

import httpx

from app.config import settings

logger = logging.getLogger("issue-tracker.ai")

NOT_CONFIGURED: str = "AI service not configured."
UNAVAILABLE: str = "Error connecting to AI service."
PLACEHOLDERS: frozenset[str] = frozenset({NOT_CONFIGURED, UNAVAILABLE})


def description_prompt(title: str, category: str) -> str:
    return (
        "I am an IT support staff member reporting an issue.\n\n"
        f'Title: "{title}"\n'
        f'Category: "{category}"\n\n'
        "Please generate a professional, detailed description of what might be going wrong "
        "and what initial troubleshooting steps could be tried.\n"
        "Keep it under 150 words."
    )


def solution_prompt(title: str, description: str) -> str:
    return (
        "Act as a senior IT System Administrator.\n\n"
        "Analyze the following IT issue and suggest 3 potential solutions or troubleshooting "
        "steps formatted as a bulleted list.\n\n"
        f"Issue: {title}\n"
        f"Details: {description}"
    )


def _extract_text(body: dict[str, Any]) -> str:
    # candidates[0].content.parts[*].text
    parts: list[dict[str, Any]] = body["candidates"][0]["content"]["parts"]
    return "".join(str(part.get("text", "")) for part in parts).strip()


class AIService:
    """Gemini 게이트웨이.

    Args:
        transport: 테스트용 httpx 전송 계층 (Optional transport, e.g. httpx.MockTransport)
    """

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._transport: httpx.AsyncBaseTransport | None = transport

    @property
    def configured(self) -> bool:
        return bool(settings.GEMINI_API_KEY)

    async def _generate(self, prompt: str, operation: str) -> str:
        """프롬프트 1회 호출 — 실패 시 안내 문구 반환 (single attempt, never raises)."""
        if not self.configured:
            return NOT_CONFIGURED

        url: str = (
            f"{settings.GEMINI_API_URL.rstrip('/')}/models/{settings.GEMINI_MODEL}:generateContent"
        )
        payload: dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
        try:
            async with httpx.AsyncClient(
                timeout=settings.AI_TIMEOUT_SECONDS, transport=self._transport
            ) as client:
                resp = await client.post(
                    url,
                    headers={"x-goog-api-key": settings.GEMINI_API_KEY},
                    json=payload,
                )
                resp.raise_for_status()
                text: str = _extract_text(resp.json())
        except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as exc:
            logger.warning("AI %s failed (%s): %s", operation, settings.GEMINI_MODEL, exc)
            return UNAVAILABLE

        if not text:
            logger.warning("AI %s returned no text (%s)", operation, settings.GEMINI_MODEL)
            return UNAVAILABLE
        return text

    async def expand_description(self, title: str, category: str) -> str:
        """제목/카테고리로 상세 설명 초안 생성 (AI Smart-Fill)."""
        return await self._generate(description_prompt(title, category), "expand_description")

    async def suggest_solution(self, title: str, description: str) -> str:
        """해결 방안 3가지 제안 (AI Diagnostics)."""
        return await self._generate(solution_prompt(title, description), "suggest_solution")


def is_placeholder(text: str) -> bool:
    """실제 제안이 아닌 안내 문구인지 (True for the not-configured/error strings)."""
    return text in PLACEHOLDERS


# 싱글턴 인스턴스 / Singleton instance
ai_service: AIService = AIService()
