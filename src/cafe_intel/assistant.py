"""
AI assistant - chat completion with OpenAI, Gemini fallback, canned replies last.
"""

import uuid
from datetime import datetime, timezone
from typing import List

from cafe_intel import synthetic
from cafe_intel.context import ServiceContext, request_json
from cafe_intel.credentials import Provider
from cafe_intel.fallback import ProviderAttempt, attempt_in_order
from cafe_intel.models import AIResponse, ChatMessage
from cafe_intel.normalize import normalize_gemini, normalize_openai
from cafe_intel.ratelimit import PROVIDER_LIMITS
from cafe_intel.scoring import analyze_message_for_threats, generate_suggestions


OPENAI_URL = "https://api.openai.com/v1/chat/completions"
GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/gemini-pro:generateContent"

OPENAI_MODEL = "gpt-4o-mini"
MAX_TOKENS = 1000
TEMPERATURE = 0.7
HISTORY_WINDOW = 10  # prior turns sent to OpenAI

OPENAI_SYSTEM_PROMPT = """You are OSINT Cafe's AI assistant, specializing in cybersecurity, digital investigation, and online safety. You help users with:

1. Threat analysis and risk assessment
2. Dating safety and romance scam detection
3. Blockchain verification and crypto security
4. Digital identity verification
5. OSINT (Open Source Intelligence) techniques
6. Cybersecurity best practices

Always provide:
- Clear, actionable advice
- Specific threat level assessments when relevant
- Confidence scores for your analysis
- Practical next steps for users

Keep responses concise but informative. Focus on helping users stay safe online."""

GEMINI_SYSTEM_PROMPT = (
    "You are OSINT Cafe's cybersecurity AI assistant. Provide expert guidance on digital "
    "safety, threat analysis, and online investigation techniques. Keep responses focused "
    "and actionable."
)


def build_openai_messages(message: str, history: List[ChatMessage]) -> List[dict]:
    """System prompt, the recent conversation, then the new user message."""
    messages = [{"role": "system", "content": OPENAI_SYSTEM_PROMPT}]
    messages.extend({"role": turn.role, "content": turn.content} for turn in history)
    messages.append({"role": "user", "content": message})
    return messages


def build_gemini_prompt(message: str) -> str:
    return f"{GEMINI_SYSTEM_PROMPT}\n\nUser: {message}"


class AIAssistant:
    """Chat front-end keeping an in-memory conversation history."""

    def __init__(self, context: ServiceContext):
        self.context = context
        self._history: List[ChatMessage] = []

    async def send_message(self, message: str) -> AIResponse:
        """
        Answer a user message.

        Priority: OpenAI -> Gemini -> canned reply. Never raises for
        provider failures.

        Args:
            message: User text

        Returns:
            AIResponse with message, up to three suggestions and a threat signal
        """
        prior = self._history[-HISTORY_WINDOW:]
        self._record(message, "user")

        response = await attempt_in_order(
            "send_message",
            [
                ProviderAttempt(
                    name="openai",
                    invoke=lambda: self._call_openai(message, prior),
                    provider=Provider.OPENAI,
                    rate_limit=PROVIDER_LIMITS["openai"],
                ),
                ProviderAttempt(
                    name="gemini",
                    invoke=lambda: self._call_gemini(message),
                    provider=Provider.GEMINI,
                    rate_limit=PROVIDER_LIMITS["gemini"],
                ),
            ],
            lambda: synthetic.chat_reply(message),
            context=self.context,
            mock_mode=self.context.credentials.mock_mode.ai_assistant,
        )

        self._record(response.message, "assistant")
        return response

    async def _call_openai(self, message: str, history: List[ChatMessage]) -> AIResponse:
        api_key = self.context.credentials.key_for(Provider.OPENAI)
        async with self.context.http_client() as client:
            payload = await request_json(
                client,
                "openai",
                "POST",
                OPENAI_URL,
                headers={
                    "Authorization": f"Bearer {api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "model": OPENAI_MODEL,
                    "messages": build_openai_messages(message, history),
                    "max_tokens": MAX_TOKENS,
                    "temperature": TEMPERATURE,
                },
            )

        return self._with_analysis(normalize_openai(payload), message)

    async def _call_gemini(self, message: str) -> AIResponse:
        api_key = self.context.credentials.key_for(Provider.GEMINI)
        async with self.context.http_client() as client:
            payload = await request_json(
                client,
                "gemini",
                "POST",
                GEMINI_URL,
                params={"key": api_key},
                headers={"Content-Type": "application/json"},
                json={
                    "contents": [{"parts": [{"text": build_gemini_prompt(message)}]}],
                    "generationConfig": {
                        "temperature": TEMPERATURE,
                        "maxOutputTokens": MAX_TOKENS,
                    },
                },
            )

        return self._with_analysis(normalize_gemini(payload), message)

    @staticmethod
    def _with_analysis(reply: str, message: str) -> AIResponse:
        return AIResponse(
            message=reply,
            suggestions=generate_suggestions(message),
            analysis=analyze_message_for_threats(message),
        )

    def _record(self, content: str, role: str) -> None:
        self._history.append(ChatMessage(
            id=uuid.uuid4().hex,
            content=content,
            role=role,
            timestamp=datetime.now(timezone.utc),
        ))

    def get_conversation_history(self) -> List[ChatMessage]:
        return list(self._history)

    def clear_history(self) -> None:
        self._history = []
