"""Client for the remote design-advisory service.

The service is an OpenRouter-compatible chat completion endpoint. Its reply
is opaque text: it is escaped for display and never parsed for decisions.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, List, Optional

import httpx
from markupsafe import escape
from pydantic import BaseModel, Field

from .errors import AdvisoryServiceError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "qwen/qwen3-235b-a22b:free"
DEFAULT_PROMPT = "Analyze this space base design and advise improvements."

SYSTEM_PROMPT = """You are an expert space habitat engineer AI assistant embedded in a 2D base design tool. Given a JSON design (modules, corridors, environment, crew, duration), provide:
1) Key risks and violations (concise bullets)
2) Concrete fixes (prioritized actions)
3) Sizing verdicts per module type (Too small / OK / Oversized with brief reason)
4) Resource sufficiency (food, water, O2, exercise, radiation) and what to add or resize.
Be practical, specific, and brief. Output simple markdown with short bullets."""


class AdvisorySettings(BaseModel):
    """Endpoint and credentials for the advisory service."""

    api_key: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    temperature: float = Field(0.3, ge=0)
    max_tokens: int = Field(800, gt=0)
    timeout_seconds: float = Field(60.0, gt=0)

    @classmethod
    def from_env(cls) -> "AdvisorySettings":
        return cls(
            api_key=os.environ.get("OPENROUTER_API_KEY") or None,
            base_url=os.environ.get("HABITAT_ADVISORY_URL", DEFAULT_BASE_URL),
            model=os.environ.get("HABITAT_ADVISORY_MODEL", DEFAULT_MODEL),
        )


def build_messages(design: Dict[str, Any], prompt: Optional[str] = None) -> List[Dict[str, str]]:
    user = f"{prompt or DEFAULT_PROMPT}\n\nDesign JSON:\n\n{json.dumps(design, indent=2)}"
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": user},
    ]


def render_advice_html(text: Optional[str]) -> str:
    """Escape advisory text and keep its line breaks."""
    return str(escape(text or "")).replace("\n", "<br>")


class AdvisoryClient:
    """Synchronous advisory client.

    Args:
        settings: Endpoint configuration; read from the environment if omitted.
        transport: Optional httpx transport, used to stub the service in tests.
    """

    def __init__(
        self,
        settings: Optional[AdvisorySettings] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.settings = settings or AdvisorySettings.from_env()
        self._client = httpx.Client(
            base_url=self.settings.base_url,
            timeout=self.settings.timeout_seconds,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def analyze(
        self,
        design: Dict[str, Any],
        prompt: Optional[str] = None,
        model: Optional[str] = None,
    ) -> str:
        """Ask the service for advice on ``design`` and return its text."""

        if not self.settings.api_key:
            raise AdvisoryServiceError("Missing OPENROUTER_API_KEY", status_code=500)

        payload = {
            "model": model or self.settings.model,
            "messages": build_messages(design, prompt),
            "temperature": self.settings.temperature,
            "max_tokens": self.settings.max_tokens,
        }
        logger.info("Requesting advisory analysis from %s", payload["model"])
        try:
            response = self._client.post(
                "/chat/completions",
                json=payload,
                headers={"Authorization": f"Bearer {self.settings.api_key}"},
            )
        except httpx.HTTPError as exc:
            logger.warning("Advisory request failed: %s", exc)
            raise AdvisoryServiceError(f"Advisory request failed: {exc}") from exc

        if response.is_error:
            logger.warning("Advisory service returned %d", response.status_code)
            raise AdvisoryServiceError(response.text, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as exc:
            raise AdvisoryServiceError("Advisory service returned invalid JSON") from exc

        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices:
            return ""
        message = choices[0].get("message") or {}
        return message.get("content") or ""


class AdvisoryChannel:
    """Tracks advisory requests so only the newest one is displayed.

    A new request supersedes any pending one; results for superseded
    tickets are dropped.
    """

    def __init__(self) -> None:
        self._latest = 0
        self.pending = False
        self.content: Optional[str] = None
        self.error: Optional[str] = None

    @property
    def latest_ticket(self) -> int:
        return self._latest

    def begin(self) -> int:
        self._latest += 1
        self.pending = True
        return self._latest

    def resolve(self, ticket: int, content: str) -> bool:
        if ticket != self._latest:
            logger.debug("Dropping superseded advisory result %d", ticket)
            return False
        self.pending = False
        self.content = content
        self.error = None
        return True

    def fail(self, ticket: int, error: Exception) -> bool:
        if ticket != self._latest:
            return False
        self.pending = False
        self.content = None
        self.error = str(error)
        return True

    def request(
        self,
        client: AdvisoryClient,
        design: Dict[str, Any],
        prompt: Optional[str] = None,
        model: Optional[str] = None,
    ) -> bool:
        """Run one request through ``client``; True if it produced content."""

        ticket = self.begin()
        try:
            content = client.analyze(design, prompt=prompt, model=model)
        except AdvisoryServiceError as exc:
            self.fail(ticket, exc)
            return False
        return self.resolve(ticket, content)

    def display_html(self) -> str:
        if self.pending:
            return "Analyzing design…"
        if self.error is not None:
            return f"AI Error: {escape(self.error)}"
        return render_advice_html(self.content or "No response")
