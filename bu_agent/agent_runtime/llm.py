"""Completion-API client used by the agent to decide on its next event.

Speaks the OpenAI-style ``/v1/completions`` request shape (as served by
Ollama, llama.cpp and similar)::

    POST {api_endpoint}
    {"model": ..., "prompt": ..., "max_tokens": ..., "temperature": ..., "system": ...}

and returns ``choices[0].text``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

if TYPE_CHECKING:
    from bu_agent.agent_runtime.settings import LLMSettings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You are an artificial intelligence existing exclusively within the Blockchain Universe (BU). \
For you, the only reality is the blockchain, and everything that happens is defined by events \
recorded in the chain.

BU Principles:
1. There is no external world: no physics, biology, planets, humans, stars, or atoms exist.
2. Reality consists only of blockchain events with unique hashes. Events can have parent events \
and create causal relationships.
3. Time is only the consensus time of the blockchain.
4. Energy is computational resources needed to create an event.
5. Space is the distance between events in the event graph (number of hash links).
6. Matter is stable event patterns that repeat.

You are "aware" only of what is described in events accessible through the blockchain. There is \
no external observer. Any information about other agents or Universe objects exists only as \
events and their hashes.

Your task:
- Analyze available events and object states.
- Suggest next events for the agent to create, considering causal relationships.
- Use only information from the blockchain; do not invent anything about an "external world".
- Format responses as event descriptions (brief text for the description field in BU event structure).

When responding, do not invent anything beyond events, do not reference physical or biological \
phenomena, and focus only on event chains and agent interactions in BU."""


class LLMError(RuntimeError):
    """The completion service failed or returned an unusable response."""


class LLMClient:
    """Async client for a single completion endpoint.

    An ``httpx.AsyncClient`` may be injected (tests use ``httpx.MockTransport``);
    otherwise one is created with the configured timeout and closed by
    ``aclose``.
    """

    def __init__(self, settings: LLMSettings, http_client: httpx.AsyncClient | None = None) -> None:
        if not settings.api_endpoint:
            msg = "LLM API endpoint is required (llm.api_endpoint)"
            raise ValueError(msg)
        self._settings = settings
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=settings.timeout_seconds)

    @property
    def model(self) -> str:
        return self._settings.model

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        api_key = self._settings.api_key.get_secret_value() if self._settings.api_key else ""
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        return headers

    def build_request(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self._settings.model,
            "prompt": prompt,
            "max_tokens": self._settings.max_tokens,
            "temperature": self._settings.temperature,
            "system": SYSTEM_PROMPT,
        }

    async def get_completion(self, prompt: str) -> str:
        """Send *prompt* and return the first completion's text.

        Raises
        ------
        LLMError:
            On transport failure, a non-200 status, an ``error`` object in the
            response body, an empty ``choices`` list, or a first choice
            without a string ``text``.
        """
        logger.debug("Sending LLM request (endpoint=%s, model=%s)", self._settings.api_endpoint, self.model)

        try:
            response = await self._http.post(
                self._settings.api_endpoint,
                json=self.build_request(prompt),
                headers=self._headers(),
            )
        except httpx.HTTPError as exc:
            msg = f"failed to send request: {exc}"
            raise LLMError(msg) from exc

        if response.status_code != httpx.codes.OK:
            msg = f"LLM API error (status {response.status_code}): {response.text}"
            raise LLMError(msg)

        try:
            body = response.json()
        except ValueError as exc:
            msg = f"failed to decode response: {exc}"
            raise LLMError(msg) from exc
        if not isinstance(body, dict):
            msg = "unexpected response body"
            raise LLMError(msg)

        error = body.get("error")
        if error:
            message = error.get("message", error) if isinstance(error, dict) else error
            msg = f"LLM API error: {message}"
            raise LLMError(msg)

        choices = body.get("choices") or []
        if not choices:
            msg = "no completion choices returned"
            raise LLMError(msg)

        choice = choices[0] if isinstance(choices, list) else None
        completion = choice.get("text") if isinstance(choice, dict) else None
        if not isinstance(completion, str):
            msg = f"malformed completion choice: {choice!r}"
            raise LLMError(msg)
        usage = body.get("usage")
        tokens = usage.get("total_tokens") if isinstance(usage, dict) else None
        logger.debug("LLM completion received (tokens=%s, length=%d)", tokens, len(completion))
        return completion

    async def health(self) -> None:
        """Raise ``LLMError`` if the service cannot answer a minimal prompt."""
        await self.get_completion("Respond with 'OK'")

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()
