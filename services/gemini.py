# services/gemini.py
import logging
from typing import Mapping, Sequence

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from config import settings

_LOG = logging.getLogger(__name__)


class LLMUnavailable(RuntimeError):
    """No API key configured – the conversational path is switched off."""


class LLMCallFailed(RuntimeError):
    """The request reached Gemini (or tried to) and came back with an error."""


# ───────────── Client (lazy) ─────────────
_client: genai.Client | None = None


def _get_client() -> genai.Client:
    global _client
    if _client is None:
        if not settings.gemini_api_key:
            raise LLMUnavailable("GEMINI_API_KEY not set in environment")
        _client = genai.Client(api_key=settings.gemini_api_key)
    return _client


def _contents(history: Sequence[Mapping[str, str]], prompt: str) -> list[types.Content]:
    # Gemini calls the assistant side "model"
    out = []
    for turn in history:
        role = "model" if turn.get("role") == "assistant" else "user"
        out.append(types.Content(role=role, parts=[types.Part.from_text(text=turn.get("content", ""))]))
    out.append(types.Content(role="user", parts=[types.Part.from_text(text=prompt)]))
    return out


# ───────────── Generation (sync) ─────────────
def generate(
    prompt: str,
    system: str | None = None,
    history: Sequence[Mapping[str, str]] = (),
    temperature: float | None = None,
    max_output_tokens: int | None = None,
) -> str:
    """Run a chat completion and return the LLM’s text response."""
    client = _get_client()
    try:
        resp = client.models.generate_content(
            model=settings.gemini_model,
            contents=_contents(history, prompt),
            config=types.GenerateContentConfig(
                system_instruction=system,
                temperature=settings.chat_temperature if temperature is None else temperature,
                max_output_tokens=max_output_tokens or settings.chat_max_tokens,
            ),
        )
    except (genai_errors.APIError, httpx.HTTPError) as e:
        _LOG.error("Gemini generation failed: %s", e)
        raise LLMCallFailed(str(e)) from e
    return (resp.text or "").strip()
