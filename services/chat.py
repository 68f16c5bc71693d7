"""
services/chat.py
────────────────────────────────────────────────────────────────────────
One chat turn: build the prompt, call the model, parse the reply.

The model call is injected (`generate=`) so tests and scripts can swap in
a canned reply; by default it is `services.gemini.generate`.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, Sequence

from pydantic import ValidationError

from config import settings
from core import prompt_builder as pb
from core.models.diet_plan import ParsedBotResponse
from core.models.profile import DietProfile
from core.response_parser import find_balanced_block, parse_response
from services import gemini

_LOG = logging.getLogger(__name__)

Generate = Callable[..., str]
_PROFILE_FIELDS = (
    "name", "age", "weight_kg", "height_cm", "goal", "diet_type", "allergies", "occupation",
)


class ChatService:
    def __init__(self, generate: Generate | None = None) -> None:
        self._generate = generate or gemini.generate

    # ────────────────────────────── chat turn ───────────────────────────── #
    def send_message(
        self,
        message: str,
        profile: DietProfile | None = None,
        history: Sequence[Mapping[str, str]] = (),
        memories: Iterable[str] = (),
        plan_already_shown: bool = False,
        now: datetime | None = None,
    ) -> ParsedBotResponse:
        asked = pb.wants_diet_plan(message)
        suppress_plan = plan_already_shown and not asked

        system = pb.build_system_prompt(profile, memories, now, plan_already_shown=suppress_plan)
        if asked:
            system += "\n\n" + pb.plan_reminder()

        recent = list(history)[-settings.history_window:]
        raw = self._generate(
            message,
            system=system,
            history=recent,
            temperature=settings.chat_temperature,
            max_output_tokens=settings.plan_max_tokens if asked else settings.chat_max_tokens,
        )

        parsed = parse_response(raw)
        if suppress_plan and parsed.diet_plan is not None:
            _LOG.info("dropping unrequested diet plan (one was already shown)")
            parsed = ParsedBotResponse(bubbles=parsed.bubbles)
        return parsed

    # ─────────────────────────── profile facts ──────────────────────────── #
    def extract_profile(self, message: str) -> DietProfile:
        """Pull profile fields the user mentioned. Fields that fail validation are dropped."""
        raw = self._generate(
            pb.profile_extraction_prompt(message), temperature=0.1, max_output_tokens=200
        )
        data = _json_object(raw)
        fields = {k: v for k, v in data.items() if k in _PROFILE_FIELDS and v not in (None, "")}
        try:
            return DietProfile(**fields)
        except ValidationError as e:
            bad = {err["loc"][0] for err in e.errors() if err["loc"]}
            _LOG.warning("dropping unusable profile fields: %s", sorted(map(str, bad)))
        kept = {k: v for k, v in fields.items() if k not in bad}
        try:
            return DietProfile(**kept)
        except ValidationError:
            return DietProfile()

    # ─────────────────────────────── welcome ────────────────────────────── #
    def welcome(
        self,
        profile: DietProfile | None = None,
        memories: Iterable[str] = (),
        now: datetime | None = None,
    ) -> List[str]:
        system = pb.build_system_prompt(profile, memories, now)
        raw = self._generate(
            pb.welcome_prompt(profile.name if profile else None, now),
            system=system,
            temperature=0.8,
            max_output_tokens=200,
        )
        return parse_response(raw).bubbles


def _json_object(raw: str) -> Dict[str, Any]:
    span = find_balanced_block(raw or "")
    if span is None:
        return {}
    try:
        data = json.loads(raw[span[0]:span[1]])
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
