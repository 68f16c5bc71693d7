# api/v1/chat.py
from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException

from core.models.diet_plan import ParsedBotResponse
from core.models.profile import DietProfile
from core.response_parser import parse_response
from services.chat import ChatService
from services.gemini import LLMCallFailed, LLMUnavailable
from api.v1.schemas import (
    ChatRequest,
    ParseRequest,
    ProfileExtractRequest,
    WelcomeOut,
    WelcomeRequest,
)

_LOG = logging.getLogger(__name__)
router = APIRouter()


@lru_cache
def get_chat_service() -> ChatService:
    return ChatService()


_UPSTREAM_ERRORS = (LLMUnavailable, LLMCallFailed)


def _upstream_error(exc: Exception) -> HTTPException:
    if isinstance(exc, LLMUnavailable):
        return HTTPException(status_code=503, detail=str(exc))
    _LOG.error("chat model call failed: %s", exc)
    return HTTPException(status_code=502, detail="Chat model call failed")


# ───────────────────────── parse only ───────────────────────
@router.post("/parse", response_model=ParsedBotResponse, response_model_exclude_none=True)
def parse_reply(body: ParseRequest) -> ParsedBotResponse:
    return parse_response(body.raw)


# ───────────────────────── full turn ────────────────────────
@router.post("/messages", response_model=ParsedBotResponse, response_model_exclude_none=True)
def send_message(
    body: ChatRequest,
    chat: ChatService = Depends(get_chat_service),
) -> ParsedBotResponse:
    try:
        return chat.send_message(
            body.message,
            profile=body.profile,
            history=[t.model_dump() for t in body.history],
            memories=body.memories,
            plan_already_shown=body.plan_already_shown,
        )
    except _UPSTREAM_ERRORS as exc:
        raise _upstream_error(exc) from exc


@router.post("/profile", response_model=DietProfile, response_model_exclude_none=True)
def extract_profile(
    body: ProfileExtractRequest,
    chat: ChatService = Depends(get_chat_service),
) -> DietProfile:
    try:
        return chat.extract_profile(body.message)
    except _UPSTREAM_ERRORS as exc:
        raise _upstream_error(exc) from exc


@router.post("/welcome", response_model=WelcomeOut)
def welcome(
    body: WelcomeRequest,
    chat: ChatService = Depends(get_chat_service),
) -> WelcomeOut:
    try:
        return WelcomeOut(bubbles=chat.welcome(body.profile, body.memories))
    except _UPSTREAM_ERRORS as exc:
        raise _upstream_error(exc) from exc
