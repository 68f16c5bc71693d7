from __future__ import annotations
from typing import List, Literal

from pydantic import BaseModel, Field

from core.models.profile import DietProfile


class ChatTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ParseRequest(BaseModel):
    raw: str = ""


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1)
    profile: DietProfile | None = None
    history: List[ChatTurn] = []
    memories: List[str] = []
    plan_already_shown: bool = False


class ProfileExtractRequest(BaseModel):
    message: str = Field(..., min_length=1)


class WelcomeRequest(BaseModel):
    profile: DietProfile | None = None
    memories: List[str] = []


class WelcomeOut(BaseModel):
    bubbles: List[str]
