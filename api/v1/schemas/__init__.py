"""Re-export individual schema modules for easy imports."""

from .plan import PlanRequest, TargetsOut, CatalogueRow
from .chat import ChatTurn, ParseRequest, ChatRequest, ProfileExtractRequest, WelcomeRequest, WelcomeOut

__all__ = [
    "PlanRequest",
    "TargetsOut",
    "CatalogueRow",
    "ChatTurn",
    "ParseRequest",
    "ChatRequest",
    "ProfileExtractRequest",
    "WelcomeRequest",
    "WelcomeOut",
]
