from __future__ import annotations

from pydantic import BaseModel, Field

from core.models.profile import DietProfile


class PlanRequest(BaseModel):
    profile: DietProfile = Field(default_factory=DietProfile)
    seed: int | None = Field(None, description="fix the random picks for a reproducible plan")


class TargetsOut(BaseModel):
    is_personalized: bool
    daily_calories: int
    protein_g: int
    carbs_g: int
    fat_g: int


class CatalogueRow(BaseModel):
    name: str
    emoji: str
    cal: int
    protein_g: int
    carbs_g: int
    fat_g: int
    portion: str
    slots: str
    tags: str
