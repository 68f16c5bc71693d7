from __future__ import annotations

import math
import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

MEALS_PER_DAY = 5
DAYS_PER_PLAN = 7

_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")


def _non_negative_int(v) -> int | None:
    """
    Best-effort whole number from what the model wrote: 12.5, "420",
    "320 kcal", "~1,800". Anything without a usable number gives None.
    """
    if isinstance(v, bool):
        return None
    if isinstance(v, str):
        m = _NUMBER_RE.search(v.replace(",", ""))
        if m is None:
            return None
        v = float(m.group())
    if isinstance(v, float):
        if not math.isfinite(v):
            return None
        v = round(v)
    if isinstance(v, int):
        return max(v, 0)
    return None


def _text(v):
    # portions like 1 or 2.5 arrive as numbers
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return v


class DietMeal(BaseModel):
    emoji: str = ""
    name: str
    time: str = ""
    cal: int = 0
    protein_g: int | None = None
    carbs_g: int | None = None
    fat_g: int | None = None
    portion: str | None = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("cal", mode="before")
    @classmethod
    def coerce_cal(cls, v):
        n = _non_negative_int(v)
        return 0 if n is None else n

    @field_validator("protein_g", "carbs_g", "fat_g", mode="before")
    @classmethod
    def coerce_grams(cls, v):
        return _non_negative_int(v)

    @field_validator("name", "portion", mode="before")
    @classmethod
    def coerce_text(cls, v):
        return _text(v)

    @field_validator("emoji", "time", mode="before")
    @classmethod
    def coerce_label(cls, v):
        return "" if v is None else _text(v)


class DietDay(BaseModel):
    day: str
    meals: list[DietMeal] = []

    model_config = ConfigDict(extra="ignore")

    @field_validator("day", mode="before")
    @classmethod
    def coerce_day(cls, v):
        return _text(v)


class DietPlanData(BaseModel):
    type: Literal["DIET_PLAN"] = "DIET_PLAN"
    is_personalized: bool = False
    daily_calories: int
    daily_protein_g: int | None = None
    daily_carbs_g: int | None = None
    daily_fat_g: int | None = None
    days: list[DietDay] = []

    model_config = ConfigDict(extra="ignore")

    @field_validator("daily_calories", mode="before")
    @classmethod
    def coerce_calories(cls, v):
        n = _non_negative_int(v)
        return 0 if n is None else n

    @field_validator("daily_protein_g", "daily_carbs_g", "daily_fat_g", mode="before")
    @classmethod
    def coerce_totals(cls, v):
        return _non_negative_int(v)

    # ---- read-only helpers (never serialised) ----------------------
    def short_days(self) -> list[str]:
        """Labels of days that came out with fewer than five meals."""
        return [d.day for d in self.days if len(d.meals) < MEALS_PER_DAY]

    @property
    def is_complete(self) -> bool:
        return len(self.days) == DAYS_PER_PLAN and not self.short_days()


class ParsedBotResponse(BaseModel):
    bubbles: list[str] = Field(default_factory=list)
    diet_plan: DietPlanData | None = Field(None, serialization_alias="dietPlan")

    model_config = ConfigDict(populate_by_name=True)
