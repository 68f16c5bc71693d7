# api/v1/plans.py
from __future__ import annotations

import random

from fastapi import APIRouter, status

from core.meal_plan import generate_diet_plan
from core.models.diet_plan import DietPlanData
from core.models.profile import DietProfile
from core.nutrition_calc import NutritionalCalculator
from api.v1.schemas import PlanRequest, TargetsOut

router = APIRouter()
_calc = NutritionalCalculator()


# ───────────────────────── generate ─────────────────────────
@router.post("", response_model=DietPlanData, status_code=status.HTTP_200_OK)
async def create_plan(body: PlanRequest) -> DietPlanData:
    rng = random.Random(body.seed) if body.seed is not None else None
    return generate_diet_plan(body.profile, rng)


# ───────────────────────── targets ──────────────────────────
@router.post("/targets", response_model=TargetsOut)
async def plan_targets(profile: DietProfile) -> TargetsOut:
    t = _calc.targets(profile)
    return TargetsOut(is_personalized=_calc.is_personalized(profile), **t.as_dict())
