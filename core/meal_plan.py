"""
core/meal_plan.py
────────────────────────────────────────────────────────────────────────
Offline 7-day plan generator.

Responsibilities
----------------
1.   `build_slot_pool()` – catalogue slot → diet filter → allergy filter →
     goal bias (duplicate favoured entries to raise their odds).
2.   `pick_meal()` – drop names already used, rank by distance to the slot's
     calorie target, choose at random among the three closest.
3.   `generate_diet_plan()` – Monday…Sunday × five fixed slots, with a
     per-day "used" set seeded from a week-wide one.

A day repeats a meal only when a filtered slot pool has nothing else left:
once every candidate is used, `pick_meal()` falls back to the whole pool
(e.g. an allergy list that leaves one snack puts it in both snack slots).
An empty pool is the only case that drops a slot.

Selection is random on purpose. Pass a seeded `random.Random` as `rng`
to make a run reproducible.
"""

from __future__ import annotations

import json
import logging
import random
from typing import Iterable, Sequence

import numpy as np

from core import knowledge_base as kb
from core.knowledge_base import KBMeal
from core.models.diet_plan import DietDay, DietMeal, DietPlanData
from core.models.profile import DietProfile
from core.nutrition_calc import NutritionalCalculator

_LOG = logging.getLogger(__name__)

DAY_SLOTS: tuple[str, ...] = (
    kb.BREAKFAST,
    kb.MID_MORNING_SNACK,
    kb.LUNCH,
    kb.EVENING_SNACK,
    kb.DINNER,
)

DAY_NAMES: tuple[str, ...] = (
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
)

SLOT_CALORIE_SHARE: dict[str, float] = {
    kb.BREAKFAST: 0.25,
    kb.MID_MORNING_SNACK: 0.10,
    kb.LUNCH: 0.30,
    kb.EVENING_SNACK: 0.10,
    kb.DINNER: 0.25,
}

TOP_K = 3
MIN_BIAS_GROUP = 3   # only bias the pool when there is real choice

_calc = NutritionalCalculator()


# ──────────────────────────────── pools ─────────────────────────────────
def _goal_bias(pool: list[KBMeal], goal: str | None) -> list[KBMeal]:
    g = (goal or "").lower()
    biased = list(pool)

    def _boost(tags: tuple[str, ...]) -> None:
        nonlocal biased
        favoured = [m for m in pool if m.has_tag(*tags)]
        if len(favoured) >= MIN_BIAS_GROUP:
            biased = biased + favoured

    if "gain" in g or "muscle" in g:
        _boost(("high_protein",))
    if "keto" in g:
        _boost(("keto", "low_carb"))
    if "lose" in g:
        _boost(("low_carb", "high_protein"))
    return biased


def build_slot_pool(
    slot: str,
    diet_type: str | None,
    allergies: str | None,
    goal: str | None,
) -> list[KBMeal]:
    pool = kb.meals_by_slot(slot)
    pool = kb.filter_by_diet(pool, diet_type)
    pool = kb.filter_by_allergies(pool, allergies)
    return _goal_bias(pool, goal)


# ─────────────────────────────── selection ──────────────────────────────
def pick_meal(
    pool: Sequence[KBMeal],
    target_cal: float,
    used: Iterable[str],
    rng: random.Random | None = None,
    fallback_used: Iterable[str] = (),
) -> KBMeal | None:
    """
    Randomised top-3 pick.

    `used` names are skipped first. If that leaves nothing, only the
    `fallback_used` names are skipped, and if that is empty too the whole
    pool is allowed again, which can repeat a meal already picked today.
    Returns None only for an empty pool.
    """
    if not pool:
        return None
    rng = rng or random.Random()

    used = set(used)
    candidates = [m for m in pool if m.name not in used]
    if not candidates:
        fallback = set(fallback_used)
        candidates = [m for m in pool if m.name not in fallback] or list(pool)

    # shuffle first so ties in calorie distance are broken at random
    rng.shuffle(candidates)
    distance = np.abs(np.array([m.cal for m in candidates], dtype=float) - target_cal)
    order = np.argsort(distance, kind="stable")

    top = [candidates[i] for i in order[:TOP_K]]
    return rng.choice(top)


def to_diet_meal(meal: KBMeal, slot: str) -> DietMeal:
    return DietMeal(
        emoji=meal.emoji,
        name=meal.name,
        time=kb.SLOT_TIMES[slot],
        cal=meal.cal,
        protein_g=meal.protein_g,
        carbs_g=meal.carbs_g,
        fat_g=meal.fat_g,
        portion=meal.portion,
    )


# ─────────────────────────────── assembly ───────────────────────────────
def generate_diet_plan(
    profile: DietProfile | None,
    rng: random.Random | None = None,
) -> DietPlanData:
    p = profile or DietProfile()
    rng = rng or random.Random()

    targets = _calc.targets(p)
    daily_cal = targets.daily_calories

    slot_pools = {
        slot: build_slot_pool(slot, p.diet_type, p.allergies, p.goal)
        for slot in DAY_SLOTS
    }
    for slot, pool in slot_pools.items():
        if not pool:
            _LOG.warning("slot %s has no candidates after filtering (diet=%r, allergies=%r)",
                         slot, p.diet_type, p.allergies)

    global_used: set[str] = set()
    days: list[DietDay] = []

    for day_name in DAY_NAMES:
        day_used = set(global_used)
        picked_today: set[str] = set()
        meals: list[DietMeal] = []

        for slot in DAY_SLOTS:
            target_cal = round(daily_cal * SLOT_CALORIE_SHARE[slot])
            meal = pick_meal(slot_pools[slot], target_cal, day_used, rng, picked_today)
            if meal is None:
                continue
            meals.append(to_diet_meal(meal, slot))
            day_used.add(meal.name)
            global_used.add(meal.name)
            picked_today.add(meal.name)

        days.append(DietDay(day=day_name, meals=meals))

    plan = DietPlanData(
        is_personalized=_calc.is_personalized(p),
        daily_calories=daily_cal,
        daily_protein_g=targets.protein_g,
        daily_carbs_g=targets.carbs_g,
        daily_fat_g=targets.fat_g,
        days=days,
    )
    if not plan.is_complete:
        _LOG.warning("partial plan – short days: %s", ", ".join(plan.short_days()))
    return plan


def generate_diet_plan_json(
    profile: DietProfile | None,
    rng: random.Random | None = None,
) -> str:
    """Minified JSON, ready to follow the `DIET_PLAN:` marker."""
    plan = generate_diet_plan(profile, rng)
    return json.dumps(
        plan.model_dump(mode="json"), separators=(",", ":"), ensure_ascii=False
    )


def user_targets(profile: DietProfile | None) -> dict[str, int]:
    """Display helper: calories + macro grams for a profile."""
    t = _calc.targets(profile)
    return {
        "dailyCalories": t.daily_calories,
        "protein_g": t.protein_g,
        "carbs_g": t.carbs_g,
        "fat_g": t.fat_g,
    }
