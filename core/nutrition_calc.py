"""
core/nutrition_calc.py
────────────────────────────────────────────────────────────────────────
Daily calorie + macro targets for a `DietProfile`.

1. BMR  (Mifflin–St Jeor, male constant)
2. TDEE (fixed moderate-activity multiplier 1.55)
3. Goal adjustment  lose −500 · gain/muscle +400 · otherwise unchanged
4. Macro grams from a goal-dependent P/C/F split

Missing weight, height or age never raises – the 2 000 kcal baseline is
used instead. Each macro is rounded on its own, so 4·P + 4·C + 9·F will
not always add back up to the calorie figure exactly.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass

from core.models.profile import DietProfile

Logger = logging.getLogger(__name__)

DEFAULT_CALORIES = 2000
ACTIVITY_MULTIPLIER = 1.55
LOSE_DELTA = -500
GAIN_DELTA = 400

KCAL_PER_G_PROTEIN = 4
KCAL_PER_G_CARBS = 4
KCAL_PER_G_FAT = 9

# goal keyword → (protein, carbs, fat) share of calories
_SPLITS: tuple[tuple[tuple[str, ...], tuple[float, float, float]], ...] = (
    (("lose",), (0.35, 0.35, 0.30)),
    (("gain", "muscle"), (0.35, 0.45, 0.20)),
    (("keto",), (0.30, 0.10, 0.60)),
)
_DEFAULT_SPLIT = (0.30, 0.40, 0.30)


@dataclass(frozen=True)
class MacroTargets:
    daily_calories: int
    protein_g: int
    carbs_g: int
    fat_g: int

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


def _goal(goal: str | None) -> str:
    return (goal or "").lower()


# ──────────────────────────────────────────────────────────────────────
#  Calculator
# ──────────────────────────────────────────────────────────────────────
class NutritionalCalculator:
    """Source-of-truth for kcal + macros, shared by the generator and prompts."""

    # --------------- BMR / TDEE -------------------------------------
    def bmr(self, weight_kg: float, height_cm: float, age: float) -> float:
        return 10 * weight_kg + 6.25 * height_cm - 5 * age + 5

    def tdee(self, weight_kg: float, height_cm: float, age: float) -> float:
        return self.bmr(weight_kg, height_cm, age) * ACTIVITY_MULTIPLIER

    # --------------- Calories ---------------------------------------
    def daily_calories(self, p: DietProfile | None) -> int:
        if p is None or not p.has_body_stats:
            return DEFAULT_CALORIES

        tdee_val = self.tdee(p.weight_kg, p.height_cm, p.age)
        g = _goal(p.goal)
        if "lose" in g:
            kcal = tdee_val + LOSE_DELTA
        elif "gain" in g or "muscle" in g:
            kcal = tdee_val + GAIN_DELTA
        else:
            kcal = tdee_val

        if kcal < 0:
            Logger.warning("negative calorie estimate (%.0f) – clamping to 0", kcal)
        return max(round(kcal), 0)

    # --------------- Macros -----------------------------------------
    def macro_split(self, goal: str | None) -> tuple[float, float, float]:
        """Later matches win, so "keto weight loss" gets the keto split."""
        g = _goal(goal)
        split = _DEFAULT_SPLIT
        for keys, ratios in _SPLITS:
            if any(k in g for k in keys):
                split = ratios
        return split

    def macro_targets(self, calories: int, goal: str | None) -> MacroTargets:
        p_pc, c_pc, f_pc = self.macro_split(goal)
        kcal = max(calories, 0)
        return MacroTargets(
            daily_calories=kcal,
            protein_g=round(kcal * p_pc / KCAL_PER_G_PROTEIN),
            carbs_g=round(kcal * c_pc / KCAL_PER_G_CARBS),
            fat_g=round(kcal * f_pc / KCAL_PER_G_FAT),
        )

    # --------------- public entrypoint ------------------------------
    def targets(self, p: DietProfile | None) -> MacroTargets:
        kcal = self.daily_calories(p)
        return self.macro_targets(kcal, p.goal if p else None)

    @staticmethod
    def is_personalized(p: DietProfile | None) -> bool:
        return bool(p and p.has_body_stats)
