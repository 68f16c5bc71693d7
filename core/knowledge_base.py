"""
core/knowledge_base.py
────────────────────────────────────────────────────────────────────────
Static Indian + global meal catalogue used by the offline plan generator.

* `KBMeal`              – one catalogue entry, macros per standard serving
* `meals_by_slot()`     – slot → immutable pool (snacks serve both snack slots)
* `filter_by_diet()`    – positive-match diet filter (veg / vegan / keto)
* `filter_by_allergies()` – name-substring allergy exclusion
* `catalogue_frame()`   – pandas view for listing / export

The catalogue is built once at import time and never mutated afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Sequence

import pandas as pd

_LOG = logging.getLogger(__name__)

# ──────────────────────────────────────────────────────────────────────
#  Slots
# ──────────────────────────────────────────────────────────────────────
BREAKFAST = "breakfast"
MID_MORNING_SNACK = "mid_morning_snack"
LUNCH = "lunch"
EVENING_SNACK = "evening_snack"
DINNER = "dinner"

SNACK_SLOTS = (MID_MORNING_SNACK, EVENING_SNACK)

SLOT_TIMES: dict[str, str] = {
    BREAKFAST: "8:00 AM",
    MID_MORNING_SNACK: "10:30 AM",
    LUNCH: "1:00 PM",
    EVENING_SNACK: "4:30 PM",
    DINNER: "7:30 PM",
}

DIET_TAGS = ("veg", "vegan", "non_veg", "keto", "high_protein", "low_carb")


@dataclass(frozen=True)
class KBMeal:
    name: str
    emoji: str
    cal: int
    protein_g: int
    carbs_g: int
    fat_g: int
    portion: str
    slots: tuple[str, ...]
    tags: frozenset[str] = field(default_factory=frozenset)

    def has_tag(self, *tags: str) -> bool:
        """True when the meal carries *any* of `tags`."""
        return any(t in self.tags for t in tags)


def _meal(name, emoji, cal, p, c, f, portion, slots, *tags) -> KBMeal:
    return KBMeal(name, emoji, cal, p, c, f, portion, tuple(slots), frozenset(tags))


_B = (BREAKFAST,)
_L = (LUNCH,)
_D = (DINNER,)
_S = SNACK_SLOTS

# ── Breakfast ─────────────────────────────────────────────────────────
BREAKFAST_MEALS: tuple[KBMeal, ...] = (
    _meal("Masala Oats", "🥣", 280, 10, 42, 8, "1 bowl (200g)", _B, "veg", "high_protein"),
    _meal("Poha with Peanuts", "🍚", 310, 8, 48, 10, "1 plate (200g)", _B, "veg", "vegan"),
    _meal("Idli Sambar (3 pcs)", "🥟", 290, 9, 50, 5, "3 idlis + sambar", _B, "veg", "vegan"),
    _meal("Moong Dal Chilla", "🫓", 250, 14, 32, 7, "2 chillas", _B, "veg", "high_protein", "vegan"),
    _meal("Egg Bhurji + Toast", "🍳", 340, 18, 28, 16, "2 eggs + 2 toast", _B, "non_veg", "high_protein"),
    _meal("Besan Chilla", "🫓", 220, 12, 26, 8, "2 chillas", _B, "veg", "high_protein", "vegan"),
    _meal("Upma", "🍚", 270, 7, 40, 9, "1 bowl (200g)", _B, "veg", "vegan"),
    _meal("Paneer Paratha", "🫓", 380, 16, 40, 16, "2 parathas", _B, "veg", "high_protein"),
    _meal("Oats Smoothie Bowl", "🥣", 320, 12, 48, 8, "1 bowl (250ml)", _B, "veg"),
    _meal("Dosa + Chutney", "🫓", 260, 6, 42, 8, "2 dosas", _B, "veg", "vegan"),
    _meal("Greek Yogurt + Granola", "🥣", 300, 18, 36, 8, "200g yogurt + 40g granola", _B, "veg", "high_protein"),
    _meal("Aloo Paratha + Curd", "🫓", 370, 10, 48, 14, "2 parathas + curd", _B, "veg"),
    _meal("Boiled Eggs + Avocado Toast", "🥑", 350, 20, 22, 20, "2 eggs + 1 toast", _B, "non_veg", "keto", "high_protein"),
    _meal("Ragi Dosa", "🫓", 230, 7, 38, 6, "2 dosas", _B, "veg", "vegan"),
    _meal("Omelette + Multigrain Bread", "🍳", 320, 20, 24, 14, "2 egg omelette + 2 slices", _B, "non_veg", "high_protein"),
    _meal("Peanut Butter Toast + Banana", "🍞", 340, 12, 44, 14, "2 toast + 1 banana", _B, "veg", "vegan"),
    _meal("Sprouts Salad", "🥗", 200, 12, 28, 4, "1 bowl (150g)", _B, "veg", "vegan", "high_protein", "low_carb"),
    _meal("Pesarattu (Green Gram Dosa)", "🫓", 240, 12, 32, 6, "2 dosas", _B, "veg", "vegan", "high_protein"),
    _meal("Keto Paneer Scramble", "🧀", 300, 22, 6, 22, "150g paneer", _B, "veg", "keto", "high_protein", "low_carb"),
    _meal("Egg White Omelette + Veggies", "🍳", 180, 22, 8, 4, "4 egg whites + veggies", _B, "non_veg", "keto", "high_protein", "low_carb"),
)

# ── Lunch ─────────────────────────────────────────────────────────────
LUNCH_MEALS: tuple[KBMeal, ...] = (
    _meal("Dal + Roti + Sabzi", "🍛", 420, 16, 56, 12, "1 bowl dal + 2 roti + sabzi", _L, "veg", "vegan"),
    _meal("Chicken Curry + Rice", "🍛", 520, 32, 52, 16, "150g chicken + 1 cup rice", _L, "non_veg", "high_protein"),
    _meal("Rajma Chawal", "🍚", 440, 18, 64, 8, "1 bowl rajma + 1 cup rice", _L, "veg", "vegan", "high_protein"),
    _meal("Paneer Tikka + Salad", "🧀", 380, 24, 16, 24, "150g paneer + salad", _L, "veg", "high_protein", "low_carb"),
    _meal("Fish Curry + Rice", "🍛", 460, 30, 48, 12, "150g fish + 1 cup rice", _L, "non_veg", "high_protein"),
    _meal("Chole + 2 Roti", "🍛", 430, 16, 58, 12, "1 bowl chole + 2 roti", _L, "veg", "vegan"),
    _meal("Grilled Chicken Salad", "🥗", 350, 35, 14, 16, "200g chicken + salad", _L, "non_veg", "high_protein", "keto", "low_carb"),
    _meal("Palak Paneer + Roti", "🍛", 420, 20, 38, 18, "1 bowl + 2 roti", _L, "veg", "high_protein"),
    _meal("Brown Rice + Sambhar + Papad", "🍚", 400, 14, 62, 8, "1 cup rice + sambhar", _L, "veg", "vegan"),
    _meal("Egg Curry + Roti", "🍛", 400, 22, 36, 16, "2 egg curry + 2 roti", _L, "non_veg", "high_protein"),
    _meal("Quinoa Pulao + Raita", "🍚", 380, 14, 52, 10, "1 cup quinoa + raita", _L, "veg"),
    _meal("Tofu Stir Fry + Rice", "🍚", 390, 20, 48, 12, "150g tofu + 1 cup rice", _L, "veg", "vegan", "high_protein"),
    _meal("Dal Khichdi + Curd", "🍚", 380, 14, 56, 8, "1 bowl khichdi + curd", _L, "veg"),
    _meal("Chicken Biryani", "🍛", 550, 28, 60, 18, "1 plate (300g)", _L, "non_veg", "high_protein"),
    _meal("Kadhi + Rice", "🍚", 380, 10, 54, 12, "1 bowl kadhi + 1 cup rice", _L, "veg"),
    _meal("Keto Chicken Thighs + Greens", "🍗", 420, 34, 6, 28, "200g chicken + sauteed greens", _L, "non_veg", "keto", "high_protein", "low_carb"),
    _meal("Paneer Bhurji + Low Carb Roti", "🧀", 380, 26, 14, 24, "150g paneer + 1 roti", _L, "veg", "keto", "high_protein", "low_carb"),
)

# ── Dinner ────────────────────────────────────────────────────────────
DINNER_MEALS: tuple[KBMeal, ...] = (
    _meal("Grilled Paneer + Veggies", "🧀", 340, 22, 14, 22, "150g paneer + veggies", _D, "veg", "high_protein", "low_carb"),
    _meal("Dal Tadka + 1 Roti", "🍛", 320, 14, 42, 8, "1 bowl dal + 1 roti", _D, "veg", "vegan"),
    _meal("Chicken Tikka + Salad", "🍗", 380, 36, 10, 20, "200g tikka + salad", _D, "non_veg", "high_protein", "keto", "low_carb"),
    _meal("Vegetable Soup + Multigrain Toast", "🍜", 220, 8, 30, 6, "1 bowl soup + 2 toast", _D, "veg", "vegan"),
    _meal("Egg Fried Rice (Brown)", "🍚", 380, 16, 48, 12, "1 plate (250g)", _D, "non_veg"),
    _meal("Moong Dal Soup + Salad", "🍜", 200, 14, 26, 4, "1 bowl + salad", _D, "veg", "vegan", "high_protein", "low_carb"),
    _meal("Tandoori Roti + Mix Veg", "🍛", 300, 10, 42, 8, "2 roti + sabzi", _D, "veg", "vegan"),
    _meal("Grilled Fish + Steamed Veggies", "🐟", 320, 32, 12, 14, "200g fish + veggies", _D, "non_veg", "high_protein", "keto", "low_carb"),
    _meal("Palak Dal + Roti", "🍛", 340, 16, 40, 10, "1 bowl + 1 roti", _D, "veg", "vegan"),
    _meal("Chicken Soup + Bread", "🍜", 280, 22, 24, 10, "1 bowl soup + 1 bread", _D, "non_veg", "high_protein"),
    _meal("Mushroom Stir Fry + Quinoa", "🍄", 310, 14, 38, 10, "150g mushroom + 1/2 cup quinoa", _D, "veg", "vegan", "high_protein"),
    _meal("Paneer Tikka Wrap (Whole Wheat)", "🌯", 360, 20, 32, 16, "1 wrap", _D, "veg", "high_protein"),
    _meal("Keto Butter Chicken (no rice)", "🍗", 400, 30, 8, 28, "200g chicken in gravy", _D, "non_veg", "keto", "high_protein", "low_carb"),
    _meal("Cauliflower Rice + Egg Bhurji", "🍳", 280, 20, 10, 18, "1 bowl cauli rice + 2 eggs", _D, "non_veg", "keto", "high_protein", "low_carb"),
)

# ── Snacks (mid-morning + evening) ────────────────────────────────────
SNACK_MEALS: tuple[KBMeal, ...] = (
    _meal("Mixed Nuts (Almonds, Walnuts)", "🥜", 180, 6, 8, 14, "30g handful", _S, "veg", "vegan", "keto", "low_carb"),
    _meal("Fruit Bowl (Seasonal)", "🍓", 120, 2, 28, 1, "1 bowl (150g)", _S, "veg", "vegan"),
    _meal("Protein Shake (Whey)", "🥛", 200, 24, 12, 4, "1 scoop + milk", _S, "veg", "high_protein"),
    _meal("Roasted Chana", "🫘", 150, 8, 22, 3, "50g", _S, "veg", "vegan", "high_protein"),
    _meal("Buttermilk (Chaas)", "🥛", 60, 3, 6, 2, "1 glass (250ml)", _S, "veg"),
    _meal("Apple + Peanut Butter", "🍎", 220, 6, 26, 12, "1 apple + 1 tbsp PB", _S, "veg", "vegan"),
    _meal("Boiled Egg (2)", "🥚", 140, 12, 2, 10, "2 eggs", _S, "non_veg", "high_protein", "keto", "low_carb"),
    _meal("Makhana (Fox Nuts)", "🫘", 130, 4, 20, 4, "1 bowl (40g)", _S, "veg", "vegan"),
    _meal("Paneer Cubes (Grilled)", "🧀", 200, 16, 4, 14, "100g", _S, "veg", "high_protein", "keto", "low_carb"),
    _meal("Green Tea + Biscuits", "🍵", 100, 2, 16, 3, "1 cup + 2 biscuits", _S, "veg"),
    _meal("Banana + Honey", "🍌", 140, 2, 34, 1, "1 banana + 1 tsp honey", _S, "veg", "vegan"),
    _meal("Yogurt + Chia Seeds", "🥣", 160, 10, 14, 6, "150g yogurt + 1 tbsp chia", _S, "veg", "high_protein"),
    _meal("Sprout Chaat", "🥗", 160, 10, 22, 4, "1 bowl (100g)", _S, "veg", "vegan", "high_protein"),
    _meal("Dark Chocolate (2 squares)", "🍫", 110, 2, 10, 8, "20g", _S, "veg"),
    _meal("Cheese Cubes + Cucumber", "🧀", 150, 8, 4, 12, "30g cheese + cucumber", _S, "veg", "keto", "low_carb"),
    _meal("Trail Mix", "🥜", 190, 6, 16, 12, "35g", _S, "veg", "vegan"),
)

_BY_SLOT: dict[str, tuple[KBMeal, ...]] = {
    BREAKFAST: BREAKFAST_MEALS,
    MID_MORNING_SNACK: SNACK_MEALS,
    LUNCH: LUNCH_MEALS,
    EVENING_SNACK: SNACK_MEALS,
    DINNER: DINNER_MEALS,
}

ALL_MEALS: tuple[KBMeal, ...] = BREAKFAST_MEALS + LUNCH_MEALS + DINNER_MEALS + SNACK_MEALS


# ──────────────────────────────────────────────────────────────────────
#  Lookup + filters
# ──────────────────────────────────────────────────────────────────────
def meals_by_slot(slot: str) -> tuple[KBMeal, ...]:
    """Catalogue pool for one slot. Unknown slots raise `KeyError`."""
    return _BY_SLOT[slot]


def _normalise_diet(diet_type: str | None) -> str:
    return (diet_type or "").lower().replace("_", " ").strip()


def filter_by_diet(meals: Sequence[KBMeal], diet_type: str | None) -> list[KBMeal]:
    """
    Restrict `meals` toward a diet; never away from one.

    vegan → `vegan`-tagged, veg (but not "non veg") → `veg`-tagged,
    keto → `keto`-tagged. Anything else, including "non veg" and
    "no preference", returns the pool unchanged.
    """
    dt = _normalise_diet(diet_type)
    if not dt or dt == "no preference":
        return list(meals)

    if "vegan" in dt:
        return [m for m in meals if m.has_tag("vegan")]
    if "veg" in dt and "non" not in dt:
        return [m for m in meals if m.has_tag("veg")]
    if "keto" in dt:
        return [m for m in meals if m.has_tag("keto")]
    return list(meals)


def allergy_terms(allergies: str | None) -> list[str]:
    """Comma-separated allergy text → lower-case non-empty terms."""
    if not allergies:
        return []
    return [a.strip() for a in allergies.lower().split(",") if a.strip()]


def filter_by_allergies(meals: Sequence[KBMeal], allergies: str | None) -> list[KBMeal]:
    """Drop meals whose *name* contains any allergy term (case-insensitive)."""
    terms = allergy_terms(allergies)
    if not terms:
        return list(meals)
    return [m for m in meals if not any(t in m.name.lower() for t in terms)]


# ──────────────────────────────────────────────────────────────────────
#  Tabular view
# ──────────────────────────────────────────────────────────────────────
_FRAME_COLUMNS = [
    "name", "emoji", "cal", "protein_g", "carbs_g", "fat_g",
    "portion", "slots", "tags",
]


def _rows(meals: Iterable[KBMeal]) -> list[dict]:
    return [
        {
            "name": m.name,
            "emoji": m.emoji,
            "cal": m.cal,
            "protein_g": m.protein_g,
            "carbs_g": m.carbs_g,
            "fat_g": m.fat_g,
            "portion": m.portion,
            "slots": ", ".join(m.slots),
            "tags": ", ".join(sorted(m.tags)),
        }
        for m in meals
    ]


def catalogue_frame(
    slot: str | None = None,
    diet_type: str | None = None,
    allergies: str | None = None,
) -> pd.DataFrame:
    """
    Catalogue as a DataFrame, optionally narrowed to one slot and run
    through the same diet / allergy filters the generator uses.
    """
    meals: Sequence[KBMeal] = meals_by_slot(slot) if slot else ALL_MEALS
    meals = filter_by_allergies(filter_by_diet(meals, diet_type), allergies)
    df = pd.DataFrame(_rows(meals), columns=_FRAME_COLUMNS)
    _LOG.debug("catalogue_frame slot=%s diet=%s rows=%d", slot, diet_type, len(df))
    return df.reset_index(drop=True)
