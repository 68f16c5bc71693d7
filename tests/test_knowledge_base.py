"""
Catalogue integrity + diet / allergy filters.
"""
import pytest

from core import knowledge_base as kb

ALL_SLOTS = (kb.BREAKFAST, kb.MID_MORNING_SNACK, kb.LUNCH, kb.EVENING_SNACK, kb.DINNER)


def test_catalogue_is_immutable_tuples():
    for slot in ALL_SLOTS:
        assert isinstance(kb.meals_by_slot(slot), tuple)
    with pytest.raises(Exception):
        kb.BREAKFAST_MEALS[0].cal = 1   # frozen dataclass


def test_snack_slots_share_one_pool():
    assert kb.meals_by_slot(kb.MID_MORNING_SNACK) is kb.meals_by_slot(kb.EVENING_SNACK)


def test_unknown_slot_raises():
    with pytest.raises(KeyError):
        kb.meals_by_slot("brunch")


@pytest.mark.parametrize("slot", ALL_SLOTS)
def test_entries_are_tagged_for_their_slot(slot):
    for meal in kb.meals_by_slot(slot):
        assert slot in meal.slots
        assert meal.tags <= set(kb.DIET_TAGS)
        assert meal.cal > 0 and min(meal.protein_g, meal.carbs_g, meal.fat_g) >= 0


def test_names_unique_within_slot():
    for slot in ALL_SLOTS:
        names = [m.name for m in kb.meals_by_slot(slot)]
        assert len(names) == len(set(names))


# ── diet filter ──────────────────────────────────────────────────────
@pytest.mark.parametrize("diet", [None, "", "no_preference", "No Preference", "non_veg", "non veg", "paleo"])
def test_unrecognised_diets_leave_pool_untouched(diet):
    assert kb.filter_by_diet(kb.LUNCH_MEALS, diet) == list(kb.LUNCH_MEALS)


def test_vegan_keeps_only_vegan_tagged():
    vegan = kb.filter_by_diet(kb.BREAKFAST_MEALS, "vegan")
    assert vegan
    assert all(m.has_tag("vegan") for m in vegan)
    # dairy is veg but not vegan
    assert "Paneer Paratha" not in {m.name for m in vegan}


@pytest.mark.parametrize("diet", ["veg", "Veg", "vegetarian"])
def test_veg_keeps_veg_tagged(diet):
    veg = kb.filter_by_diet(kb.DINNER_MEALS, diet)
    assert veg and all(m.has_tag("veg") for m in veg)
    assert not any(m.has_tag("non_veg") for m in veg)


def test_keto_keeps_keto_tagged():
    keto = kb.filter_by_diet(kb.SNACK_MEALS, "keto")
    assert {m.name for m in keto} == {
        "Mixed Nuts (Almonds, Walnuts)",
        "Boiled Egg (2)",
        "Paneer Cubes (Grilled)",
        "Cheese Cubes + Cucumber",
    }


# ── allergy filter ───────────────────────────────────────────────────
def test_allergies_match_name_substrings_case_insensitive():
    kept = kb.filter_by_allergies(kb.BREAKFAST_MEALS, "Paneer, EGG")
    names = [m.name.lower() for m in kept]
    assert names
    assert not any("paneer" in n or "egg" in n for n in names)


def test_empty_allergy_terms_are_ignored():
    # a trailing comma must not wipe the whole pool
    assert kb.filter_by_allergies(kb.LUNCH_MEALS, "peanut, ") == list(kb.LUNCH_MEALS)
    assert kb.filter_by_allergies(kb.LUNCH_MEALS, None) == list(kb.LUNCH_MEALS)


def test_ingredient_allergens_not_in_name_are_not_caught():
    # "Poha with Peanuts" is caught, "Apple + Peanut Butter" too, but Trail Mix is not
    kept = {m.name for m in kb.filter_by_allergies(kb.SNACK_MEALS, "peanut")}
    assert "Apple + Peanut Butter" not in kept
    assert "Trail Mix" in kept


# ── tabular view ─────────────────────────────────────────────────────
def test_catalogue_frame_columns_and_filters():
    df = kb.catalogue_frame(kb.LUNCH, diet_type="vegan", allergies="rice")
    assert list(df.columns) == [
        "name", "emoji", "cal", "protein_g", "carbs_g", "fat_g", "portion", "slots", "tags",
    ]
    assert len(df) > 0
    assert df["tags"].str.contains("vegan").all()
    assert not df["name"].str.lower().str.contains("rice").any()


def test_catalogue_frame_whole_catalogue():
    assert len(kb.catalogue_frame()) == len(kb.ALL_MEALS)
