from datetime import datetime

import pytest

from core import prompt_builder as pb
from core.models.profile import DietProfile
from core.nutrition_calc import NutritionalCalculator

calc = NutritionalCalculator()

PROFILE = DietProfile(
    name="Arjun", age=28, weight_kg=72, height_cm=178,
    goal="gain_muscle", diet_type="non_veg", allergies="peanut",
)
MORNING = datetime(2026, 1, 5, 9, 0)


def test_prompt_embeds_calculator_targets():
    t = calc.targets(PROFILE)
    prompt = pb.build_system_prompt(PROFILE, now=MORNING)
    assert f"Target daily calories: {t.daily_calories} kcal" in prompt
    assert f'"daily_calories":{t.daily_calories}' in prompt
    assert f'"daily_protein_g":{t.protein_g}' in prompt
    assert f"~{t.carbs_g}g carbs" in prompt
    assert '"is_personalized":true' in prompt


def test_prompt_profile_and_memories_block():
    prompt = pb.build_system_prompt(PROFILE, memories=["hates karela", ""], now=MORNING)
    assert "- Name: Arjun" in prompt
    assert "- Weight: 72 kg" in prompt
    assert "- Goal: gain muscle" in prompt
    assert "- Allergies: peanut" in prompt
    assert "Memories from past conversations:\n- hates karela" in prompt
    assert "Respect diet type: non veg" in prompt


def test_generic_prompt_without_profile():
    prompt = pb.build_system_prompt(None, now=MORNING)
    assert "What you know about the user" not in prompt
    assert "Memories" not in prompt
    assert "Target daily calories: 2000 kcal" in prompt
    assert '"is_personalized":false' in prompt
    assert "Respect diet type: no preference" in prompt


@pytest.mark.parametrize("hour, label", [(6, "morning"), (12, "afternoon"), (16, "afternoon"), (17, "evening"), (23, "evening")])
def test_time_of_day(hour, label):
    assert pb.time_of_day(datetime(2026, 1, 5, hour)) == label


def test_plan_already_shown_instruction():
    assert pb.PLAN_ALREADY_SHOWN not in pb.build_system_prompt(None, now=MORNING)
    assert pb.build_system_prompt(None, now=MORNING, plan_already_shown=True).endswith(pb.PLAN_ALREADY_SHOWN)


@pytest.mark.parametrize(
    "message, expected",
    [
        ("bhai diet plan bana do", True),
        ("Give me a MEAL PLAN for the week", True),
        ("plan bana de yaar", True),
        ("ok thanks", False),
        ("what should I eat for dinner?", False),
        ("", False),
    ],
)
def test_wants_diet_plan(message, expected):
    assert pb.wants_diet_plan(message) is expected


def test_extraction_and_welcome_prompts():
    assert 'User message: "I am 72kg"' in pb.profile_extraction_prompt("I am 72kg")
    assert "yo Arjun! good morning" in pb.welcome_prompt("Arjun", MORNING)
    assert "yo bhai!" in pb.welcome_prompt(None, MORNING)
