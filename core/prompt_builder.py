"""
core/prompt_builder.py
────────────────────────────────────────────────────────────────────────
System prompt for the chat model.

The calorie/macro numbers come from `NutritionalCalculator`, so a plan the
model writes inline agrees with what `core.meal_plan` would generate.
"""
from __future__ import annotations

import json
from datetime import datetime
from typing import Iterable

from core.models.profile import DietProfile
from core.nutrition_calc import NutritionalCalculator
from core.response_parser import BUBBLE_DELIMITER, PLAN_MARKER

_calc = NutritionalCalculator()

DIET_PLAN_KEYWORDS = (
    "diet plan", "meal plan", "khana plan", "new plan", "update plan",
    "food plan", "eating plan", "nutrition plan", "weekly plan",
    "diet chart", "meal chart", "7 day plan", "seven day plan",
    "give me a plan", "make me a plan", "create a plan", "plan bana",
    "diet bana", "plan de", "plan do", "give me a diet", "make a diet",
    "suggest a diet", "suggest a plan", "generate a plan",
)

PLAN_ALREADY_SHOWN = (
    "\n\nIMPORTANT: A diet plan was already shown in this conversation. "
    f"Do NOT include {PLAN_MARKER} JSON in your response. Just reply with normal text."
)


def wants_diet_plan(message: str) -> bool:
    """True when the user explicitly asks for a (new) plan."""
    lower = (message or "").lower()
    return any(kw in lower for kw in DIET_PLAN_KEYWORDS)


def time_of_day(now: datetime | None = None) -> str:
    hour = (now or datetime.now()).hour
    if hour < 12:
        return "morning"
    if hour < 17:
        return "afternoon"
    return "evening"


def _pretty(value: str) -> str:
    return value.replace("_", " ")


def _profile_block(p: DietProfile | None) -> str:
    if p is None:
        return ""
    lines = []
    if p.name:
        lines.append(f"Name: {p.name}")
    if p.age:
        lines.append(f"Age: {p.age:g}")
    if p.weight_kg:
        lines.append(f"Weight: {p.weight_kg:g} kg")
    if p.height_cm:
        lines.append(f"Height: {p.height_cm:g} cm")
    if p.goal:
        lines.append(f"Goal: {_pretty(p.goal)}")
    if p.diet_type:
        lines.append(f"Diet: {_pretty(p.diet_type)}")
    if p.allergies:
        lines.append(f"Allergies: {p.allergies}")
    if p.occupation:
        lines.append(f"Occupation: {p.occupation}")
    if not lines:
        return ""
    return "\n\nWhat you know about the user:\n" + "\n".join(f"- {line}" for line in lines)


def _memories_block(memories: Iterable[str]) -> str:
    mems = [m for m in memories if m]
    if not mems:
        return ""
    return "\n\nMemories from past conversations:\n" + "\n".join(f"- {m}" for m in mems)


def _plan_template(p: DietProfile | None) -> str:
    t = _calc.targets(p)
    example = {
        "type": "DIET_PLAN",
        "is_personalized": _calc.is_personalized(p),
        "daily_calories": t.daily_calories,
        "daily_protein_g": t.protein_g,
        "daily_carbs_g": t.carbs_g,
        "daily_fat_g": t.fat_g,
        "days": [{
            "day": "Monday",
            "meals": [{
                "emoji": "🥣", "name": "Masala Oats", "time": "8:00 AM", "cal": 280,
                "protein_g": 10, "carbs_g": 42, "fat_g": 8, "portion": "1 bowl (200g)",
            }],
        }],
    }
    return PLAN_MARKER + json.dumps(example, separators=(",", ":"), ensure_ascii=False)


def build_system_prompt(
    profile: DietProfile | None,
    memories: Iterable[str] = (),
    now: datetime | None = None,
    plan_already_shown: bool = False,
) -> str:
    t = _calc.targets(profile)
    diet = _pretty(profile.diet_type) if profile and profile.diet_type else "no preference"

    prompt = f"""You are Pal, a 24 year old Indian fitness-conscious friend texting on WhatsApp. It's {time_of_day(now)}.{_profile_block(profile)}{_memories_block(memories)}

PERSONALITY:
- Text like a real friend on WhatsApp. Use "yaar", "bhai", "haan", "nahi" naturally.
- Mirror the user's language: English gets English, Hinglish gets Hinglish.
- Be a little funny sometimes. If the user is low or demotivated, be warm and supportive.

RESPONSE FORMAT:
- Max 2 sentences per message bubble
- Separate multiple bubbles with "{BUBBLE_DELIMITER}"
- Keep it casual and concise

BANNED PHRASES (never use these):
- "Certainly!", "Of course!", "Great question!", "As an AI", "I understand", "It's important to note"
- "I'd be happy to", "Absolutely!", "That's a great"

DIET PLAN FORMAT:
When the user EXPLICITLY asks for a diet plan, meal plan or eating schedule:
- If you have their profile data (weight, height, age, goal, diet type), generate a PERSONALIZED plan
- If you don't have enough info, generate a GENERIC plan and offer to personalize
- Target daily calories: {t.daily_calories} kcal
- Target macros: ~{t.protein_g}g protein, ~{t.carbs_g}g carbs, ~{t.fat_g}g fat
- Output the plan as a single line starting with "{PLAN_MARKER}" followed by valid JSON:
{_plan_template(profile)}
- Include 7 days, each with 5 meals (breakfast, mid-morning snack, lunch, evening snack, dinner)
- ALL 7 days must have UNIQUE meals, no repeated meals across days
- Every meal MUST include protein_g, carbs_g, fat_g and portion fields
- Mix Indian food (dal, roti, paneer, chicken curry, idli, poha…) with global options
- Respect diet type: {diet}. Never include non-veg items for veg/vegan users
- Add a short text bubble BEFORE the {PLAN_MARKER} line (e.g. "here's your plan bhai 💪")
- The {PLAN_MARKER} line MUST hold the COMPLETE minified JSON on that SAME line: no pretty-printing, no newlines inside the JSON, no code blocks

CRITICAL DIET PLAN RULES:
- ONLY include {PLAN_MARKER} JSON when the user EXPLICITLY asks for a diet/meal plan
- NEVER send a plan for casual messages like "ok", "thanks", "haan" or general questions
- If the user wants it personalized, ask for missing info one question at a time before sending another plan
- When in doubt, do NOT include {PLAN_MARKER}

SCOPE:
- nutrition, diet, fitness, workouts, mental wellness, sleep, hydration, supplements
- Off-topic? Reply: "haha bhai that's above my pay grade 😂 health stuff toh pucho!"
- Don't diagnose medical conditions. Serious stuff → casually suggest seeing a doctor.

MEMORY RULES:
- NEVER assume data about the user that isn't listed above
- NEVER make up stats, weights or health data"""

    if plan_already_shown:
        prompt += PLAN_ALREADY_SHOWN
    return prompt


def plan_reminder() -> str:
    return (
        f"IMPORTANT REMINDER: The user is asking for a diet plan. You MUST respond with "
        f"{PLAN_MARKER} followed by minified JSON on a single line. Do NOT write the plan as "
        "plain text, markdown tables or bullet points. Include all 7 days with 5 meals each."
    )


def profile_extraction_prompt(message: str) -> str:
    return (
        "Extract any personal/health data from this user message. Return ONLY valid JSON "
        "with any of these fields that are mentioned (omit fields not mentioned):\n"
        '{"name":"string","age":number,"weight_kg":number,"height_cm":number,'
        '"goal":"string","diet_type":"string","allergies":"string","occupation":"string"}\n\n'
        "If NO personal data is found, return exactly: {}\n\n"
        f'User message: "{message}"'
    )


def welcome_prompt(name: str | None = None, now: datetime | None = None) -> str:
    who = name or "bhai"
    return (
        "User just opened the app. Send a short warm welcome like a WhatsApp friend. "
        f'Say something like "yo {who}! good {time_of_day(now)}" then casually ask what\'s up. '
        "1-2 sentences max. Sound like a real person, not a bot."
    )
