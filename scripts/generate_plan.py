"""
Print a 7-day diet plan for a profile (offline path, no model call).

Usage
-----

    # generic plan
    python -m scripts.generate_plan

    # personalised + reproducible
    python -m scripts.generate_plan --weight 72 --height 175 --age 28 \
        --goal "gain muscle" --diet veg --allergies "peanut" --seed 7

    # the exact line the chat model is asked to emit
    python -m scripts.generate_plan --marker
"""
from __future__ import annotations

import argparse
import json
import random

from core.meal_plan import generate_diet_plan, generate_diet_plan_json
from core.models.profile import DietProfile
from core.response_parser import PLAN_MARKER


def _profile(args: argparse.Namespace) -> DietProfile:
    return DietProfile(
        weight_kg=args.weight,
        height_cm=args.height,
        age=args.age,
        goal=args.goal,
        diet_type=args.diet,
        allergies=args.allergies,
    )


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--weight", type=float, help="kg")
    parser.add_argument("--height", type=float, help="cm")
    parser.add_argument("--age", type=int)
    parser.add_argument("--goal", help='free text, e.g. "lose weight"')
    parser.add_argument("--diet", help="veg / non_veg / vegan / keto / no_preference")
    parser.add_argument("--allergies", help='comma separated, e.g. "paneer, egg"')
    parser.add_argument("--seed", type=int, help="fix the random picks")
    parser.add_argument("--marker", action="store_true", help=f"print as one {PLAN_MARKER} line")
    args = parser.parse_args()

    profile = _profile(args)
    rng = random.Random(args.seed) if args.seed is not None else None

    if args.marker:
        print(PLAN_MARKER + generate_diet_plan_json(profile, rng))
        return

    plan = generate_diet_plan(profile, rng)
    print(json.dumps(plan.model_dump(mode="json"), indent=2, ensure_ascii=False))
    if not plan.is_complete:
        print(f"⚠️ short days: {', '.join(plan.short_days())}")


if __name__ == "__main__":
    main()
