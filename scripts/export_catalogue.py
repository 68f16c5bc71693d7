"""
Dump the meal catalogue to CSV (handy for nutrition review).

    python -m scripts.export_catalogue catalogue.csv
    python -m scripts.export_catalogue snacks.csv --slot evening_snack --diet vegan
"""
from __future__ import annotations

import argparse
from pathlib import Path

from core.knowledge_base import catalogue_frame


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("out", type=Path, help="destination .csv")
    parser.add_argument("--slot")
    parser.add_argument("--diet")
    parser.add_argument("--allergies")
    args = parser.parse_args()

    df = catalogue_frame(args.slot, args.diet, args.allergies)
    df.to_csv(args.out, index=False)
    print(f"✓ wrote {len(df)} meals to {args.out}")


if __name__ == "__main__":
    main()
