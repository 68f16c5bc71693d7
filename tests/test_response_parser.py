"""
Response parser – one test block per extraction strategy + bubble rules.
"""
import json
import time

import pytest

from core.response_parser import (
    extract_after_marker,
    extract_embedded_fragment,
    extract_fenced_block,
    extract_from_bubbles,
    balanced_spans,
    find_balanced_block,
    lenient_cleanup,
    parse_response,
    strip_plan_fragments,
)

MINI = '{"type":"DIET_PLAN","is_personalized":true,"daily_calories":2000,"days":[]}'

FULL_PLAN = {
    "type": "DIET_PLAN",
    "is_personalized": False,
    "daily_calories": 1850,
    "daily_protein_g": 139,
    "days": [
        {
            "day": "Monday",
            "meals": [
                {"emoji": "🥣", "name": "Masala Oats", "time": "8:00 AM", "cal": 280,
                 "protein_g": 10, "carbs_g": 42, "fat_g": 8, "portion": "1 bowl {200g}"},
                {"emoji": "🍛", "name": "Rajma Chawal", "time": "1:00 PM", "cal": 440},
            ],
        },
        {"day": "Tuesday", "meals": []},
    ],
}
FULL = json.dumps(FULL_PLAN, separators=(",", ":"), ensure_ascii=False)


# ── contract examples ────────────────────────────────────────────────
def test_marker_round_trip():
    out = parse_response("here's your plan|||DIET_PLAN:" + MINI)
    assert out.bubbles == ["here's your plan"]
    assert out.diet_plan is not None
    assert out.diet_plan.daily_calories == 2000
    assert out.diet_plan.is_personalized is True


def test_plain_bubbles_keep_order():
    out = parse_response("a|||b|||c")
    assert out.bubbles == ["a", "b", "c"]
    assert out.diet_plan is None


def test_no_plan_splits_trimmed_non_empty_segments():
    out = parse_response("  haan bhai  |||   ||| drink water 💧 |||")
    assert out.bubbles == ["haan bhai", "drink water 💧"]
    assert out.diet_plan is None


def test_trailing_comma_recovered():
    raw = 'ok|||DIET_PLAN:{"type":"DIET_PLAN","daily_calories":1800,"days":[{"day":"Monday","meals":[],},],}'
    out = parse_response(raw)
    assert out.diet_plan is not None
    assert out.diet_plan.daily_calories == 1800
    assert out.diet_plan.days[0].day == "Monday"
    assert out.bubbles == ["ok"]


# ── strategy 1: marker ───────────────────────────────────────────────
def test_marker_with_nested_days_and_braces_inside_strings():
    raw = "yo bhai 💪\nDIET_PLAN:" + FULL + "\nlmk if you want changes"
    out = parse_response(raw)
    assert out.diet_plan.days[0].meals[0].portion == "1 bowl {200g}"
    assert len(out.diet_plan.days) == 2
    assert out.bubbles == ["yo bhai 💪\n\nlmk if you want changes"]


def test_marker_prose_split_into_bubbles():
    raw = "here you go|||DIET_PLAN:" + FULL + "|||stay hydrated"
    out = parse_response(raw)
    assert out.bubbles == ["here you go", "stay hydrated"]
    assert out.diet_plan.daily_calories == 1850


def test_extract_after_marker_returns_remaining_text():
    hit = extract_after_marker("pre DIET_PLAN:" + MINI + " post")
    assert hit.text == "pre  post"


def test_marker_without_json_falls_through():
    assert extract_after_marker("DIET_PLAN: coming soon") is None
    out = parse_response("DIET_PLAN: coming soon")
    assert out.diet_plan is None
    assert out.bubbles == ["coming soon"]


# ── strategy 2: fenced block ─────────────────────────────────────────
def test_fenced_block_pretty_printed():
    pretty = json.dumps(FULL_PLAN, indent=2, ensure_ascii=False)
    raw = "here's the plan|||```json\n" + pretty + "\n```"
    hit = extract_fenced_block(raw)
    assert hit is not None
    out = parse_response(raw)
    assert out.diet_plan.daily_calories == 1850
    assert out.bubbles == ["here's the plan"]


def test_fenced_block_without_plan_type_ignored():
    raw = '```json\n{"hello": "world"}\n```'
    assert extract_fenced_block(raw) is None
    out = parse_response(raw)
    assert out.diet_plan is None
    assert out.bubbles == ['{"hello": "world"}']


# ── strategy 3: bare fragment ────────────────────────────────────────
def test_bare_fragment_anywhere():
    raw = "sure {not json} here it is " + FULL + " enjoy"
    hit = extract_embedded_fragment(raw)
    assert hit is not None
    assert hit.plan.daily_calories == 1850
    out = parse_response(raw)
    assert out.bubbles == ["sure {not json} here it is  enjoy"]


def test_bare_fragment_inside_wrapper_object():
    raw = '{"reply": "hi", "plan": ' + MINI + "}"
    out = parse_response(raw)
    assert out.diet_plan is not None
    assert out.diet_plan.daily_calories == 2000


# ── strategy 4: per-bubble scan ──────────────────────────────────────
def test_extract_from_bubbles_keeps_leading_prose():
    plan, bubbles = extract_from_bubbles(["hey", "plan below " + MINI, "bye"])
    assert plan.daily_calories == 2000
    assert bubbles == ["hey", "plan below", "bye"]


def test_extract_from_bubbles_drops_pure_json_bubble():
    plan, bubbles = extract_from_bubbles(["hey", MINI])
    assert plan is not None
    assert bubbles == ["hey"]


def test_extract_from_bubbles_nothing_found():
    plan, bubbles = extract_from_bubbles(["a", "b"])
    assert plan is None and bubbles == ["a", "b"]


# ── cleanup + degradation ────────────────────────────────────────────
def test_unparseable_plan_fragment_degrades_to_single_bubble():
    raw = '{"type":"DIET_PLAN","days":[]}'   # no daily_calories
    out = parse_response(raw)
    assert out.diet_plan is None
    assert out.bubbles == [raw]


def test_truncated_json_never_raises():
    raw = 'here you go|||DIET_PLAN:{"type":"DIET_PLAN","daily_calories":2000,"days":[{"day":"Mon'
    out = parse_response(raw)
    assert out.diet_plan is None
    assert out.bubbles[0] == "here you go"


@pytest.mark.parametrize("raw", ["", "   ", None, "|||", "{", "}}}{{{", "```", "DIET_PLAN:"])
def test_degenerate_inputs(raw):
    out = parse_response(raw)
    assert out.diet_plan is None
    assert all(b.strip() for b in out.bubbles)


def test_strip_plan_fragments_removes_leftovers():
    assert strip_plan_fragments("keep " + MINI + " this") == "keep  this"
    assert strip_plan_fragments('{"a": 1} stays') == '{"a": 1} stays'


def test_find_balanced_block_counts_depth():
    text = 'x {"a": {"b": [1, {"c": 2}]}, "d": "}"} tail'
    begin, end = find_balanced_block(text)
    assert json.loads(text[begin:end])["d"] == "}"
    assert find_balanced_block("no braces") is None
    assert find_balanced_block("{ never closed") is None


def test_lenient_cleanup():
    assert lenient_cleanup('{\n\t"a": [1, 2,],\r\n}') == '{"a": [1, 2]}'


def test_model_numbers_normalised_to_non_negative_ints():
    raw = 'DIET_PLAN:{"type":"DIET_PLAN","daily_calories":1999.6,"daily_fat_g":-3,' \
          '"days":[{"day":"Monday","meals":[{"name":"Dal","cal":"320","protein_g":12.4}]}]}'
    plan = parse_response(raw).diet_plan
    assert plan.daily_calories == 2000
    assert plan.daily_fat_g == 0
    meal = plan.days[0].meals[0]
    assert (meal.cal, meal.protein_g) == (320, 12)


def test_dump_uses_camel_case_plan_key():
    out = parse_response("hi|||DIET_PLAN:" + MINI)
    dumped = out.model_dump(by_alias=True, exclude_none=True)
    assert dumped["dietPlan"]["daily_calories"] == 2000
    assert "dietPlan" not in parse_response("hi").model_dump(by_alias=True, exclude_none=True)


def test_model_numbers_with_units_still_give_a_plan():
    raw = 'here you go|||DIET_PLAN:{"type":"DIET_PLAN","daily_calories":"1,800 kcal",' \
          '"days":[{"day":"Monday","meals":[{"name":"Dal","cal":"320 kcal","protein_g":"lots",' \
          '"portion":1},{"name":"Chai","cal":"?"}]}]}'
    out = parse_response(raw)
    assert out.bubbles == ["here you go"]
    plan = out.diet_plan
    assert plan.daily_calories == 1800
    dal, chai = plan.days[0].meals
    assert (dal.cal, dal.protein_g, dal.portion) == (320, None, "1")
    assert chai.cal == 0


def test_stray_quote_in_prose_does_not_hide_plan():
    raw = 'you said 5\'10" right? ' + MINI
    out = parse_response(raw)
    assert out.diet_plan is not None
    assert out.bubbles == ['you said 5\'10" right?']


def test_strip_plan_fragments_removes_every_fragment_in_one_pass():
    assert strip_plan_fragments("a " + MINI + " b " + MINI) == "a  b"
    assert strip_plan_fragments('{"wrap": ' + MINI + "} c") == "c"


def test_balanced_spans_outer_first_and_skips_unclosed():
    text = '{ {"a": {"b": "}"}} x {y}'
    assert balanced_spans(text) == [(2, 19), (8, 18), (22, 25)]


@pytest.mark.parametrize("raw", [
    "{" * 20000,
    '{"' * 10000,
    "```{" * 5000,
    "{" * 5000 + MINI + "}" * 5000,
    ("{" * 3000 + MINI) * 3,
])
def test_large_hostile_input_parses_quickly(raw):
    start = time.perf_counter()
    out = parse_response(raw)
    assert time.perf_counter() - start < 2.0
    assert all(b.strip() for b in out.bubbles)
