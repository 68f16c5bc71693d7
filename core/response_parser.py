"""
core/response_parser.py
────────────────────────────────────────────────────────────────────────
Turns one raw model reply into chat bubbles + an optional diet plan.

The model is asked to emit `DIET_PLAN:{…minified json…}` and to separate
messages with `|||`, but it does not always comply. Extraction strategies
are tried in order and the first success wins:

  1. `extract_after_marker`      – first balanced `{…}` after `DIET_PLAN:`
  2. `extract_fenced_block`      – ```json fenced block with "type":"DIET_PLAN"
  3. `extract_embedded_fragment` – any balanced fragment with "type":"DIET_PLAN"
  4. `extract_from_bubbles`      – same scan, bubble by bubble, after splitting

Every JSON parse gets one retry after `lenient_cleanup()`. Nothing in here
raises: a reply we cannot make sense of comes back as a single bubble.
"""

from __future__ import annotations

import json
import logging
import re
from bisect import bisect_left
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from pydantic import ValidationError

from core.models.diet_plan import DietPlanData, ParsedBotResponse

_LOG = logging.getLogger(__name__)

PLAN_MARKER = "DIET_PLAN:"
BUBBLE_DELIMITER = "|||"

_TYPE_RE = re.compile(r'"type"\s*:\s*"DIET_PLAN"')
_FENCE_RE = re.compile(r"```(?:json)?(.*?)```", re.DOTALL | re.IGNORECASE)
_FENCE_MARK_RE = re.compile(r"```(?:json)?", re.IGNORECASE)
_MARKER_RE = re.compile(re.escape(PLAN_MARKER) + r"\s*")
_CONTROL_RE = re.compile(r"[\n\r\t]")
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")

# fragments tried per text; each failed try costs a full JSON parse
MAX_PLAN_CANDIDATES = 8


@dataclass(frozen=True)
class Extraction:
    plan: DietPlanData
    text: str   # what is left for display once the JSON is cut out


# ──────────────────────────── brace scanning ────────────────────────────
def find_balanced_block(text: str, start: int = 0) -> Optional[Tuple[int, int]]:
    """
    Span `(begin, end)` of the first depth-balanced `{…}` at or after
    `start`. Braces inside JSON strings are not counted. None when the
    first `{` is never closed.
    """
    begin = text.find("{", start)
    if begin == -1:
        return None

    depth = 0
    in_str = False
    escape = False
    for i in range(begin, len(text)):
        c = text[i]
        if in_str:
            if escape:
                escape = False
            elif c == "\\":
                escape = True
            elif c == '"':
                in_str = False
            continue
        if c == '"':
            in_str = True
        elif c == "{":
            depth += 1
        elif c == "}":
            depth -= 1
            if depth == 0:
                return begin, i + 1
    return None


def balanced_spans(text: str) -> List[Tuple[int, int]]:
    """
    Every depth-balanced `{…}` in `text`, found in a single pass and ordered
    by opening brace (outer before inner). Quotes open a JSON string only
    inside a brace, so prose like `5'10"` does not hide later fragments.
    """
    spans: List[Tuple[int, int]] = []
    stack: List[int] = []
    in_str = False
    escape = False
    for i, c in enumerate(text):
        if in_str:
            if escape:
                escape = False
            elif c == "\\":
                escape = True
            elif c == '"':
                in_str = False
            continue
        if c == '"' and stack:
            in_str = True
        elif c == "{":
            stack.append(i)
        elif c == "}" and stack:
            spans.append((stack.pop(), i + 1))
    spans.sort()
    return spans


def _plan_blocks(text: str) -> List[Tuple[int, int]]:
    """Balanced spans holding a `"type":"DIET_PLAN"` pair, outer first."""
    hits = [m.start() for m in _TYPE_RE.finditer(text)]
    if not hits:
        return []
    out = []
    for begin, end in balanced_spans(text):
        k = bisect_left(hits, begin)
        if k < len(hits) and hits[k] < end:
            out.append((begin, end))
    return out


# ───────────────────────────── JSON loading ─────────────────────────────
def lenient_cleanup(fragment: str) -> str:
    """Drop newlines/tabs and trailing commas before `}` or `]`."""
    return _TRAILING_COMMA_RE.sub(r"\1", _CONTROL_RE.sub("", fragment))


def _loads(fragment: str):
    for attempt in (fragment, lenient_cleanup(fragment)):
        try:
            return json.loads(attempt)
        except (ValueError, RecursionError):
            continue
    return None


def load_plan(fragment: str) -> Optional[DietPlanData]:
    data = _loads(fragment)
    if not isinstance(data, dict):
        return None
    try:
        return DietPlanData.model_validate(data)
    except ValidationError as e:
        _LOG.debug("plan-shaped JSON failed validation: %s", e.errors()[:3])
        return None


# ────────────────────────────── strategies ──────────────────────────────
def extract_after_marker(text: str) -> Optional[Extraction]:
    idx = text.find(PLAN_MARKER)
    if idx == -1:
        return None
    before, after = text[:idx], text[idx + len(PLAN_MARKER):]

    span = find_balanced_block(after)
    if span is None:
        return None
    plan = load_plan(after[span[0]:span[1]])
    if plan is None:
        return None
    return Extraction(plan, before + after[span[1]:])


def extract_fenced_block(text: str) -> Optional[Extraction]:
    for m in _FENCE_RE.finditer(text):
        body = m.group(1).strip()
        if not (body.startswith("{") and body.endswith("}")) or not _TYPE_RE.search(body):
            continue
        plan = load_plan(body)
        if plan is not None:
            return Extraction(plan, text[:m.start()] + text[m.end():])
    return None


def _first_plan(text: str) -> Optional[Tuple[DietPlanData, int, int]]:
    for begin, end in _plan_blocks(text)[:MAX_PLAN_CANDIDATES]:
        plan = load_plan(text[begin:end])
        if plan is not None:
            return plan, begin, end
    return None


def extract_embedded_fragment(text: str) -> Optional[Extraction]:
    hit = _first_plan(text)
    if hit is None:
        return None
    plan, begin, end = hit
    return Extraction(plan, text[:begin] + text[end:])


Extractor = Callable[[str], Optional[Extraction]]

EXTRACTORS: Tuple[Extractor, ...] = (
    extract_after_marker,
    extract_fenced_block,
    extract_embedded_fragment,
)


# ─────────────────────────────── bubbles ────────────────────────────────
def clean_text(text: str) -> str:
    """Strip code-fence marks and leftover `DIET_PLAN:` markers."""
    text = _FENCE_MARK_RE.sub("", text)
    text = _MARKER_RE.sub("", text)
    return text.strip()


def split_bubbles(text: str) -> List[str]:
    parts = clean_text(text).split(BUBBLE_DELIMITER)
    return [p.strip() for p in parts if p.strip()]


def extract_from_bubbles(bubbles: List[str]) -> Tuple[Optional[DietPlanData], List[str]]:
    """
    Last resort: look for the plan inside individual bubbles. The bubble that
    held it keeps only the prose in front of the JSON, or is dropped.
    """
    for i, bubble in enumerate(bubbles):
        if '"type"' not in bubble or "DIET_PLAN" not in bubble:
            continue
        hit = _first_plan(bubble)
        if hit is None:
            continue
        plan, begin, _ = hit
        lead = bubble[:begin].strip()
        rest = bubbles[:i] + ([lead] if lead else []) + bubbles[i + 1:]
        return plan, rest
    return None, list(bubbles)


def strip_plan_fragments(bubble: str) -> str:
    """Remove any balanced fragment that still looks like a plan."""
    pieces, last = [], 0
    for begin, end in _plan_blocks(bubble):
        if begin < last:   # nested in a fragment already cut
            continue
        pieces.append(bubble[last:begin])
        last = end
    pieces.append(bubble[last:])
    return "".join(pieces).strip()


# ─────────────────────────────── entrypoint ─────────────────────────────
def parse_response(raw: str | None) -> ParsedBotResponse:
    raw = raw or ""
    plan: Optional[DietPlanData] = None
    text = raw

    for extractor in EXTRACTORS:
        hit = extractor(raw)
        if hit is not None:
            _LOG.debug("diet plan found via %s", extractor.__name__)
            plan, text = hit.plan, hit.text
            break

    bubbles = split_bubbles(text)
    if plan is None:
        plan, bubbles = extract_from_bubbles(bubbles)
        if plan is not None:
            _LOG.debug("diet plan found via extract_from_bubbles")

    bubbles = [b for b in (strip_plan_fragments(b) for b in bubbles) if b]

    if not bubbles and plan is None:
        fallback = " ".join(clean_text(raw).replace(BUBBLE_DELIMITER, " ").split())
        if fallback:
            _LOG.warning("unparseable reply – returning it as a single bubble")
            bubbles = [fallback]

    return ParsedBotResponse(bubbles=bubbles, diet_plan=plan)
