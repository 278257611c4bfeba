"""
Line classifier for item description text.

Each candidate line of an item page is matched against RULES, an ordered
list of matchers, and the first rule that matches decides what the line
encodes. Categories overlap (an effect line can also carry a
colon-delimited number), so the order of RULES is part of the contract.

Lines that pack several labels together ("STR: +5 DEX: +3") are split into
one fragment per label by split_fragments() before classification.
"""

import html
import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from eq_items.exceptions import ParseError
from eq_items.models import Effect, Statistic
from eq_items.naming import clean_name

log = logging.getLogger(__name__)

CAPACITY_CODE = "size capacity"
AFFINITY_CODE = "AFFINITY"

TEXT_LABELS = ("slot", "class", "race", "size", "skill")

NUMERIC_LABELS = (
    "ac",
    "hp",
    "str",
    "sta",
    "agi",
    "dex",
    "wis",
    "int",
    "cha",
    "sv fire",
    "sv cold",
    "sv poison",
    "sv magic",
    "sv disease",
    "dmg",
    "mana",
    "atk",
    "endr",
    "wt",
    "atk delay",
    "haste",
    "range",
    "charges",
    "instrument",
    "instruments",
    "weight reduction",
    "capacity",
)

AFFINITY_PATTERNS = (
    r"no[\s_-]*drop",
    r"no[\s_-]*rent",
    r"no[\s_-]*trade",
    r"\blore\b",
    r"quest[\s_-]*item",
    r"magic[\s_-]*item",
    r"temporary",
    r"expendable",
)

EFFECT_MARKERS = ("effect:", "casting time:", "combat", "at level")


def _label_alternation(labels: Iterable[str]) -> str:
    # Longest first so "atk delay" wins over "atk"
    ordered = sorted(labels, key=len, reverse=True)
    return "|".join(r"\s+".join(re.escape(word) for word in label.split()) for label in ordered)


_CAPACITY_RE = re.compile(r"^\s*size\s+capacity\s*:", re.IGNORECASE)
_AFFINITY_RE = re.compile("|".join(AFFINITY_PATTERNS), re.IGNORECASE)
_TEXT_LABEL_RE = re.compile(rf"^\s*(?:{_label_alternation(TEXT_LABELS)})\s*:", re.IGNORECASE)
_NUMERIC_LABEL_RE = re.compile(
    rf"^\s*(?:{_label_alternation(NUMERIC_LABELS)})\s*:", re.IGNORECASE
)
_ANY_LABEL_RE = re.compile(
    rf"(?<![A-Za-z])(?:{_label_alternation((CAPACITY_CODE, *TEXT_LABELS, *NUMERIC_LABELS))})\s*:",
    re.IGNORECASE,
)
_ANCHOR_OPEN_RE = re.compile(r"<a\b", re.IGNORECASE)
_ANCHOR_RE = re.compile(r"<a\b.*?</a>", re.IGNORECASE | re.DOTALL)
_ATTRIBUTE_RE = re.compile(r'([A-Za-z0-9_-]+)="(.*?)"', re.DOTALL)
_EFFECT_LABEL_RE = re.compile(r"effect:", re.IGNORECASE)
_NUMBER_RE = re.compile(r"\d+(?:\.\d*)?|\.\d+")


@dataclass(frozen=True)
class Rule:
    name: str
    matches: Callable[[str], bool]
    build: Callable[[str], Statistic | Effect]


def _split_label(line: str) -> tuple[str, str]:
    label, _, value = line.partition(":")
    return " ".join(label.split()), value


def parse_signed_number(line: str, raw_value: str) -> float:
    tokens = raw_value.split()
    if not tokens:
        raise ParseError(line, raw_value)

    token = tokens[0]
    negative = False
    if "+" in token:
        token = token.replace("+", "")
    elif "-" in token:
        token = token.replace("-", "")
        negative = True
    token = token.rstrip("%")

    if not _NUMBER_RE.fullmatch(token):
        raise ParseError(line, tokens[0])
    value = float(token)
    return -value if negative else value


def is_effect_line(line: str) -> bool:
    if _ANCHOR_OPEN_RE.search(line):
        return True
    lowered = line.lower()
    return any(marker in lowered for marker in EFFECT_MARKERS)


def _build_capacity(line: str) -> Statistic:
    _, remainder = _split_label(line)
    return Statistic(code=CAPACITY_CODE, effect=remainder.strip())


def _build_affinity(line: str) -> Statistic:
    return Statistic(code=AFFINITY_CODE, effect=line.upper(), value=None)


def _build_text_field(line: str) -> Statistic:
    label, value = _split_label(line)
    return Statistic(code=label.upper(), effect=value.strip().upper(), value=None)


def _build_numeric_field(line: str) -> Statistic:
    label, value = _split_label(line)
    return Statistic(code=label.upper(), value=parse_signed_number(line, value))


def _build_effect(line: str) -> Effect:
    text = _EFFECT_LABEL_RE.sub("", line).strip()

    name = ""
    uri = ""
    for key, value in _ATTRIBUTE_RE.findall(text):
        key = key.lower()
        if "href" in key and not uri:
            uri = html.unescape(value)
        elif "title" in key and not name:
            name = html.unescape(value)

    restriction = clean_name(_ANCHOR_RE.sub("", text))
    return Effect(name=name, uri=uri, restriction=restriction)


RULES: list[Rule] = [
    Rule("capacity", lambda line: _CAPACITY_RE.match(line) is not None, _build_capacity),
    Rule("affinity", lambda line: _AFFINITY_RE.search(line) is not None, _build_affinity),
    Rule("text_field", lambda line: _TEXT_LABEL_RE.match(line) is not None, _build_text_field),
    Rule(
        "numeric_field",
        lambda line: _NUMERIC_LABEL_RE.match(line) is not None,
        _build_numeric_field,
    ),
    Rule("effect", is_effect_line, _build_effect),
]


def classify(line: str) -> Statistic | Effect | None:
    text = line.strip()
    if not text:
        return None

    for rule in RULES:
        if not rule.matches(text):
            continue
        try:
            return rule.build(text)
        except ParseError as e:
            log.warning("Dropping %s line: %s", rule.name, e)
            return None

    log.debug("Unrecognized line: %r", text)
    return None


def split_fragments(line: str) -> list[str]:
    """
    Split a line carrying several labeled fields into one fragment per label.

    Item pages often render "STR: +5 DEX: +3 AGI: +2" or
    "Skill: 1H Slashing Atk Delay: 30" on a single line. Text before the
    first label is kept as its own fragment. Effect lines are returned whole
    since their restriction text may contain label-like words.
    """
    if is_effect_line(line):
        return [line]

    starts = [match.start() for match in _ANY_LABEL_RE.finditer(line)]
    if not starts:
        return [line]
    if starts[0] != 0:
        starts.insert(0, 0)

    bounds = [*starts, len(line)]
    fragments = (line[start:end].strip() for start, end in zip(bounds, bounds[1:]))
    return [fragment for fragment in fragments if fragment]


def classify_lines(lines: Iterable[str]) -> tuple[list[Statistic], list[Effect]]:
    statistics: list[Statistic] = []
    effects: list[Effect] = []
    for line in lines:
        for fragment in split_fragments(line):
            entry = classify(fragment)
            if isinstance(entry, Effect):
                effects.append(entry)
            elif isinstance(entry, Statistic) and entry.code:
                statistics.append(entry)
    return statistics, effects
