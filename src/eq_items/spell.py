"""
Spell page detection.

The wiki sometimes serves a spell description under an item-style URL, and
names carrying the "Spell:" prefix always point at one. A page is taken to
describe a spell when it names at least one player class as the text of an
element and carries a "level <n>" token. Classes and levels are paired by
position: the n-th class found is usable at the n-th level found.
"""

import logging
import re

from eq_items.models import Item, Statistic
from eq_items.naming import add_spell_prefix
from eq_items.types import ClassLevel, SpellMatch

log = logging.getLogger(__name__)

CLASS_ABBREVIATIONS: dict[str, str] = {
    "bard": "BRD",
    "cleric": "CLR",
    "druid": "DRU",
    "enchanter": "ENC",
    "magician": "MAG",
    "monk": "MNK",
    "necromancer": "NEC",
    "paladin": "PAL",
    "ranger": "RNG",
    "rogue": "ROG",
    "shadowknight": "SHD",
    "shaman": "SHM",
    "warrior": "WAR",
    "wizard": "WIZ",
}

_CLASS_RE = re.compile(rf">\s*({'|'.join(CLASS_ABBREVIATIONS)})\s*<", re.IGNORECASE)
_LEVEL_RE = re.compile(r"level\s+([0-9]+)", re.IGNORECASE)
_IMAGE_RE = re.compile(r"""/images/[^"'\s<>]+""", re.IGNORECASE)


def looks_like_spell(html: str) -> bool:
    return _CLASS_RE.search(html) is not None and _LEVEL_RE.search(html) is not None


def detect_spell(html: str) -> SpellMatch | None:
    class_names = [match.group(1).lower() for match in _CLASS_RE.finditer(html)]
    levels = [int(match.group(1)) for match in _LEVEL_RE.finditer(html)]
    if not class_names or not levels:
        log.info(
            "Not a spell page: %d class token(s), %d level token(s)",
            len(class_names),
            len(levels),
        )
        return None

    pairs: list[ClassLevel] = []
    for index, class_name in enumerate(class_names):
        level = levels[index] if index < len(levels) else None
        pair = ClassLevel(CLASS_ABBREVIATIONS[class_name], level)
        if pair not in pairs:
            pairs.append(pair)

    image = _IMAGE_RE.search(html)
    return SpellMatch(image_src=image.group(0) if image else "", classes=pairs)


def spell_statistics(match: SpellMatch) -> list[Statistic]:
    statistics = []
    for abbreviation, level in match.classes:
        if level is None:
            statistics.append(Statistic(code="CLASS", effect=abbreviation))
            continue
        statistics.append(Statistic(code="CLASS", effect=f"{abbreviation} ({level})"))
        statistics.append(Statistic(code="LEVEL", value=float(level), effect=abbreviation))
    return statistics


def apply_spell(item: Item, match: SpellMatch) -> Item:
    """Rewrite an item in place as the spell the page describes."""
    item.name = add_spell_prefix(item.name)
    if match.image_src:
        item.image_src = match.image_src
    item.statistics = spell_statistics(match)
    item.effects = []
    return item
