"""
Item name canonicalization.

Turns a free-text item name into the display form stored alongside it and
into the page segment used to address it on the wiki.
"""

import re
from urllib.parse import quote

SPELL_PREFIX = "Spell: "

_SPELL_PREFIX_RE = re.compile(r"^\s*spell:\s*", re.IGNORECASE)

# Lowercased unless they open the name, as wiki page titles are
_MINOR_WORDS = frozenset(
    {"a", "an", "and", "as", "at", "by", "for", "from", "in", "of", "on", "or", "the", "to"}
)


def clean_name(name: str) -> str:
    return re.sub(r"\s+", " ", name.replace("\n", " ").replace("\r", " ")).strip()


def title_case(raw: str, url_safe: bool = False) -> str:
    words = clean_name(raw.replace("_", " ")).split(" ")
    titled = []
    for index, word in enumerate(words):
        if index > 0 and word.lower() in _MINOR_WORDS:
            titled.append(word.lower())
        else:
            titled.append(word[:1].upper() + word[1:])

    result = " ".join(titled)
    if url_safe:
        result = quote(result.replace(" ", "_"), safe="_'(),:")
    return result


def has_spell_prefix(name: str) -> bool:
    return _SPELL_PREFIX_RE.match(name) is not None


def strip_spell_prefix(name: str) -> str:
    return _SPELL_PREFIX_RE.sub("", name, count=1).strip()


def add_spell_prefix(name: str) -> str:
    if has_spell_prefix(name):
        return name
    return f"{SPELL_PREFIX}{name}"
