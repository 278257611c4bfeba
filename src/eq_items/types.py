"""
Shared type definitions for the resolution pipeline.

Provides the lightweight result containers passed between the segmenter,
the spell detector and the resolver.
"""

from collections.abc import Iterator
from concurrent.futures import Future
from enum import Enum
from typing import NamedTuple

from eq_items.models import Item


class Segment(NamedTuple):
    lines: Iterator[str]
    image_src: str
    markup: str = ""


class ClassLevel(NamedTuple):
    abbreviation: str
    level: int | None


class SpellMatch(NamedTuple):
    image_src: str
    classes: list[ClassLevel]


class ResolutionState(Enum):
    FOUND = "found"
    PERSISTED = "persisted"
    DISCARDED = "discarded"


class Resolution(NamedTuple):
    item: Item
    state: ResolutionState
    pending: Future | None = None
