"""
Terminal output for the resolve script.

Colored status lines for dark terminal backgrounds and a compact listing
of a resolved item's statistics and effects. Color is dropped when stdout
is not a terminal.
"""

import sys
from enum import Enum

from eq_items.models import Item, Statistic
from eq_items.types import Resolution, ResolutionState
from eq_items.wiki import page_url


class Color(Enum):
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    BRIGHT_BLACK = "\033[90m"
    BRIGHT_RED = "\033[91m"
    BRIGHT_GREEN = "\033[92m"
    BRIGHT_YELLOW = "\033[93m"
    BRIGHT_BLUE = "\033[94m"
    BRIGHT_CYAN = "\033[96m"
    BRIGHT_WHITE = "\033[97m"


_STATE_COLORS = {
    ResolutionState.FOUND: Color.BRIGHT_CYAN,
    ResolutionState.PERSISTED: Color.BRIGHT_GREEN,
    ResolutionState.DISCARDED: Color.BRIGHT_YELLOW,
}


def _supports_color() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def colorize(text: str, *colors: Color) -> str:
    if not _supports_color():
        return text
    prefix = "".join(c.value for c in colors)
    return f"{prefix}{text}{Color.RESET.value}"


def success(message: str) -> None:
    print(colorize(message, Color.BRIGHT_GREEN))


def warning(message: str) -> None:
    print(colorize(f"⚠ {message}", Color.BRIGHT_YELLOW))


def error(message: str) -> None:
    print(colorize(f"✗ {message}", Color.BRIGHT_RED), file=sys.stderr)


def progress(current: int, total: int, message: str = "") -> None:
    prefix = colorize(f"[{current}/{total}]", Color.BRIGHT_CYAN)
    print(f"{prefix} {message}")


def key_value(key: str, value: str, indent: int = 0) -> None:
    spaces = " " * indent
    colored_key = colorize(f"{key}:", Color.BRIGHT_WHITE)
    print(f"{spaces}{colored_key} {value}")


def bullet(message: str, indent: int = 2, symbol: str = "•") -> None:
    spaces = " " * indent
    print(f"{spaces}{colorize(symbol, Color.BRIGHT_BLUE)} {message}")


def link(url: str, label: str | None = None) -> str:
    display = label or url
    if _supports_color():
        colored_text = colorize(display, Color.BRIGHT_CYAN, Color.BOLD)
        return f"\033]8;;{url}\033\\{colored_text}\033]8;;\033\\"
    return f"{display} ({url})"


def format_statistic(stat: Statistic) -> str:
    if stat.value is None:
        return f"{stat.code}: {stat.effect}"
    value = f"{stat.value:g}"
    if stat.effect:
        return f"{stat.code}: {value} ({stat.effect})"
    return f"{stat.code}: {value}"


def item_summary(item: Item) -> None:
    if item.id is not None:
        key_value("Id", str(item.id), indent=2)
    if item.image_src:
        key_value("Image", item.image_src, indent=2)
    for stat in item.statistics:
        bullet(format_statistic(stat), indent=4)
    for effect in item.effects:
        restriction = f" {colorize(effect.restriction, Color.DIM)}" if effect.restriction else ""
        name = effect.name or "(unnamed effect)"
        if effect.uri:
            name = link(page_url(effect.uri.lstrip("/")), name)
        bullet(f"{name}{restriction}", indent=4, symbol="✦")


def resolution_summary(resolution: Resolution) -> None:
    item = resolution.item
    state = colorize(resolution.state.value, _STATE_COLORS[resolution.state], Color.BOLD)
    print(f"  {colorize(item.display_name or item.name, Color.BOLD)} [{state}]")
    if resolution.state is ResolutionState.DISCARDED:
        print(colorize("  No item or spell data found", Color.DIM, Color.BRIGHT_BLACK))
        return
    item_summary(item)


def error_with_context(
    error_msg: str,
    context: dict[str, str] | None = None,
    suggestions: list[str] | None = None,
) -> None:
    error(error_msg)

    if context:
        print()
        for key, value in context.items():
            key_value(key, value, indent=2)

    if suggestions:
        print()
        print(colorize("Suggestions:", Color.BRIGHT_YELLOW))
        for suggestion in suggestions:
            bullet(suggestion, indent=2, symbol="→")
