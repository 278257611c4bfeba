"""
Item page segmentation.

Isolates the descriptive block of a wiki item page and splits it into
candidate lines for the classifier. The block is bracketed by two marker
elements (class "itemData" opens it, class "itembotbg" closes it); the
image and the first paragraph between the two are the only parts used.
Pages missing either marker, or with no paragraph between them, are not
item pages.
"""

import logging
from collections.abc import Iterator

from bs4 import BeautifulSoup
from bs4.element import Comment, NavigableString, PageElement, Tag

from eq_items.naming import clean_name
from eq_items.types import Segment

log = logging.getLogger(__name__)

START_MARKER = "itemdata"
END_MARKER = "itembotbg"
IMAGE_PREFIX = "/images"


def _has_class(marker: str):
    def matcher(css_class: str | None) -> bool:
        return css_class is not None and css_class.lower() == marker

    return matcher


def _is_item_image(src: str | None) -> bool:
    return src is not None and src.lower().startswith(IMAGE_PREFIX)


def _elements_between(start: Tag, end: Tag) -> Iterator[PageElement]:
    for element in start.next_elements:
        if element is end:
            return
        yield element


def _render(node: PageElement) -> str:
    if isinstance(node, Comment):
        return ""
    if isinstance(node, NavigableString):
        return str(node)
    if isinstance(node, Tag):
        if node.name == "a":
            return str(node)
        return "".join(_render(child) for child in node.children)
    return ""


def _split_lines(paragraph: Tag) -> Iterator[str]:
    parts: list[str] = []
    for child in paragraph.children:
        if isinstance(child, Tag) and child.name == "br":
            line = clean_name("".join(parts))
            parts = []
            if line:
                yield line
        else:
            parts.append(_render(child))

    line = clean_name("".join(parts))
    if line:
        yield line


def segment(html: str) -> Segment | None:
    soup = BeautifulSoup(html, "lxml")

    start = soup.find(class_=_has_class(START_MARKER))
    if start is None:
        log.debug("Item segment start marker '%s' not found", START_MARKER)
        return None
    end = start.find_next(class_=_has_class(END_MARKER))
    if end is None:
        log.debug("Item segment end marker '%s' not found", END_MARKER)
        return None

    image_src = ""
    paragraph: Tag | None = None
    for element in _elements_between(start, end):
        if not isinstance(element, Tag):
            continue
        if not image_src and element.name == "img" and _is_item_image(element.get("src")):
            image_src = element["src"].strip()
        elif paragraph is None and element.name == "p":
            paragraph = element
        if paragraph is not None and image_src:
            break

    if paragraph is None:
        log.warning("Item segment has both markers but no paragraph; treating as not found")
        return None

    return Segment(lines=_split_lines(paragraph), image_src=image_src, markup=str(paragraph))
