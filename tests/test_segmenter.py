"""Tests for segmenter module."""

from collections.abc import Iterator

from eq_items.segmenter import segment

_EFFECT_LINK = (
    '<a href="/Cloak_of_Flames_(Effect)" title="Cloak of Flames (Effect)">Cloak of Flames</a>'
)

_ITEM_PAGE = f"""
<html><body>
<div class="itemtopbg"><div class="itemtitle">Cloak of Flames</div></div>
<div class="itembg">
<div class="itemData">
<div class="itemicon"><a href="/File:Item_1187.png" class="image">
<img alt="Item 1187.png" src="/images/Item_1187.png" width="40" height="40" /></a></div>
<p>MAGIC ITEM LORE ITEM <br />
Slot: BACK<br />
AC: 10<br />
STR: +9 DEX: +9 HP: +50<br />
Effect: {_EFFECT_LINK} (Worn)<br />
WT: 1.0 Size: MEDIUM<br />
Class: ALL<br />
Race: ALL<br />
</p>
</div>
</div>
<div class="itembotbg"></div>
<p>Dropped by: a fire giant</p>
</body></html>
"""


def _page(block: str, start: str = "itemData", end: str = "itembotbg") -> str:
    return f'<html><body><div class="{start}">{block}</div><div class="{end}"></div></body></html>'


class TestSegment:
    def test_extracts_lines_in_order(self):
        result = segment(_ITEM_PAGE)

        assert result is not None
        assert list(result.lines) == [
            "MAGIC ITEM LORE ITEM",
            "Slot: BACK",
            "AC: 10",
            "STR: +9 DEX: +9 HP: +50",
            f"Effect: {_EFFECT_LINK} (Worn)",
            "WT: 1.0 Size: MEDIUM",
            "Class: ALL",
            "Race: ALL",
        ]

    def test_extracts_image(self):
        result = segment(_ITEM_PAGE)

        assert result.image_src == "/images/Item_1187.png"

    def test_markup_holds_paragraph(self):
        result = segment(_ITEM_PAGE)

        assert result.markup.startswith("<p>")
        assert "Slot: BACK" in result.markup
        assert "Dropped by" not in result.markup

    def test_lines_are_lazy_and_single_pass(self):
        result = segment(_ITEM_PAGE)

        assert isinstance(result.lines, Iterator)
        assert len(list(result.lines)) == 8
        assert list(result.lines) == []

    def test_markers_case_insensitive(self):
        html = _page("<p>AC: 5</p>", start="ITEMDATA", end="ItemBotBg")

        result = segment(html)

        assert result is not None
        assert list(result.lines) == ["AC: 5"]

    def test_marker_among_several_classes(self):
        html = _page("<p>AC: 5</p>", start="wide itemData")

        assert segment(html) is not None

    def test_missing_start_marker(self):
        html = '<html><body><p>AC: 5</p><div class="itembotbg"></div></body></html>'

        assert segment(html) is None

    def test_missing_end_marker(self):
        html = '<html><body><div class="itemData"><p>AC: 5</p></div></body></html>'

        assert segment(html) is None

    def test_body_without_markers(self):
        assert segment("<html><body><p>Wizard</p><p>Level 52</p></body></html>") is None

    def test_no_paragraph_between_markers(self):
        html = (
            '<html><body><div class="itemData"><span>AC: 5</span></div>'
            '<div class="itembotbg"></div><p>Outside</p></body></html>'
        )

        assert segment(html) is None

    def test_missing_image_gives_empty_source(self):
        result = segment(_page("<p>AC: 5</p>"))

        assert result.image_src == ""

    def test_image_outside_block_ignored(self):
        html = (
            '<html><body><img src="/images/Logo.png" />'
            '<div class="itemData"><p>AC: 5</p></div><div class="itembotbg"></div>'
            "</body></html>"
        )

        assert segment(html).image_src == ""

    def test_non_image_sources_skipped(self):
        block = '<img src="/skins/spacer.gif" /><img src="/images/Item_5.png" /><p>AC: 5</p>'

        assert segment(_page(block)).image_src == "/images/Item_5.png"

    def test_inline_tags_reduced_to_text(self):
        result = segment(_page("<p><b>MAGIC ITEM</b><br/>AC: <span>5</span></p>"))

        assert list(result.lines) == ["MAGIC ITEM", "AC: 5"]

    def test_comments_and_blank_lines_dropped(self):
        result = segment(_page("<p><!-- generated --><br/>  <br/>HP: 10  </p>"))

        assert list(result.lines) == ["HP: 10"]

    def test_whitespace_inside_line_collapsed(self):
        result = segment(_page("<p>Slot:\n   BACK</p>"))

        assert list(result.lines) == ["Slot: BACK"]
