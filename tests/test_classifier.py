"""Tests for classifier module."""

import logging

import pytest

from eq_items import classifier
from eq_items.classifier import classify, classify_lines, split_fragments
from eq_items.exceptions import ParseError
from eq_items.models import Effect, Statistic

_HASTE_LINK = '<a href="/Haste_(Effect)" title="Haste (Effect)">Haste</a>'


class TestNumericFields:
    def test_plain_value(self):
        assert classify("AC: 15") == Statistic(code="AC", value=15.0)

    def test_leading_plus_is_positive(self):
        assert classify("STR: +5") == Statistic(code="STR", value=5.0)

    def test_leading_minus_is_negated(self):
        assert classify("STR: -5") == Statistic(code="STR", value=-5.0)

    def test_trailing_percent_stripped(self):
        assert classify("Haste: 21%") == Statistic(code="HASTE", value=21.0)

    def test_signed_percent(self):
        assert classify("Haste: +21%") == Statistic(code="HASTE", value=21.0)

    def test_decimal_value(self):
        assert classify("WT: 2.5") == Statistic(code="WT", value=2.5)

    def test_resist_label_keeps_both_words(self):
        assert classify("SV FIRE: +10") == Statistic(code="SV FIRE", value=10.0)

    def test_multi_word_label_spacing_normalized(self):
        assert classify("Atk  Delay: 30") == Statistic(code="ATK DELAY", value=30.0)

    def test_weight_reduction(self):
        assert classify("Weight Reduction: 50%") == Statistic(code="WEIGHT REDUCTION", value=50.0)

    def test_lowercase_label(self):
        assert classify("hp: 40") == Statistic(code="HP", value=40.0)

    def test_value_is_first_token(self):
        assert classify("DMG: 9 Dmg Bonus: 2") == Statistic(code="DMG", value=9.0)

    def test_malformed_number_dropped(self, caplog):
        with caplog.at_level(logging.WARNING, logger="eq_items.classifier"):
            assert classify("Charges: Unlimited") is None
        assert "Unlimited" in caplog.text

    def test_empty_value_dropped(self):
        assert classify("Mana:") is None


class TestParseSignedNumber:
    def test_rejects_words(self):
        with pytest.raises(ParseError, match="inf"):
            classifier.parse_signed_number("Charges: inf", " inf")

    def test_rejects_empty(self):
        with pytest.raises(ParseError):
            classifier.parse_signed_number("HP:", "")

    def test_minus_anywhere_negates(self):
        assert classifier.parse_signed_number("STR: 5-", "5-") == -5.0


class TestAffinity:
    def test_no_drop(self):
        assert classify("No Drop") == Statistic(code="AFFINITY", effect="NO DROP", value=None)

    @pytest.mark.parametrize(
        "line",
        ["NO DROP", "nodrop", "No-Rent", "NO TRADE", "LORE ITEM", "QUEST ITEM", "Temporary"],
    )
    def test_keyword_variants(self, line):
        stat = classify(line)
        assert stat.code == "AFFINITY"
        assert stat.effect == line.upper()
        assert stat.value is None

    def test_combined_flags_kept_as_one_line(self):
        stat = classify("MAGIC ITEM LORE ITEM NO DROP")
        assert stat == Statistic(code="AFFINITY", effect="MAGIC ITEM LORE ITEM NO DROP")


class TestTextFields:
    def test_class(self):
        assert classify("Class: WARRIOR") == Statistic(code="CLASS", effect="WARRIOR")

    def test_value_upper_cased_and_trimmed(self):
        assert classify("Slot:  back ") == Statistic(code="SLOT", effect="BACK")

    def test_race(self):
        assert classify("Race: HUM ELF") == Statistic(code="RACE", effect="HUM ELF")

    def test_skill_value_keeps_later_colons(self):
        assert classify("Skill: Piercing: fast") == Statistic(code="SKILL", effect="PIERCING: FAST")


class TestCapacity:
    def test_size_capacity_before_size(self):
        assert classify("Size Capacity: MEDIUM") == Statistic(code="size capacity", effect="MEDIUM")

    def test_plain_capacity_is_numeric(self):
        assert classify("Capacity: 8") == Statistic(code="CAPACITY", value=8.0)


class TestEffects:
    def test_anchor_effect(self):
        result = classify(f"Effect: {_HASTE_LINK} (Worn)")

        assert result == Effect(name="Haste (Effect)", uri="/Haste_(Effect)", restriction="(Worn)")

    def test_effect_label_with_number_stays_effect(self):
        result = classify(f"Effect: {_HASTE_LINK} ATK: 5")

        assert isinstance(result, Effect)
        assert result.name == "Haste (Effect)"

    def test_casting_time_line_without_anchor(self):
        result = classify("Casting Time: Instant")

        assert result == Effect(name="", uri="", restriction="Casting Time: Instant")
        assert not result.is_valid

    def test_combat_marker(self):
        result = classify("Proc (Combat)")

        assert isinstance(result, Effect)

    def test_entities_in_attributes_unescaped(self):
        line = 'Effect: <a href="/Fire_&amp;_Ice" title="Fire &amp; Ice">Fire &amp; Ice</a>'

        result = classify(line)

        assert result.name == "Fire & Ice"
        assert result.uri == "/Fire_&_Ice"
        assert result.restriction == ""

    def test_first_anchor_wins(self):
        line = (
            'Effect: <a href="/First" title="First">First</a> '
            'and <a href="/Second" title="Second">Second</a> at Level 20'
        )

        result = classify(line)

        assert result.name == "First"
        assert result.uri == "/First"
        assert result.restriction == "and at Level 20"


class TestUnrecognized:
    def test_unknown_line(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="eq_items.classifier"):
            assert classify("Dropped by a gnoll") is None
        assert "Unrecognized" in caplog.text

    def test_blank_line(self):
        assert classify("   ") is None


class TestSplitFragments:
    def test_single_label_untouched(self):
        assert split_fragments("AC: 15") == ["AC: 15"]

    def test_several_numeric_labels(self):
        assert split_fragments("STR: +5 DEX: +3 AGI: -2") == ["STR: +5", "DEX: +3", "AGI: -2"]

    def test_skill_and_delay(self):
        assert split_fragments("Skill: 1H Slashing Atk Delay: 30") == [
            "Skill: 1H Slashing",
            "Atk Delay: 30",
        ]

    def test_prefix_before_first_label_kept(self):
        assert split_fragments("MAGIC ITEM Slot: BACK") == ["MAGIC ITEM", "Slot: BACK"]

    def test_size_capacity_not_split(self):
        assert split_fragments("Size Capacity: LARGE") == ["Size Capacity: LARGE"]

    def test_resists(self):
        assert split_fragments("SV FIRE: +10 SV COLD: +5") == ["SV FIRE: +10", "SV COLD: +5"]

    def test_effect_lines_never_split(self):
        line = f"Effect: {_HASTE_LINK} AC: 5"
        assert split_fragments(line) == [line]

    def test_no_labels(self):
        assert split_fragments("LORE ITEM") == ["LORE ITEM"]


class TestClassifyLines:
    def test_collects_statistics_and_effects_in_order(self):
        lines = [
            "MAGIC ITEM NO DROP",
            "Slot: BACK",
            "AC: 10",
            "STR: +5 DEX: +3",
            "Charges: Unlimited",
            f"Effect: {_HASTE_LINK} (Worn)",
            "Something unexpected",
        ]

        statistics, effects = classify_lines(lines)

        assert [s.code for s in statistics] == ["AFFINITY", "SLOT", "AC", "STR", "DEX"]
        assert statistics[3].value == 5.0
        assert effects == [
            Effect(name="Haste (Effect)", uri="/Haste_(Effect)", restriction="(Worn)")
        ]

    def test_accepts_generator(self):
        statistics, effects = classify_lines(line for line in ["HP: 50", "Mana: 30"])

        assert [(s.code, s.value) for s in statistics] == [("HP", 50.0), ("MANA", 30.0)]
        assert effects == []

    def test_rules_keep_priority_order(self):
        assert [rule.name for rule in classifier.RULES] == [
            "capacity",
            "affinity",
            "text_field",
            "numeric_field",
            "effect",
        ]
