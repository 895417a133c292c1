"""
Tests for card definition loaders.

Tests:
- JSON documents validate and convert to cards
- XML documents in the card file format
- Directory loading skips broken files
- build_catalog fails closed
"""

import json

import pytest

from ..card_schema.effect_dsl import (
    CapitalCondition,
    CapitalEffect,
    ResourceCondition,
    ResourceEffect,
)
from ..engine_core.resources import ResourceKind
from ..loader import LoadStatus, build_catalog, parse_json, parse_xml
from ..loader.xml_loader import DEFAULT_DECK

PLAGUE_JSON = {
    "decks": {
        "Harm": [
            {
                "id": "plague",
                "title": "Plague",
                "description": "Sickness spreads.",
                "choices": [
                    {
                        "label": "Pay for physicians",
                        "effects": [
                            {"resourceType": "Money", "amount": -25},
                            {"capitalType": "Population", "amount": -5},
                        ],
                        "conditions": [
                            {"type": "Resource", "resourceType": "Money", "minAmount": 25},
                        ],
                    },
                    {"label": "Pray", "effects": [{"capitalType": "Population", "amount": -15}]},
                ],
            }
        ]
    }
}

PLAGUE_XML = """
<Cards deck="Harm">
  <Card id="plague">
    <Title>Plague</Title>
    <Description>Sickness spreads.</Description>
    <Choices>
      <Choice>
        <Label>Pay for physicians</Label>
        <Effects>
          <Effect><ResourceType>Money</ResourceType><Amount>-25</Amount></Effect>
          <Effect><CapitalType>Population</CapitalType><Amount>-5</Amount></Effect>
        </Effects>
        <Conditions>
          <Condition type="Resource"><ResourceType>Money</ResourceType><MinAmount>25</MinAmount></Condition>
          <Condition type="Capital"><CapitalType>Government</CapitalType><MinHealth>30</MinHealth></Condition>
        </Conditions>
      </Choice>
    </Choices>
  </Card>
</Cards>
"""


class TestJsonLoader:
    """Tests for parse_json."""

    def test_parses_cards(self):
        decks = parse_json(json.dumps(PLAGUE_JSON))
        card = decks["Harm"][0]

        assert card.id == "plague"
        assert [c.label for c in card.choices] == ["Pay for physicians", "Pray"]
        pay = card.choices[0]
        assert pay.effects == (
            ResourceEffect(ResourceKind.MONEY, -25),
            CapitalEffect("Population", -5.0),
        )
        assert pay.conditions == (ResourceCondition(ResourceKind.MONEY, 25),)

    def test_effect_with_both_targets_yields_two_effects(self):
        doc = {"decks": {"Harm": [{
            "id": "storm",
            "choices": [{
                "label": "Endure",
                "effects": [{"resourceType": "food", "capitalType": "Population", "amount": -3}],
            }],
        }]}}
        choice = parse_json(json.dumps(doc))["Harm"][0].choices[0]
        assert choice.effects == (
            ResourceEffect(ResourceKind.FOOD, -3),
            CapitalEffect("Population", -3.0),
        )

    def test_defaults_for_missing_title(self):
        doc = {"decks": {"Harm": [{"id": "quiet"}]}}
        card = parse_json(json.dumps(doc))["Harm"][0]
        assert card.title == "No Title"
        assert card.choices == ()

    def test_invalid_json_raises(self):
        with pytest.raises(ValueError, match="invalid JSON"):
            parse_json("{not json", source="broken.json")

    def test_unknown_resource_raises(self):
        doc = {"decks": {"Harm": [{
            "id": "gold",
            "choices": [{"label": "Mine", "effects": [{"resourceType": "Gold", "amount": 3}]}],
        }]}}
        with pytest.raises(ValueError):
            parse_json(json.dumps(doc))

    def test_effect_without_target_raises(self):
        doc = {"decks": {"Harm": [{
            "id": "void",
            "choices": [{"label": "Nothing", "effects": [{"amount": 3}]}],
        }]}}
        with pytest.raises(ValueError):
            parse_json(json.dumps(doc))

    def test_card_without_id_raises(self):
        doc = {"decks": {"Harm": [{"title": "Anonymous"}]}}
        with pytest.raises(ValueError):
            parse_json(json.dumps(doc))


class TestXmlLoader:
    """Tests for parse_xml."""

    def test_parses_cards(self):
        decks, warnings = parse_xml(PLAGUE_XML)
        card = decks["Harm"][0]

        assert warnings == []
        assert card.title == "Plague"
        choice = card.choices[0]
        assert choice.effects == (
            ResourceEffect(ResourceKind.MONEY, -25),
            CapitalEffect("Population", -5.0),
        )
        assert choice.conditions == (
            ResourceCondition(ResourceKind.MONEY, 25),
            CapitalCondition("Government", 30.0),
        )

    def test_card_deck_attribute_wins(self):
        xml = '<Cards deck="Harm"><Card id="a" deck="BigEvent"><Title>A</Title></Card></Cards>'
        decks, _ = parse_xml(xml)
        assert list(decks) == ["BigEvent"]

    def test_missing_deck_uses_default_with_warning(self):
        decks, warnings = parse_xml('<Cards><Card id="a"><Title>A</Title></Card></Cards>')
        assert list(decks) == [DEFAULT_DECK]
        assert len(warnings) == 1

    def test_unknown_condition_type_dropped(self):
        xml = """
        <Cards deck="Harm"><Card id="a"><Choices><Choice>
          <Label>Go</Label>
          <Conditions><Condition type="Weather"><MinAmount>1</MinAmount></Condition></Conditions>
        </Choice></Choices></Card></Cards>
        """
        decks, warnings = parse_xml(xml)
        assert decks["Harm"][0].choices[0].conditions == ()
        assert any("Weather" in w for w in warnings)

    def test_missing_label_placeholder(self):
        xml = '<Cards deck="Harm"><Card id="a"><Choices><Choice/></Choices></Card></Cards>'
        decks, _ = parse_xml(xml)
        assert decks["Harm"][0].choices[0].label == "No Label"

    def test_malformed_xml_raises(self):
        with pytest.raises(ValueError, match="malformed XML"):
            parse_xml("<Cards><Card>")

    def test_card_without_id_raises(self):
        with pytest.raises(ValueError):
            parse_xml('<Cards deck="Harm"><Card><Title>A</Title></Card></Cards>')

    def test_bad_amount_raises(self):
        xml = """
        <Cards deck="Harm"><Card id="a"><Choices><Choice><Effects>
          <Effect><ResourceType>Money</ResourceType><Amount>lots</Amount></Effect>
        </Effects></Choice></Choices></Card></Cards>
        """
        with pytest.raises(ValueError, match="not a number"):
            parse_xml(xml)


class TestBuildCatalog:
    """Tests for build_catalog."""

    def test_builtin_when_no_source(self):
        result = build_catalog()
        assert result.status == LoadStatus.BUILTIN
        assert result.catalog.card_count > 0

    def test_single_json_file(self, tmp_path):
        path = tmp_path / "harm.json"
        path.write_text(json.dumps(PLAGUE_JSON), encoding="utf-8")

        result = build_catalog(path)

        assert result.status == LoadStatus.SUCCESS
        assert result.files_loaded == ["harm.json"]
        assert result.catalog.get_by_id("Harm", "plague") is not None

    def test_directory_mixes_formats(self, tmp_path):
        (tmp_path / "a.json").write_text(json.dumps(PLAGUE_JSON), encoding="utf-8")
        (tmp_path / "b.xml").write_text(
            '<Cards deck="BigEvent"><Card id="comet"><Title>Comet</Title></Card></Cards>',
            encoding="utf-8",
        )
        (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")

        result = build_catalog(tmp_path)

        assert result.status == LoadStatus.SUCCESS
        assert result.files_loaded == ["a.json", "b.xml"]
        assert result.catalog.deck_names == ("Harm", "BigEvent")

    def test_broken_file_skipped(self, tmp_path):
        """One unreadable file gives PARTIAL; the others still load."""
        (tmp_path / "a.json").write_text(json.dumps(PLAGUE_JSON), encoding="utf-8")
        (tmp_path / "b.json").write_text("{broken", encoding="utf-8")

        result = build_catalog(tmp_path)

        assert result.status == LoadStatus.PARTIAL
        assert result.ok
        assert result.files_loaded == ["a.json"]
        assert len(result.errors) == 1
        assert result.catalog.card_count == 1

    def test_duplicate_ids_keep_first(self, tmp_path):
        """The same id twice in a deck keeps the first file's card."""
        (tmp_path / "a.json").write_text(json.dumps(PLAGUE_JSON), encoding="utf-8")
        (tmp_path / "b.xml").write_text(
            '<Cards deck="Harm"><Card id="plague"><Title>Other Plague</Title></Card></Cards>',
            encoding="utf-8",
        )

        result = build_catalog(tmp_path)

        assert result.status == LoadStatus.PARTIAL
        assert result.catalog.get_by_id("Harm", "plague").title == "Plague"
        assert any("Duplicate card id 'plague'" in e for e in result.errors)

    def test_missing_path_fails_closed(self, tmp_path):
        result = build_catalog(tmp_path / "missing")
        assert result.status == LoadStatus.FAILED
        assert not result.ok
        assert result.catalog.is_empty

    def test_empty_directory_fails_closed(self, tmp_path):
        result = build_catalog(tmp_path)
        assert result.status == LoadStatus.FAILED
        assert result.catalog.is_empty

    def test_all_files_broken_fails_closed(self, tmp_path):
        (tmp_path / "a.json").write_text("[]", encoding="utf-8")
        result = build_catalog(tmp_path)
        assert result.status == LoadStatus.FAILED
        assert result.catalog.is_empty
