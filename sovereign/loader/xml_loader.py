"""
XML card loader.

Format:

    <Cards deck="Harm">
      <Card id="plague" deck="Harm">
        <Title>Plague</Title>
        <Description>Sickness spreads through the capital.</Description>
        <Choices>
          <Choice>
            <Label>Pay for physicians</Label>
            <Effects>
              <Effect><ResourceType>Money</ResourceType><Amount>-25</Amount></Effect>
              <Effect><CapitalType>Population</CapitalType><Amount>-5</Amount></Effect>
            </Effects>
            <Conditions>
              <Condition type="Resource"><ResourceType>Money</ResourceType><MinAmount>25</MinAmount></Condition>
            </Conditions>
          </Choice>
        </Choices>
      </Card>
    </Cards>

The deck comes from the card's deck attribute, then the root's, then
DEFAULT_DECK. Missing titles and labels get placeholders. Conditions with an
unknown type are dropped with a warning.
"""

from __future__ import annotations
import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from ..card_schema.card import CardChoice, CardData, Deck
from ..card_schema.effect_dsl import (
    CapitalCondition,
    CapitalEffect,
    Condition,
    Effect,
    ResourceCondition,
    ResourceEffect,
)
from ..engine_core.resources import ResourceKind

logger = logging.getLogger(__name__)

DEFAULT_DECK = Deck.PROGRESSION.value


def _text(element: ET.Element | None, tag: str, default: str | None = None) -> str | None:
    if element is None:
        return default
    child = element.find(tag)
    if child is None or child.text is None:
        return default
    value = child.text.strip()
    return value if value else default


def parse_xml(text: str, source: str = "<string>") -> tuple[dict[str, list[CardData]], list[str]]:
    """
    Parse an XML document into decks.

    Returns:
        (deck name -> cards, warnings)

    Raises:
        ValueError if the document is malformed or a card is invalid
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise ValueError(f"{source}: malformed XML: {e}") from e

    warnings: list[str] = []
    decks: dict[str, list[CardData]] = {}
    root_deck = root.get("deck")

    for card_el in root.findall("Card"):
        deck = card_el.get("deck") or root_deck
        if not deck:
            deck = DEFAULT_DECK
            warnings.append(
                f"{source}: card '{card_el.get('id')}' has no deck, using {DEFAULT_DECK}"
            )
        card = _parse_card(card_el, source, warnings)
        decks.setdefault(deck, []).append(card)

    return decks, warnings


def load_xml_file(path: str | Path) -> tuple[dict[str, list[CardData]], list[str]]:
    path = Path(path)
    return parse_xml(path.read_text(encoding="utf-8"), source=path.name)


def _parse_card(card_el: ET.Element, source: str, warnings: list[str]) -> CardData:
    card_id = card_el.get("id")
    if not card_id:
        raise ValueError(f"{source}: <Card> without id attribute")

    choices_el = card_el.find("Choices")
    choices = []
    if choices_el is not None:
        for choice_el in choices_el.findall("Choice"):
            choices.append(_parse_choice(choice_el, f"{source}:{card_id}", warnings))

    return CardData(
        id=card_id,
        title=_text(card_el, "Title", "No Title"),
        description=_text(card_el, "Description", ""),
        choices=choices,
    )


def _parse_choice(choice_el: ET.Element, where: str, warnings: list[str]) -> CardChoice:
    effects: list[Effect] = []
    effects_el = choice_el.find("Effects")
    if effects_el is not None:
        for effect_el in effects_el.findall("Effect"):
            effects.extend(_parse_effect(effect_el, where))

    conditions: list[Condition] = []
    conditions_el = choice_el.find("Conditions")
    if conditions_el is not None:
        for condition_el in conditions_el.findall("Condition"):
            condition = _parse_condition(condition_el, where)
            if condition is None:
                warnings.append(
                    f"{where}: unknown condition type '{condition_el.get('type')}' ignored"
                )
                continue
            conditions.append(condition)

    return CardChoice(
        label=_text(choice_el, "Label", "No Label"),
        effects=effects,
        conditions=conditions,
    )


def _parse_effect(effect_el: ET.Element, where: str) -> list[Effect]:
    amount = _parse_number(_text(effect_el, "Amount", "0"), int, where)
    effects: list[Effect] = []

    resource = _text(effect_el, "ResourceType")
    if resource:
        effects.append(ResourceEffect(ResourceKind.parse(resource), amount))

    capital = _text(effect_el, "CapitalType")
    if capital:
        effects.append(CapitalEffect(capital, float(amount)))

    if not effects:
        raise ValueError(f"{where}: <Effect> needs ResourceType or CapitalType")
    return effects


def _parse_condition(condition_el: ET.Element, where: str) -> Condition | None:
    condition_type = condition_el.get("type")
    if condition_type == "Resource":
        resource = _text(condition_el, "ResourceType")
        if not resource:
            raise ValueError(f"{where}: Resource condition needs ResourceType")
        min_amount = _parse_number(_text(condition_el, "MinAmount", "0"), int, where)
        return ResourceCondition(ResourceKind.parse(resource), min_amount)
    if condition_type == "Capital":
        capital = _text(condition_el, "CapitalType")
        if not capital:
            raise ValueError(f"{where}: Capital condition needs CapitalType")
        min_health = _parse_number(_text(condition_el, "MinHealth", "0"), float, where)
        return CapitalCondition(capital, min_health)
    return None


def _parse_number(raw: str, convert, where: str):
    try:
        return convert(raw)
    except ValueError:
        raise ValueError(f"{where}: not a number: {raw!r}")
