"""
Pytest fixtures for Sovereign tests.
"""

import pytest

from ..card_schema.card import CardChoice, CardData
from ..card_schema.catalog import CardCatalog
from ..card_schema.effect_dsl import cost, gain, harm, heal, requires, requires_health
from ..engine_core import evaluator
from ..engine_core.capitals import CapitalRegistry
from ..engine_core.resources import ResourceKind, ResourceLedger
from ..games.civilization import create_catalog


@pytest.fixture(autouse=True)
def reset_missing_reference_warnings():
    """Reset the remembered missing-reference warnings around each test."""
    evaluator._warned_references.clear()
    yield
    evaluator._warned_references.clear()


@pytest.fixture
def ledger() -> ResourceLedger:
    """Ledger with every resource at zero."""
    return ResourceLedger.create()


@pytest.fixture
def registry() -> CapitalRegistry:
    """Registry with the three preset capitals at full health."""
    return CapitalRegistry.create_default()


@pytest.fixture
def builtin_catalog() -> CardCatalog:
    return create_catalog()


@pytest.fixture
def granary_card() -> CardData:
    """A card with one gated choice and one free choice."""
    return CardData(
        id="granary",
        title="Granary",
        description="Build a granary.",
        choices=[
            CardChoice(
                label="Build",
                effects=[cost(ResourceKind.FOOD, 10), heal("Population", 10)],
                conditions=[requires(ResourceKind.FOOD, 10)],
            ),
            CardChoice(label="Skip", effects=[gain(ResourceKind.MONEY, 1)]),
        ],
    )


@pytest.fixture
def locked_card() -> CardData:
    """A card whose only choice needs more Power than a fresh game has."""
    return CardData(
        id="fortress",
        title="Fortress",
        choices=[
            CardChoice(
                label="Fortify",
                effects=[cost(ResourceKind.POWER, 500), heal("Military", 50)],
                conditions=[requires(ResourceKind.POWER, 500)],
            ),
        ],
    )


@pytest.fixture
def test_catalog(granary_card) -> CardCatalog:
    """Progression holds granary and windfall, Harm holds disaster."""
    windfall = CardData(
        id="windfall",
        title="Windfall",
        choices=[
            CardChoice(label="Take it", effects=[gain(ResourceKind.MONEY, 5)]),
            CardChoice(
                label="Give it away",
                effects=[heal("Government", 5)],
                conditions=[requires_health("Government", 50)],
            ),
        ],
    )
    disaster = CardData(
        id="disaster",
        title="Disaster",
        choices=[CardChoice(label="Endure", effects=[harm("Population", 10)])],
    )
    return CardCatalog({
        "Progression": [granary_card, windfall],
        "Harm": [disaster],
    })
