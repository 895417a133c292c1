"""
Civilization Cards - Built-in event cards.

Decks:
- Progression: investments that trade resources for growth
- ResourceSupport: windfalls, mostly free
- Harm: disasters where every option costs something
- BigEvent: rare, large swings gated by strong conditions

Capital names used here match the presets in engine_core.capitals.
"""

from ...card_schema.card import CardData, CardChoice, Deck
from ...card_schema.effect_dsl import (
    gain,
    cost,
    heal,
    harm,
    requires,
    requires_health,
)
from ...engine_core.resources import ResourceKind

MONEY = ResourceKind.MONEY
FOOD = ResourceKind.FOOD
POWER = ResourceKind.POWER


# ============================================================================
# Progression
# ============================================================================

MARKET_REFORM = CardData(
    id="market_reform",
    title="Market Reform",
    description="Merchants petition the Government to loosen trade rules.",
    choices=[
        CardChoice(
            label="Fund the reform",
            effects=[cost(MONEY, 20), heal("Government", 15)],
            conditions=[requires(MONEY, 20)],
        ),
        CardChoice(
            label="Ignore the merchants",
            effects=[harm("Government", 5)],
        ),
    ],
)

IRRIGATION = CardData(
    id="irrigation",
    title="Irrigation Canals",
    description="Engineers propose canals to water the outer fields.",
    choices=[
        CardChoice(
            label="Dig the canals",
            effects=[cost(MONEY, 15), heal("Population", 20)],
            conditions=[requires(MONEY, 15)],
        ),
        CardChoice(
            label="Draft farmers as diggers",
            effects=[cost(FOOD, 10), heal("Population", 10)],
            conditions=[requires(FOOD, 10)],
        ),
        CardChoice(label="Postpone", effects=[]),
    ],
)

DRILL_SEASON = CardData(
    id="drill_season",
    title="Drill Season",
    description="The generals ask for a season of training.",
    choices=[
        CardChoice(
            label="Train the army",
            effects=[cost(FOOD, 12), heal("Military", 15)],
            conditions=[requires(FOOD, 12)],
        ),
        CardChoice(
            label="Send them home",
            effects=[harm("Military", 5), gain(FOOD, 5)],
        ),
    ],
)


# ============================================================================
# ResourceSupport
# ============================================================================

BUMPER_HARVEST = CardData(
    id="bumper_harvest",
    title="Bumper Harvest",
    description="The granaries overflow this year.",
    choices=[
        CardChoice(label="Store the grain", effects=[gain(FOOD, 25)]),
        CardChoice(label="Sell the surplus", effects=[gain(MONEY, 20)]),
    ],
)

TRIBUTE = CardData(
    id="tribute",
    title="Foreign Tribute",
    description="A neighbouring realm sends gifts to keep the peace.",
    choices=[
        CardChoice(label="Accept the gold", effects=[gain(MONEY, 15)]),
        CardChoice(
            label="Demand weapons instead",
            effects=[gain(POWER, 15)],
            conditions=[requires_health("Military", 50)],
        ),
    ],
)

VOLUNTEERS = CardData(
    id="volunteers",
    title="Volunteers",
    description="Young citizens offer to serve.",
    choices=[
        CardChoice(label="Enlist them", effects=[gain(POWER, 10), heal("Military", 5)]),
        CardChoice(label="Put them to work", effects=[gain(FOOD, 10)]),
    ],
)


# ============================================================================
# Harm
# ============================================================================

PLAGUE = CardData(
    id="plague",
    title="Plague",
    description="Sickness spreads through the capital.",
    choices=[
        CardChoice(
            label="Pay for physicians",
            effects=[cost(MONEY, 25), harm("Population", 5)],
            conditions=[requires(MONEY, 25)],
        ),
        CardChoice(
            label="Quarantine the districts",
            effects=[harm("Population", 15), harm("Government", 5)],
        ),
    ],
)

BANDIT_RAID = CardData(
    id="bandit_raid",
    title="Bandit Raid",
    description="Bandits strike the grain convoys.",
    choices=[
        CardChoice(
            label="Hunt them down",
            effects=[cost(POWER, 15)],
            conditions=[requires(POWER, 15), requires_health("Military", 30)],
        ),
        CardChoice(
            label="Absorb the losses",
            effects=[cost(FOOD, 20), harm("Population", 5)],
        ),
    ],
)

DROUGHT = CardData(
    id="drought",
    title="Drought",
    description="No rain has fallen for months.",
    choices=[
        CardChoice(
            label="Import food",
            effects=[cost(MONEY, 30), gain(FOOD, 10)],
            conditions=[requires(MONEY, 30)],
        ),
        CardChoice(label="Ration", effects=[harm("Population", 20)]),
    ],
)


# ============================================================================
# BigEvent
# ============================================================================

COUP = CardData(
    id="coup",
    title="Attempted Coup",
    description="A faction of officers moves against the Government.",
    choices=[
        CardChoice(
            label="Crush the plotters",
            effects=[cost(POWER, 30), harm("Military", 10), heal("Government", 10)],
            conditions=[requires(POWER, 30)],
        ),
        CardChoice(
            label="Buy their loyalty",
            effects=[cost(MONEY, 40)],
            conditions=[requires(MONEY, 40), requires_health("Government", 40)],
        ),
        CardChoice(
            label="Concede power",
            effects=[harm("Government", 40), heal("Military", 10)],
        ),
    ],
)

GOLDEN_AGE = CardData(
    id="golden_age",
    title="Golden Age",
    description="Poets, builders and generals all prosper at once.",
    choices=[
        CardChoice(
            label="Celebrate",
            effects=[heal("Government", 20), heal("Population", 20), heal("Military", 20)],
            conditions=[
                requires_health("Government", 60),
                requires_health("Population", 60),
            ],
        ),
        CardChoice(label="Save for hard times", effects=[gain(MONEY, 30), gain(FOOD, 30)]),
    ],
)


# ============================================================================
# Card Collection
# ============================================================================

CIVILIZATION_DECKS: dict[str, list[CardData]] = {
    Deck.PROGRESSION.value: [MARKET_REFORM, IRRIGATION, DRILL_SEASON],
    Deck.RESOURCE_SUPPORT.value: [BUMPER_HARVEST, TRIBUTE, VOLUNTEERS],
    Deck.HARM.value: [PLAGUE, BANDIT_RAID, DROUGHT],
    Deck.BIG_EVENT.value: [COUP, GOLDEN_AGE],
}


def get_all_cards() -> list[CardData]:
    """Every built-in card across all decks."""
    return [card for cards in CIVILIZATION_DECKS.values() for card in cards]


def get_card_by_id(card_id: str) -> CardData | None:
    """Look up a built-in card by ID."""
    for card in get_all_cards():
        if card.id == card_id:
            return card
    return None
