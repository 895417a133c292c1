"""
Card file models - Pydantic schema for JSON card definitions.

The JSON layout groups cards by deck:

    {
      "decks": {
        "Harm": [
          {
            "id": "plague",
            "title": "Plague",
            "description": "Sickness spreads through the capital.",
            "choices": [
              {
                "label": "Pay for physicians",
                "effects": [{"resourceType": "Money", "amount": -25}],
                "conditions": [{"type": "Resource", "resourceType": "Money", "minAmount": 25}]
              }
            ]
          }
        ]
      }
    }

An effect entry naming both a resource and a capital produces two effects.
"""

from __future__ import annotations
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..card_schema.card import CardChoice, CardData
from ..card_schema.effect_dsl import (
    CapitalCondition,
    CapitalEffect,
    Condition,
    Effect,
    ResourceCondition,
    ResourceEffect,
)
from ..engine_core.resources import ResourceKind


def _check_resource_type(value: Optional[str]) -> Optional[str]:
    if value is None or value == "":
        return None
    return ResourceKind.parse(value).value


class EffectModel(BaseModel):
    """A resource delta and/or a capital health delta."""
    resource_type: Optional[str] = Field(None, alias="resourceType")
    capital_type: Optional[str] = Field(None, alias="capitalType")
    amount: int = 0

    model_config = {"populate_by_name": True}

    @field_validator("resource_type")
    @classmethod
    def normalize_resource(cls, value: Optional[str]) -> Optional[str]:
        return _check_resource_type(value)

    @model_validator(mode="after")
    def check_target(self) -> EffectModel:
        if not self.resource_type and not self.capital_type:
            raise ValueError("effect needs resourceType or capitalType")
        return self

    def to_effects(self) -> list[Effect]:
        effects: list[Effect] = []
        if self.resource_type:
            effects.append(ResourceEffect(ResourceKind(self.resource_type), self.amount))
        if self.capital_type:
            effects.append(CapitalEffect(self.capital_type, float(self.amount)))
        return effects


class ConditionModel(BaseModel):
    """A minimum-resource or minimum-health requirement."""
    type: Literal["Resource", "Capital"]
    resource_type: Optional[str] = Field(None, alias="resourceType")
    capital_type: Optional[str] = Field(None, alias="capitalType")
    min_amount: int = Field(0, alias="minAmount")
    min_health: float = Field(0.0, alias="minHealth")

    model_config = {"populate_by_name": True}

    @field_validator("resource_type")
    @classmethod
    def normalize_resource(cls, value: Optional[str]) -> Optional[str]:
        return _check_resource_type(value)

    @model_validator(mode="after")
    def check_target(self) -> ConditionModel:
        if self.type == "Resource" and not self.resource_type:
            raise ValueError("Resource condition needs resourceType")
        if self.type == "Capital" and not self.capital_type:
            raise ValueError("Capital condition needs capitalType")
        return self

    def to_condition(self) -> Condition:
        if self.type == "Resource":
            return ResourceCondition(ResourceKind(self.resource_type), self.min_amount)
        return CapitalCondition(self.capital_type, self.min_health)


class ChoiceModel(BaseModel):
    label: str = "No Label"
    effects: list[EffectModel] = Field(default_factory=list)
    conditions: list[ConditionModel] = Field(default_factory=list)

    def to_choice(self) -> CardChoice:
        effects: list[Effect] = []
        for effect in self.effects:
            effects.extend(effect.to_effects())
        return CardChoice(
            label=self.label,
            effects=effects,
            conditions=[c.to_condition() for c in self.conditions],
        )


class CardModel(BaseModel):
    id: str = Field(..., min_length=1)
    title: str = "No Title"
    description: str = ""
    choices: list[ChoiceModel] = Field(default_factory=list)

    def to_card(self) -> CardData:
        return CardData(
            id=self.id,
            title=self.title,
            description=self.description,
            choices=[c.to_choice() for c in self.choices],
        )


class CardFileModel(BaseModel):
    """Top-level JSON document: deck name -> cards."""
    decks: dict[str, list[CardModel]] = Field(default_factory=dict)

    def to_decks(self) -> dict[str, list[CardData]]:
        return {
            deck: [card.to_card() for card in cards]
            for deck, cards in self.decks.items()
        }
