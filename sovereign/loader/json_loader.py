"""
JSON card loader - validates documents against CardFileModel.
"""

from __future__ import annotations
import json
from pathlib import Path

from pydantic import ValidationError

from ..card_schema.card import CardData
from .models import CardFileModel


def parse_json(text: str, source: str = "<string>") -> dict[str, list[CardData]]:
    """
    Parse a JSON document into decks.

    Raises:
        ValueError if the document is not valid JSON or fails the schema
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"{source}: invalid JSON: {e}") from e

    try:
        document = CardFileModel.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"{source}: {e.error_count()} schema error(s): {e}") from e

    return document.to_decks()


def load_json_file(path: str | Path) -> dict[str, list[CardData]]:
    path = Path(path)
    return parse_json(path.read_text(encoding="utf-8"), source=path.name)
