"""
Catalog Builder - Turns card definition sources into a CardCatalog.

The builder:
1. Accepts a file, a directory of files, or nothing (built-in decks)
2. Parses each file with the JSON or XML loader
3. Merges decks across files, rejecting duplicate ids within a deck
4. Returns a LoadResult that never raises

Files that fail to parse are logged and skipped; the rest still load.
If nothing usable is found the result carries an empty catalog, so draws
yield no card instead of crashing the game.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
import logging

from ..card_schema.card import CardData
from ..card_schema.catalog import CardCatalog
from .json_loader import load_json_file
from .xml_loader import load_xml_file

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".json", ".xml")


class LoadStatus(Enum):
    """Status of a catalog build."""
    SUCCESS = "success"
    PARTIAL = "partial"  # Some files or cards were skipped
    FAILED = "failed"  # Nothing could be loaded
    BUILTIN = "builtin"  # Built-in decks, no files read


@dataclass
class LoadResult:
    """
    Result of building a catalog.
    """
    status: LoadStatus
    catalog: CardCatalog

    files_loaded: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status != LoadStatus.FAILED


class CatalogBuilder:
    """
    Accumulates decks from several sources.

    Usage:
        builder = CatalogBuilder()
        builder.add_decks({"Harm": [plague]}, source="harm.json")
        catalog = builder.build()
    """

    def __init__(self):
        self._decks: dict[str, list[CardData]] = {}
        self._seen: dict[str, dict[str, str]] = {}  # deck -> card id -> source
        self.errors: list[str] = []

    def add_decks(self, decks: dict[str, list[CardData]], source: str = "") -> None:
        for deck, cards in decks.items():
            deck_cards = self._decks.setdefault(deck, [])
            seen = self._seen.setdefault(deck, {})
            for card in cards:
                if card.id in seen:
                    message = (
                        f"Duplicate card id '{card.id}' in deck '{deck}' "
                        f"({source or 'unknown'}), keeping the one from {seen[card.id] or 'unknown'}"
                    )
                    logger.error(message)
                    self.errors.append(message)
                    continue
                seen[card.id] = source
                deck_cards.append(card)

    def build(self) -> CardCatalog:
        return CardCatalog(self._decks)


def load_file(path: Path) -> tuple[dict[str, list[CardData]], list[str]]:
    """Load one file by suffix. Returns (decks, warnings)."""
    suffix = path.suffix.lower()
    if suffix == ".json":
        return load_json_file(path), []
    if suffix == ".xml":
        return load_xml_file(path)
    raise ValueError(f"Unsupported card file type: {path.name}")


def build_catalog(source: str | Path | None = None) -> LoadResult:
    """
    Build a catalog from a file, a directory, or the built-in decks.

    Args:
        source: Path to a .json/.xml file or a directory of them; None for built-ins

    Returns:
        LoadResult with the catalog (empty when loading failed)
    """
    if source is None:
        from ..games.civilization.setup import create_catalog
        catalog = create_catalog()
        logger.info("Loaded %d built-in cards", catalog.card_count)
        return LoadResult(status=LoadStatus.BUILTIN, catalog=catalog)

    path = Path(source)
    if path.is_dir():
        files = sorted(p for p in path.iterdir() if p.suffix.lower() in SUPPORTED_SUFFIXES)
        if not files:
            logger.warning("No card files found in %s", path)
            return LoadResult(
                status=LoadStatus.FAILED,
                catalog=CardCatalog.empty(),
                errors=[f"No card files found in {path}"],
            )
    elif path.is_file():
        files = [path]
    else:
        logger.warning("Cards source not found: %s", path)
        return LoadResult(
            status=LoadStatus.FAILED,
            catalog=CardCatalog.empty(),
            errors=[f"Cards source not found: {path}"],
        )

    builder = CatalogBuilder()
    result = LoadResult(status=LoadStatus.SUCCESS, catalog=CardCatalog.empty())

    for file_path in files:
        try:
            decks, warnings = load_file(file_path)
        except (OSError, ValueError) as e:
            logger.error("Failed to load cards from %s: %s", file_path.name, e)
            result.errors.append(str(e))
            continue
        builder.add_decks(decks, source=file_path.name)
        result.files_loaded.append(file_path.name)
        result.warnings.extend(warnings)

    for warning in result.warnings:
        logger.warning(warning)

    result.errors.extend(builder.errors)
    result.catalog = builder.build()

    if not result.files_loaded:
        result.status = LoadStatus.FAILED
    elif result.errors:
        result.status = LoadStatus.PARTIAL

    logger.info(
        "Loaded %d cards in %d deck(s) from %d file(s)",
        result.catalog.card_count, len(result.catalog.deck_names), len(result.files_loaded),
    )
    return result
