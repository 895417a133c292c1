"""
Loader - Builds the card catalog from card definition files.

The loader:
1. Reads JSON (pydantic-validated) or XML card files
2. Groups cards into decks
3. Rejects duplicate ids within a deck
4. Fails closed with an empty catalog instead of raising

The rest of the engine only sees the resulting CardCatalog.
"""

from .builder import build_catalog, CatalogBuilder, LoadResult, LoadStatus
from .json_loader import parse_json, load_json_file
from .xml_loader import parse_xml, load_xml_file

__all__ = [
    "build_catalog",
    "CatalogBuilder",
    "LoadResult",
    "LoadStatus",
    "parse_json",
    "load_json_file",
    "parse_xml",
    "load_xml_file",
]
