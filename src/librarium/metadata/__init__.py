# ABOUTME: Metadata package: filename parsing, provider lookups, and their cache.
# ABOUTME: Exports the data types shared by the rest of Librarium.

from librarium.metadata.cache import CACHE_MISS, MetadataCache, make_cache_key
from librarium.metadata.filename import parse_filename
from librarium.metadata.provider import MetadataProvider, lookup_metadata
from librarium.metadata.types import (
    BookRecord,
    Catalogue,
    FilenameHints,
    ProviderMetadata,
    ScannedFile,
    SeriesInfo,
)

__all__ = [
    "CACHE_MISS",
    "BookRecord",
    "Catalogue",
    "FilenameHints",
    "MetadataCache",
    "MetadataProvider",
    "ProviderMetadata",
    "ScannedFile",
    "SeriesInfo",
    "lookup_metadata",
    "make_cache_key",
    "parse_filename",
]
