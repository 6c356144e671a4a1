# ABOUTME: Field-by-field merge of filename hints and provider metadata into a BookRecord.
# ABOUTME: Provider values beat filename hints, which beat the built-in sentinels.

from typing import Any

from librarium.metadata.types import (
    UNCATEGORIZED,
    UNKNOWN_AUTHOR,
    BookRecord,
    FilenameHints,
    ProviderMetadata,
    ScannedFile,
)


def first_present(*values: Any) -> Any:
    """Return the first value that is neither None nor blank."""
    for value in values:
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def merge_record(
    scanned: ScannedFile,
    hints: FilenameHints,
    metadata: ProviderMetadata | None,
    *,
    book_id: str,
    added_at: str,
) -> BookRecord:
    """Build the canonical record for one file.

    Each field is taken whole from the highest-precedence source that has it:
    provider metadata, then filename hints, then the default sentinel. The
    series in particular is never assembled from pieces of both sources.
    The cover is left unset for the cover resolver.
    """
    provider = metadata or ProviderMetadata(source="")
    provider_author = ", ".join(a.strip() for a in provider.authors if a and a.strip())

    return BookRecord(
        id=book_id,
        title=first_present(provider.title, hints.title, scanned.stem, scanned.name),
        author=first_present(provider_author, hints.author, UNKNOWN_AUTHOR),
        genre=first_present(provider.category, hints.genre, UNCATEGORIZED),
        language=provider.language or "",
        publisher=provider.publisher or "",
        published_date=provider.published_date or "",
        summary=provider.description or "",
        series=provider.series if provider.series is not None else hints.series,
        cover=None,
        file_path=str(scanned.path),
        file_type=scanned.file_type,
        file_size=scanned.size,
        to_read=scanned.to_read,
        added_date=added_at,
    )
