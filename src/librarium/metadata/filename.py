# ABOUTME: Filename and path parsing into author, series, title, and genre hints.
# ABOUTME: Pure functions over ordered regex tables; the first validated match wins.

import re
import unicodedata
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import PurePath

from librarium.metadata.types import EBOOK_EXTENSIONS, FilenameHints, SeriesInfo

# Keyword -> canonical genre. Keys are lowercase and accent-free because they are
# tested against a normalized path. Order matters: the first keyword found wins.
GENRE_KEYWORDS: dict[str, str] = {
    "science-fiction": "Science-Fiction",
    "sciencefiction": "Science-Fiction",
    "sci-fi": "Science-Fiction",
    "scifi": "Science-Fiction",
    "sf": "Science-Fiction",
    "fantasy": "Fantasy",
    "fantastique": "Fantastique",
    "policier": "Policier",
    "thriller": "Thriller",
    "mystere": "Mystère",
    "romance": "Romance",
    "historique": "Historique",
    "histoire": "Historique",
    "biographie": "Biographie",
    "bio": "Biographie",
    "autobiographie": "Autobiographie",
    "jeunesse": "Jeunesse",
    "enfant": "Jeunesse",
    "bd": "Bande Dessinée",
    "bande-dessinee": "Bande Dessinée",
    "bande dessinee": "Bande Dessinée",
    "manga": "Manga",
    "comics": "Comics",
    "poesie": "Poésie",
    "theatre": "Théâtre",
    "essai": "Essai",
    "philosophie": "Philosophie",
    "religion": "Religion",
    "spiritualite": "Spiritualité",
    "art": "Art",
    "cuisine": "Cuisine",
    "voyage": "Voyage",
    "guide": "Guide",
    "sante": "Santé",
    "bien-etre": "Bien-être",
    "developpement personnel": "Développement Personnel",
    "economie": "Économie",
    "politique": "Politique",
    "droit": "Droit",
    "informatique": "Informatique",
    "technique": "Technique",
    "science": "Science",
    "education": "Éducation",
    "horreur": "Horreur",
    "epouvante": "Horreur",
    "aventure": "Aventure",
    "western": "Western",
    "guerre": "Guerre",
    "espionnage": "Espionnage",
    "dystopie": "Dystopie",
    "utopie": "Utopie",
    "erotique": "Érotique",
    "humour": "Humour",
    "comedie": "Comédie",
    "drame": "Drame",
    "tragedie": "Tragédie",
    "conte": "Conte",
    "fable": "Fable",
    "mythologie": "Mythologie",
    "legende": "Légende",
    "nouvelle": "Nouvelle",
    "recueil": "Recueil",
    "anthologie": "Anthologie",
    "dictionnaire": "Dictionnaire",
    "encyclopedie": "Encyclopédie",
    "manuel": "Manuel",
    "scolaire": "Scolaire",
    "universitaire": "Universitaire",
    "academique": "Académique",
}

_PATH_SEPARATOR_RE = re.compile(r"[\\/]")
_DIGITS_RE = re.compile(r"^\d+$")

# Minimum length (exclusive) for an extracted author or series name.
_MIN_NAME_LENGTH = 2


def strip_diacritics(text: str) -> str:
    """Remove accents by decomposing to NFD and dropping combining marks."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def extract_genre(path: str | PurePath) -> str | None:
    """Guess a genre from the folder names in a path.

    Segments are checked from root to leaf; each segment is compared to every
    keyword (exact or substring match) and the first hit wins.
    """
    normalized = strip_diacritics(str(path).lower())
    for segment in _PATH_SEPARATOR_RE.split(normalized):
        if not segment:
            continue
        for keyword, genre in GENRE_KEYWORDS.items():
            if segment == keyword or keyword in segment:
                return genre
    return None


# (pattern, capture group holding the author). First valid match wins, so
# "Title - Author" shadows "Author - Title" whenever both could apply.
_AUTHOR_PATTERNS: list[tuple[re.Pattern[str], int]] = [
    # Title - Author
    (re.compile(r"^(.+)\s+-\s+(.+)$"), 2),
    # Author - Title (author without digits)
    (re.compile(r"^([^\d]+?)\s+-\s+(.+)$"), 1),
    # Title [Author] or Title (Author)
    (re.compile(r"^.+\s+[\[(]([^\[\]()]+)[\])]$"), 1),
    # Author - [Series] - Title
    (re.compile(r"^([^\d-]+?)\s+-\s+\[[^\]]+\]\s+-\s+.+$"), 1),
    # Title.Author Name.suffix
    (re.compile(r"^.+\.([^.]+\s+[^.]+)\.[^.]+$"), 1),
]


def _is_plausible_author(candidate: str) -> bool:
    return len(candidate) > _MIN_NAME_LENGTH and not _DIGITS_RE.match(candidate)


def extract_author(name: str) -> str | None:
    """Extract an author from an extension-stripped filename, or None."""
    for pattern, group in _AUTHOR_PATTERNS:
        match = pattern.match(name)
        if not match or not match.group(group):
            continue
        candidate = match.group(group).strip()
        if _is_plausible_author(candidate):
            return candidate
    return None


@dataclass(frozen=True)
class SeriesMatch:
    """Series information pulled out of a filename."""

    name: str
    number: int
    extracted_title: str | None = None

    @property
    def series(self) -> SeriesInfo:
        return SeriesInfo(name=self.name, number=self.number)


SeriesExtractor = Callable[[re.Match[str]], SeriesMatch | None]


def _groups(name_group: int, number_group: int, title_group: int | None) -> SeriesExtractor:
    """Build an extractor that reads name/number/title from fixed group positions."""

    def extract(match: re.Match[str]) -> SeriesMatch | None:
        series_name = (match.group(name_group) or "").strip()
        try:
            number = int(match.group(number_group))
        except (TypeError, ValueError):
            return None
        title = None
        if title_group is not None:
            title = (match.group(title_group) or "").strip() or None
        if len(series_name) <= _MIN_NAME_LENGTH or number <= 0:
            return None
        return SeriesMatch(name=series_name, number=number, extracted_title=title)

    return extract


_VOLUME_WORD = r"(?:Tome|T|Livre|L|Volume|Vol)"

_SERIES_PATTERNS: list[tuple[re.Pattern[str], SeriesExtractor]] = [
    # [Series N] Title or (Series N) Title
    (re.compile(r"^\s*[\[(]([^\d\])]+)\s+(\d+)[\])]\s*(.+)$", re.I), _groups(1, 2, 3)),
    # Series - Tome N - Title
    (re.compile(rf"^([^-]+)\s*-\s*{_VOLUME_WORD}\s*(\d+)\s*-\s*(.+)$", re.I), _groups(1, 2, 3)),
    # Series Tome N - Title
    (re.compile(rf"^([^\d]+)\s*{_VOLUME_WORD}\s*(\d+)\s*-\s*(.+)$", re.I), _groups(1, 2, 3)),
    # Series T.N - Title or Series T.N : Title
    (re.compile(r"^([^\d]+)\s*(?:T|L|Vol)\.\s*(\d+)\s*[:-]\s*(.+)$", re.I), _groups(1, 2, 3)),
    # Series N - Title or Series N: Title
    (re.compile(r"^([^\d]+)\s*(\d+)\s*[:-]\s*(.+)$", re.I), _groups(1, 2, 3)),
    # Title - Series N
    (re.compile(r"^(.+)\s*-\s*([^\d-]+)\s*(\d+)$", re.I), _groups(2, 3, 1)),
    # Series.N.Title
    (re.compile(r"^([^\d.]+)\.(\d+)\.(.+)$", re.I), _groups(1, 2, 3)),
    # Series N - Title, looser spacing
    (re.compile(r"^([^\d]+)\s*(\d+)\s*-\s*(.+)$", re.I), _groups(1, 2, 3)),
    # Bare "Name N", e.g. "Harry Potter 1"
    (re.compile(r"^([^\d]+)\s*(\d+)$", re.I), _groups(1, 2, None)),
]


def extract_series(name: str) -> SeriesMatch | None:
    """Extract series name, position, and a cleaner title from a filename.

    Patterns are tried in order; a match whose name is too short or whose
    number is not a positive integer is rejected and the next pattern is tried.
    """
    for pattern, extractor in _SERIES_PATTERNS:
        match = pattern.match(name)
        if not match:
            continue
        result = extractor(match)
        if result is not None:
            return result
    return None


def strip_extension(name: str) -> str:
    """Drop a trailing ebook extension; other dots (e.g. "R.R. Martin") are kept."""
    suffix = PurePath(name).suffix
    if suffix.lower() in EBOOK_EXTENSIONS:
        return name[: -len(suffix)]
    return name


def parse_filename(name: str, path: str | PurePath | None = None) -> FilenameHints:
    """Turn a filename (and optionally the path used for genre) into hints.

    Args:
        name: The filename, with or without its extension.
        path: Path whose folder names are searched for a genre keyword.
            Defaults to the filename itself.

    Returns:
        FilenameHints whose title is the series-extracted title when one was
        found, else the bare filename.
    """
    stem = strip_extension(name)
    hints = FilenameHints(title=stem)

    hints.genre = extract_genre(path if path is not None else name)
    hints.author = extract_author(stem)

    series = extract_series(stem)
    if series is not None:
        hints.series = series.series
        if series.extracted_title:
            hints.title = series.extracted_title

    return hints
