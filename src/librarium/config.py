# ABOUTME: Run settings for a catalogue build, read from environment variables.
# ABOUTME: Defaults match the layout the library web UI serves its data from.

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

DEFAULT_LIBRARY_PATH = (
    Path.home() / "Library" / "Mobile Documents" / "com~apple~CloudDocs" / "collection livre et BD"
)
DEFAULT_TO_READ_DIRNAME = "livre a lire"
DEFAULT_OUTPUT_PATH = Path("public") / "data" / "catalogue.json"
DEFAULT_COVER_DIR = Path("public") / "data" / "covers"
DEFAULT_CATALOGUE_DIR = Path("public") / "data" / "catalogue"
DEFAULT_CACHE_PATH = Path("data") / "cache_api.json"


@dataclass
class Settings:
    """Paths and credentials for one scan."""

    library_path: Path
    to_read_path: Path
    output_path: Path = DEFAULT_OUTPUT_PATH
    cover_dir: Path = DEFAULT_COVER_DIR
    catalogue_dir: Path = DEFAULT_CATALOGUE_DIR
    cache_path: Path = DEFAULT_CACHE_PATH
    google_books_api_key: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from LIBRARY_PATH, TO_READ_PATH, OUTPUT_PATH and friends.

        TO_READ_PATH defaults to the "livre a lire" folder inside the library.
        """
        env = os.environ if environ is None else environ

        def path_var(name: str, default: Path) -> Path:
            value = env.get(name)
            return Path(value).expanduser() if value else default

        library = path_var("LIBRARY_PATH", DEFAULT_LIBRARY_PATH)
        return cls(
            library_path=library,
            to_read_path=path_var("TO_READ_PATH", library / DEFAULT_TO_READ_DIRNAME),
            output_path=path_var("OUTPUT_PATH", DEFAULT_OUTPUT_PATH),
            cover_dir=path_var("COVER_OUTPUT_DIR", DEFAULT_COVER_DIR),
            catalogue_dir=path_var("CATALOGUE_DIR", DEFAULT_CATALOGUE_DIR),
            cache_path=path_var("CACHE_PATH", DEFAULT_CACHE_PATH),
            google_books_api_key=env.get("GOOGLE_BOOKS_API_KEY") or None,
        )
