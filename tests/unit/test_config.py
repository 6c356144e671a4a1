# ABOUTME: Unit tests for settings read from environment variables.
# ABOUTME: Checks defaults, overrides, and the to-read folder default.

from pathlib import Path

from librarium.config import (
    DEFAULT_CACHE_PATH,
    DEFAULT_CATALOGUE_DIR,
    DEFAULT_COVER_DIR,
    DEFAULT_LIBRARY_PATH,
    DEFAULT_OUTPUT_PATH,
    Settings,
)


class TestSettingsFromEnv:
    """Tests for Settings.from_env."""

    def test_defaults(self) -> None:
        settings = Settings.from_env({})
        assert settings.library_path == DEFAULT_LIBRARY_PATH
        assert settings.to_read_path == DEFAULT_LIBRARY_PATH / "livre a lire"
        assert settings.output_path == DEFAULT_OUTPUT_PATH
        assert settings.cover_dir == DEFAULT_COVER_DIR
        assert settings.catalogue_dir == DEFAULT_CATALOGUE_DIR
        assert settings.cache_path == DEFAULT_CACHE_PATH
        assert settings.google_books_api_key is None

    def test_overrides(self, tmp_path: Path) -> None:
        env = {
            "LIBRARY_PATH": str(tmp_path / "lib"),
            "TO_READ_PATH": str(tmp_path / "pile"),
            "OUTPUT_PATH": str(tmp_path / "out.json"),
            "COVER_OUTPUT_DIR": str(tmp_path / "img"),
            "CATALOGUE_DIR": str(tmp_path / "shards"),
            "CACHE_PATH": str(tmp_path / "cache.json"),
            "GOOGLE_BOOKS_API_KEY": "secret",
        }

        settings = Settings.from_env(env)

        assert settings.library_path == tmp_path / "lib"
        assert settings.to_read_path == tmp_path / "pile"
        assert settings.output_path == tmp_path / "out.json"
        assert settings.cover_dir == tmp_path / "img"
        assert settings.catalogue_dir == tmp_path / "shards"
        assert settings.cache_path == tmp_path / "cache.json"
        assert settings.google_books_api_key == "secret"

    def test_to_read_defaults_inside_library(self, tmp_path: Path) -> None:
        settings = Settings.from_env({"LIBRARY_PATH": str(tmp_path)})
        assert settings.to_read_path == tmp_path / "livre a lire"

    def test_empty_values_use_defaults(self) -> None:
        settings = Settings.from_env({"OUTPUT_PATH": "", "GOOGLE_BOOKS_API_KEY": ""})
        assert settings.output_path == DEFAULT_OUTPUT_PATH
        assert settings.google_books_api_key is None
