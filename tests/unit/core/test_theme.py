"""Unit tests for theme module.

Tests for theme loading, validation, and Rich theme generation.
"""

# pyright: reportPrivateUsage=false

from pathlib import Path

import pytest
import reclaim.core.theme as theme_module
from reclaim.core.theme import (
    ThemeColors,
    _load_toml_colors,
    get_rich_theme,
    get_theme,
    load_theme,
)
from rich.theme import Theme


class TestThemeColors:
    """Tests for ThemeColors Pydantic model."""

    def test_default_values(self) -> None:
        """ThemeColors has sensible defaults."""
        colors = ThemeColors()
        assert colors.text == "#ffffff"
        assert colors.header == "#69B9A1"
        assert colors.decision_excluded == "#faf870"

    def test_valid_hex_colors(self) -> None:
        """ThemeColors accepts valid hex color codes."""
        colors = ThemeColors(text="#AABBCC", muted="#abc")
        assert colors.text == "#AABBCC"
        assert colors.muted == "#abc"

    def test_invalid_hex_no_hash(self) -> None:
        """ThemeColors rejects colors without # prefix."""
        with pytest.raises(ValueError, match="must start with '#'"):
            ThemeColors(text="ffffff")

    def test_invalid_hex_wrong_length(self) -> None:
        """ThemeColors rejects colors with wrong length."""
        with pytest.raises(ValueError, match="must be #RGB or #RRGGBB"):
            ThemeColors(text="#ff")

    def test_invalid_hex_chars(self) -> None:
        """ThemeColors rejects invalid hex characters."""
        with pytest.raises(ValueError, match="invalid hex color"):
            ThemeColors(decision_allow="#gggggg")

    def test_extra_fields_forbidden(self) -> None:
        """ThemeColors rejects unknown fields."""
        with pytest.raises(ValueError):
            ThemeColors(unknown_field="#ffffff")  # type: ignore[call-arg]


class TestLoadTomlColors:
    """Tests for _load_toml_colors internal function."""

    def test_loads_valid_toml(self, tmp_path: Path) -> None:
        """Loads colors from valid TOML file."""
        theme_file = tmp_path / "theme.toml"
        theme_file.write_text('[colors]\ntext = "#000000"\nsize = 3\n')

        result = _load_toml_colors(theme_file)

        assert result == {"text": "#000000"}

    def test_returns_none_for_missing_file(self, tmp_path: Path) -> None:
        """Returns None when file doesn't exist."""
        assert _load_toml_colors(tmp_path / "nonexistent.toml") is None

    def test_returns_none_for_invalid_toml(self, tmp_path: Path) -> None:
        """Returns None for malformed TOML."""
        theme_file = tmp_path / "theme.toml"
        theme_file.write_text("not valid [ toml syntax")

        assert _load_toml_colors(theme_file) is None

    def test_returns_none_for_non_table_colors(self, tmp_path: Path) -> None:
        """A colors key that is not a table is rejected."""
        theme_file = tmp_path / "theme.toml"
        theme_file.write_text('colors = "red"\n')

        assert _load_toml_colors(theme_file) is None


class TestLoadTheme:
    """Tests for load_theme function."""

    def test_defaults_without_user_theme(self, tmp_path: Path) -> None:
        """Without an override file the defaults apply."""
        assert load_theme(tmp_path / "theme.toml") == ThemeColors()

    def test_user_theme_overrides(self, tmp_path: Path) -> None:
        """User theme overrides individual colors."""
        user_theme = tmp_path / "theme.toml"
        user_theme.write_text('[colors]\nheader = "#ff0000"\n')

        colors = load_theme(user_theme)

        assert colors.header == "#ff0000"
        assert colors.text == "#ffffff"

    def test_invalid_colors_fall_back(self, tmp_path: Path) -> None:
        """Invalid overrides fall back to the defaults."""
        user_theme = tmp_path / "theme.toml"
        user_theme.write_text('[colors]\nheader = "red"\n')

        assert load_theme(user_theme).header == "#69B9A1"

    def test_reads_config_dir_by_default(self, isolated_config: Path) -> None:
        """The default override lives in the config directory."""
        isolated_config.mkdir(parents=True)
        (isolated_config / "theme.toml").write_text('[colors]\nmuted = "#010203"\n')

        assert load_theme().muted == "#010203"


class TestGetRichTheme:
    """Tests for get_rich_theme and get_theme."""

    def test_includes_decision_styles(self) -> None:
        """Guard decision styles are present."""
        theme = get_rich_theme(ThemeColors())

        assert isinstance(theme, Theme)
        for name in ("decision.allow", "decision.excluded", "decision.restricted"):
            assert name in theme.styles
        assert "bold_header" in theme.styles

    def test_caches_theme(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """get_theme returns the cached instance on subsequent calls."""
        monkeypatch.setattr(theme_module, "_cached_theme", None)

        assert get_theme() is get_theme()
