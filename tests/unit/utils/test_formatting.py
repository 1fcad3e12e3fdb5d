"""Unit tests for console formatting helpers."""

import pytest
from reclaim.cleanup.models import CleanupItem
from reclaim.guard.models import GuardDecision
from reclaim.utils.formatting import (
    create_item_table,
    format_decision,
    format_item_row,
    format_size,
)


class TestFormatSize:
    """Tests for format_size function."""

    @pytest.mark.parametrize(
        ("size", "expected"),
        [
            (None, "-"),
            (0, "0 B"),
            (512, "512 B"),
            (2048, "2.0 KB"),
            (5 * 1024 * 1024, "5.0 MB"),
            (3 * 1024**3, "3.0 GB"),
            (2 * 1024**4, "2.0 TB"),
        ],
    )
    def test_formats_units(self, size: int | None, expected: str) -> None:
        """Sizes are shown in the largest fitting unit."""
        assert format_size(size) == expected


class TestItemFormatting:
    """Tests for item table helpers."""

    def test_decision_markup(self) -> None:
        """Decisions use their theme style."""
        assert format_decision(GuardDecision.EXCLUDED) == "[decision.excluded]Excluded[/]"

    def test_item_row(self) -> None:
        """Rows show selection, name, path, size and decision."""
        item = CleanupItem(path="/tmp/cache", name="Temp • cache", size=2048, selected=False)

        icon, name, path, size, decision = format_item_row(item)

        assert icon == "[muted]○[/]"
        assert name == "Temp • cache"
        assert path == "/tmp/cache"
        assert size == "2.0 KB"
        assert decision == "[decision.allow]Allowed[/]"

    def test_item_table_columns(self) -> None:
        """The item table has the expected columns."""
        table = create_item_table("Caches")

        assert [column.header for column in table.columns] == ["", "Name", "Path", "Size", "Guard"]
