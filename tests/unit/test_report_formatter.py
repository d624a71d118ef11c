"""Unit tests for the plain-text report helpers."""

import pytest

from prism.utils.report_formatter import Column, TableFormatter, format_delta


@pytest.mark.unit
class TestColumn:
    def test_pads_to_width(self):
        assert Column("Count", 6, ">").fit(12) == "    12"

    def test_truncates_long_text(self):
        assert Column("Metric", 8).fit("Experience entries") == "Exper..."


@pytest.mark.unit
class TestTableFormatter:
    def test_renders_blocks_in_order(self):
        formatter = TableFormatter([Column("Metric", 10), Column("Value", 5, ">")], total_width=20)

        text = (
            formatter.add_section_header("Diff")
            .add_table_header()
            .add_row(["Entries", 3])
            .add_subheader("Removed")
            .add_bullets(["Experience: Fabrikam"])
            .render()
        )

        assert text.splitlines() == [
            "=" * 20,
            "Diff",
            "=" * 20,
            "Metric     Value",
            "---------- -----",
            "Entries        3",
            "",
            "Removed",
            "-------",
            "  - Experience: Fabrikam",
        ]

    def test_empty_bullets(self):
        text = TableFormatter([]).add_bullets([], empty_text="(no changes)").render()
        assert text == "  (no changes)"

    def test_row_width_mismatch(self):
        with pytest.raises(ValueError):
            TableFormatter([Column("Metric", 10)]).add_row(["a", "b"])


@pytest.mark.unit
@pytest.mark.parametrize("before, after, expected", [(5, 3, "5 -> 3 (-2)"), (1, 4, "1 -> 4 (+3)")])
def test_format_delta(before, after, expected):
    assert format_delta(before, after) == expected
