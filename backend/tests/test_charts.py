import pytest

from excel_analytics.core.exceptions import UnknownColumnError
from excel_analytics.services.charts import (
    COLOR_PALETTE,
    derive_chart_data,
    generate_colors,
    resolve_column,
    to_label,
    to_number,
)
from excel_analytics.services.ingestion import build_sheet_previews
from helpers import SALES_ROWS


@pytest.fixture
def sales_sheet():
    return build_sheet_previews({"Sales": SALES_ROWS})[0]


class TestGenerateColors:
    def test_small_counts_use_palette_prefix(self):
        assert generate_colors(0) == []
        assert generate_colors(3) == COLOR_PALETTE[:3]
        assert generate_colors(10) == COLOR_PALETTE

    def test_large_counts_extend_with_golden_angle_hues(self):
        colors = generate_colors(13)

        assert colors[:10] == COLOR_PALETTE
        assert colors[10:] == [
            "hsl(295, 70%, 50%)",
            "hsl(72.5, 70%, 50%)",
            "hsl(210, 70%, 50%)",
        ]

    def test_is_deterministic(self):
        assert generate_colors(40) == generate_colors(40)
        assert len(generate_colors(40)) == 40


class TestCoercion:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (10, 10.0),
            (2.5, 2.5),
            ("42", 42.0),
            ("12.5kg", 12.5),
            ("  -3e2 units", -300.0),
            (".5", 0.5),
            ("bad", 0.0),
            ("", 0.0),
            (True, 0.0),
            (float("inf"), 0.0),
        ],
        ids=["int", "float", "numeric-str", "prefix", "exponent", "leading-dot", "text", "empty", "bool", "inf"],
    )
    def test_to_number(self, value, expected):
        assert to_number(value) == expected

    @pytest.mark.parametrize(
        "value, expected",
        [("Jan", "Jan"), (3, "3"), (3.0, "3"), (2.5, "2.5"), (False, "false"), ("", "")],
    )
    def test_to_label(self, value, expected):
        assert to_label(value) == expected


class TestResolveColumn:
    def test_first_exact_match(self):
        assert resolve_column(["a", "b", "b"], "b") == 1

    def test_match_is_case_sensitive(self):
        with pytest.raises(UnknownColumnError):
            resolve_column(["Month", "Sales"], "sales")


class TestDeriveChartData:
    def test_sales_chart(self, sales_sheet):
        chart = derive_chart_data(sales_sheet, "Month", "Sales", "bar")

        assert chart["labels"] == ["Jan", "Feb", "Mar"]
        dataset = chart["datasets"][0]
        assert dataset["data"] == [10.0, 20.0, 0.0]
        assert dataset["label"] == "Data"
        assert dataset["borderWidth"] == 1
        assert dataset["backgroundColor"] == COLOR_PALETTE[0]
        assert dataset["borderColor"] == COLOR_PALETTE[0]

    def test_pie_gets_one_color_per_point(self, sales_sheet):
        chart = derive_chart_data(sales_sheet, "Month", "Sales", "pie")

        dataset = chart["datasets"][0]
        assert dataset["backgroundColor"] == COLOR_PALETTE[:3]
        assert dataset["borderColor"] == COLOR_PALETTE[:3]

    def test_rows_missing_a_cell_are_dropped(self):
        sheet = {
            "headers": ["x", "y", "z"],
            "data": [
                ["a", 1],
                [None, 2],
                ["c", None],
                ["d"],
                ["", ""],
                ["f", 6, "extra"],
            ],
        }

        chart = derive_chart_data(sheet, "x", "y", "line")

        assert chart["labels"] == ["a", "", "f"]
        assert chart["datasets"][0]["data"] == [1.0, 0.0, 6.0]

    def test_order_and_duplicates_preserved(self):
        sheet = {"headers": ["k", "v"], "data": [["b", 2], ["a", 1], ["b", 3]]}

        chart = derive_chart_data(sheet, "k", "v", "scatter")

        assert chart["labels"] == ["b", "a", "b"]
        assert chart["datasets"][0]["data"] == [2.0, 1.0, 3.0]

    def test_unknown_column_raises(self, sales_sheet):
        with pytest.raises(UnknownColumnError) as exc_info:
            derive_chart_data(sales_sheet, "Region", "Sales", "bar")

        assert exc_info.value.column == "Region"

    def test_only_stored_rows_are_charted(self):
        grid = [["n", "v"]] + [[f"row-{i}", i] for i in range(1, 151)]
        sheet = build_sheet_previews({"Big": grid})[0]

        chart = derive_chart_data(sheet, "n", "v", "bar")

        assert len(chart["labels"]) == 100
        assert chart["labels"][-1] == "row-100"
        assert "row-101" not in chart["labels"]

    def test_no_points_gives_empty_dataset(self):
        sheet = {"headers": ["x", "y"], "data": []}

        chart = derive_chart_data(sheet, "x", "y", "bar")

        assert chart["labels"] == []
        assert chart["datasets"][0]["data"] == []
        assert chart["datasets"][0]["backgroundColor"] is None
