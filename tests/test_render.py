from datetime import date

import matplotlib

matplotlib.use("Agg")

import pytest

from racoon.models import Record
from racoon.render import html_table, line_chart, wide_table

SERIES = {
    "Germany": (Record(date(2020, 1, 23), 1), Record(date(2020, 1, 24), 4)),
    "Italy": (Record(date(2020, 1, 24), 2),),
    "Holy See": (),
}


def test_wide_table_aligns_dates_and_keeps_selection_order():
    table = wide_table(SERIES, ["Italy", "Germany"])
    assert list(table.columns) == ["Italy", "Germany"]
    assert list(table.index) == ["2020-01-23", "2020-01-24"]
    assert table.loc["2020-01-24", "Italy"] == 2
    assert table["Italy"].isna().tolist() == [True, False]


def test_wide_table_of_empty_series():
    table = wide_table(SERIES, ["Holy See"])
    assert table.empty
    assert list(table.columns) == ["Holy See"]


def test_html_table():
    html = html_table(SERIES, ["Germany"])
    assert html.startswith("<table")
    assert "racoon-table" in html
    assert "2020-01-24" in html


def test_table_requires_selection():
    with pytest.raises(ValueError):
        html_table(SERIES, [])
    with pytest.raises(KeyError):
        html_table(SERIES, ["Atlantis"])


def test_line_chart_writes_png(tmp_path):
    out = line_chart(SERIES, ["Germany", "Italy"], str(tmp_path / "charts" / "c.png"), title="confirmed")
    with open(out, "rb") as f:
        assert f.read(8) == b"\x89PNG\r\n\x1a\n"


def test_line_chart_nothing_to_plot(tmp_path):
    with pytest.raises(ValueError):
        line_chart(SERIES, ["Holy See"], str(tmp_path / "c.png"))
