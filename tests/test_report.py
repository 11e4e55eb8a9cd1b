import tempfile

import matplotlib

matplotlib.use("Agg")

import pytest
from docx import Document

from racoon.report import ReportConfig, generate_docx_report


def test_report_contains_selection(dashboard, tmp_path):
    dashboard.select("Germany")
    dashboard.select("Canada")
    out = tmp_path / "report.docx"
    cfg = ReportConfig(top_n=2, command_log=['select "Germany"', 'select "Canada"'])
    generate_docx_report(dashboard, str(out), config=cfg)

    doc = Document(str(out))
    text = "\n".join(p.text for p in doc.paragraphs)
    assert "racoon - Corona Dashboard" in text
    assert "Germany, Canada" in text
    assert 'select "Canada"' in text
    assert len(doc.inline_shapes) == 2

    latest = doc.tables[0]
    assert [c.text for c in latest.rows[1].cells] == ["Germany", "2020-01-23", "5", "2020-01-25", "1"]
    ranking = doc.tables[1]
    assert len(ranking.rows) == 3


def test_report_requires_selection(dashboard, tmp_path):
    with pytest.raises(ValueError):
        generate_docx_report(dashboard, str(tmp_path / "r.docx"))


def test_report_removes_chart_files(dashboard, tmp_path, monkeypatch):
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(scratch))
    dashboard.select("Italy")
    out = tmp_path / "report.docx"
    generate_docx_report(dashboard, str(out))
    assert out.exists()
    assert list(scratch.iterdir()) == []
