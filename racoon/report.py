from __future__ import annotations

"""
racoon report generator
-----------------------
This module writes a DOCX snapshot of the dashboard: the selected countries,
one line chart per loaded metric, and the latest numbers in a table.

Design goals:
- Keep racoon usable even if report dependencies are missing (lazy imports).
- Report exactly what the dashboard shows: the current selection.
- End with a reproducibility footer (version, time, commands, data source).
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional
import os
import tempfile
from datetime import datetime

from .render import line_chart

if TYPE_CHECKING:
    from .dashboard import Dashboard


# -----------------------------
# Configuration / citation types
# -----------------------------

@dataclass
class DataSourceCitation:
    """Citation metadata for the JHU CSSE time series."""
    database_name: str = "COVID-19 Data Repository by the Center for Systems Science and Engineering (CSSE)"
    institutional_author: str = "Johns Hopkins University"
    website: str = "https://github.com/CSSEGISandData/COVID-19"


@dataclass
class ReportConfig:
    """High-level knobs to control how the report is written."""
    title: str = "racoon - Corona Dashboard"
    subtitle: str = "COVID-19 time series by country"
    citation: DataSourceCitation = field(default_factory=DataSourceCitation)

    # How many countries to list in the ranking table
    top_n: int = 10

    # Optional: list of CLI commands used to build the selection
    command_log: Optional[List[str]] = None


def _first_reported(series) -> str:
    return series[0].date.isoformat() if series else ""


def _latest(series) -> str:
    return f"{series[-1].value:,}" if series else ""


# -----------------------------
# Main entry point used by CLI
# -----------------------------

def generate_docx_report(
    dashboard: "Dashboard",
    out_path: str,
    *,
    config: Optional[ReportConfig] = None,
) -> str:
    """Generate a DOCX report + charts for the dashboard's current selection."""
    config = config or ReportConfig()

    try:
        from docx import Document
        from docx.shared import Pt, Inches
        from docx.enum.text import WD_ALIGN_PARAGRAPH
    except ImportError as e:
        raise ImportError(
            "Missing dependency: python-docx.\n"
            "Install it with: python -m pip install python-docx"
        ) from e

    if dashboard.loading:
        raise RuntimeError("Loading")
    countries = list(dashboard.selection)
    if not countries:
        raise ValueError("No countries selected (select at least one country).")

    # -----------------------------
    # 1) Charts, one per metric
    # -----------------------------
    with tempfile.TemporaryDirectory(prefix="racoon_report_") as tmpdir:
        chart_paths: List[tuple] = []
        for metric in dashboard.metrics:
            picked = dashboard.selected_series(metric)
            if not any(picked.values()):
                continue
            title = f"Cumulative {metric} cases"
            path = line_chart(
                picked, countries, os.path.join(tmpdir, f"{metric}.png"),
                title=title, ylabel=metric.capitalize(),
            )
            chart_paths.append((title, path))

        # -----------------------------
        # 2) Build DOCX report
        # -----------------------------
        doc = Document()
        style = doc.styles["Normal"]
        style.font.name = "Calibri"
        style.font.size = Pt(11)

        def _center_title(text: str, size: int, bold: bool = False, italic: bool = False) -> None:
            p = doc.add_paragraph()
            r = p.add_run(text)
            r.bold = bold
            r.italic = italic
            r.font.size = Pt(size)
            p.alignment = WD_ALIGN_PARAGRAPH.CENTER

        def _kv(key: str, value: str) -> None:
            p = doc.add_paragraph()
            r = p.add_run(f"{key}: ")
            r.bold = True
            p.add_run(value)

        _center_title(config.title, 22, bold=True)
        _center_title(config.subtitle, 12, italic=True)

        doc.add_paragraph("")
        _kv("Selected countries", ", ".join(countries))
        _kv("Metrics", ", ".join(dashboard.metrics))
        for metric in dashboard.metrics:
            _kv(f"Source ({metric})", dashboard.source_for(metric))

        doc.add_heading("Data source", level=1)
        cit = config.citation
        doc.add_paragraph(f"{cit.institutional_author}. {cit.database_name}. {cit.website}.")

        if config.command_log:
            doc.add_heading("Command log", level=1)
            for line in config.command_log:
                doc.add_paragraph(line, style="List Bullet")

        doc.add_heading("Charts", level=1)
        for title, path in chart_paths:
            doc.add_paragraph(title)
            doc.add_picture(path, width=Inches(6.5))

        # Latest values of the selection
        doc.add_heading("Latest values", level=1)
        t = doc.add_table(rows=1, cols=1 + 2 * len(dashboard.metrics))
        h = t.rows[0].cells
        h[0].text = "Country"
        for i, metric in enumerate(dashboard.metrics):
            h[1 + 2 * i].text = f"First {metric} report"
            h[2 + 2 * i].text = f"Latest {metric}"
        for country in countries:
            r = t.add_row().cells
            r[0].text = country
            for i, metric in enumerate(dashboard.metrics):
                series = dashboard.series[metric].get(country, ())
                r[1 + 2 * i].text = _first_reported(series)
                r[2 + 2 * i].text = _latest(series)

        # Ranking over the whole dataset, for context
        metric = dashboard.primary_metric
        doc.add_heading(f"Top {config.top_n} countries by {metric}", level=1)
        t2 = doc.add_table(rows=1, cols=2)
        t2.rows[0].cells[0].text = "Country"
        t2.rows[0].cells[1].text = f"Latest {metric}"
        for country, value in dashboard.topk(config.top_n, metric):
            r = t2.add_row().cells
            r[0].text = country
            r[1].text = f"{value:,}"

        # -----------------------------
        # Reproducibility footer
        # -----------------------------
        from . import __version__ as racoon_version
        doc.add_heading("Reproducibility footer", level=1)
        doc.add_paragraph(f"racoon version: {racoon_version}")
        doc.add_paragraph(f"Report generated at: {datetime.now().isoformat(timespec='seconds')}")
        doc.add_paragraph(
            "Rows of the same country are summed day by day; days before the first "
            "reported case and trailing zero days are left out."
        )

        os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
        doc.save(out_path)
    return out_path
