"""
racoon Command Line Interface (CLI)
===================================

The terminal version of the dashboard. Run it like:

    racoon --base-url "https://example.org/data" --metric both

or, with a local checkout of the JHU repository under ./COVID-19:

    python -m racoon.cli

It loads the CSV of each metric once, then starts a REPL (Read-Eval-Print
Loop) where you pick countries and render/export them. If the data could
not be fetched, the dashboard stays in its loading state and every data
command answers `Loading`.
"""

from __future__ import annotations
import argparse, logging, os, shlex
from .dashboard import Dashboard
from .loader import METRICS

HELP = """
Commands:
  help
  stats
  countries [prefix]              (example: countries ger)

  select "<Country>"              (example: select "Korea, South")
  deselect "<Country>"
  clear
  undo
  redo

  show [n]                        last n days of the selection (default 5)
  topk <k> [metric]               countries with the highest latest value
  table "<out.html>"
  chart "<out.png>" [metric]
  export csv "<out.csv>" [metric]
  export json "<out.json>"
  report "<out.docx>"
  quit

Metrics: confirmed, deaths
"""

# commands that only read state are kept out of the report's command log
_READ_ONLY = ("help", "show", "countries", "stats", "quit", "exit")


def _metrics_arg(value: str):
    if value == "both":
        return METRICS
    if value in METRICS:
        return (value,)
    raise argparse.ArgumentTypeError("metric must be: confirmed | deaths | both")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="racoon", description="COVID-19 time series dashboard")
    ap.add_argument(
        "--base-url",
        default=os.environ.get("PUBLIC_URL", "."),
        help="Prefix of the COVID-19/ data tree (URL or local directory). Default: $PUBLIC_URL or '.'",
    )
    ap.add_argument("--metric", type=_metrics_arg, default=METRICS, help="confirmed | deaths | both (default)")
    ap.add_argument("--timeout", type=float, default=None, help="HTTP timeout in seconds (default: none)")
    ap.add_argument(
        "--log-level",
        default=os.environ.get("RACOON_LOG_LEVEL", "WARNING"),
        help="Logging level (default: $RACOON_LOG_LEVEL or WARNING)",
    )
    return ap


def main(argv=None):
    """Entry point for the racoon CLI.

    1) Fetch + transform the dataset
    2) Start an interactive REPL
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    dashboard = Dashboard(base_url=args.base_url, metrics=args.metric, timeout=args.timeout)
    print("Loading dataset...")
    if dashboard.load():
        print(f"Loaded {len(dashboard.index)} countries. Type 'help' for commands.")
    else:
        print("Loading")

    try:
        while True:
            try:
                line = input("racoon> ")
            except EOFError:
                break
            stripped = line.strip()
            if not stripped:
                continue
            cmd0 = stripped.split()[0].lower()
            if cmd0 in ("quit", "exit"):
                break
            if cmd0 not in _READ_ONLY:
                dashboard.command_log.append(stripped)
            try:
                handle(dashboard, stripped)
            except Exception as e:
                print(f"Error: {e}")
    finally:
        dashboard.close()


def handle(dashboard: Dashboard, line: str) -> None:
    """Handle one CLI command line.

    This parses the command and calls the appropriate dashboard method.
    """
    parts = shlex.split(line)
    cmd = parts[0].lower()

    if cmd == "help":
        print(HELP)
        return

    if cmd == "stats":
        for s in dashboard.describe():
            print(s)
        return

    if dashboard.loading:
        print("Loading")
        return

    if cmd == "countries":
        prefix = parts[1] if len(parts) >= 2 else ""
        vals = dashboard.index.with_prefix(prefix)
        for v in vals[:50]:
            print(v)
        if len(vals) > 50:
            print(f"... ({len(vals)} total, showing 50)")
        return

    if cmd == "select":
        country = _arg(parts, 1, 'select "<Country>"')
        dashboard.select(country)
        print(f"Selected: {', '.join(dashboard.selection)}")
        return

    if cmd == "deselect":
        country = _arg(parts, 1, 'deselect "<Country>"')
        print(f"Selected: {', '.join(dashboard.selection)}" if dashboard.deselect(country) else f"{country} is not selected.")
        return

    if cmd == "clear":
        dashboard.clear()
        print("Selection cleared.")
        return

    if cmd == "undo":
        print("Undone." if dashboard.undo() else "Nothing to undo.")
        return

    if cmd == "redo":
        print("Redone." if dashboard.redo() else "Nothing to redo.")
        return

    if cmd == "show":
        n = int(parts[1]) if len(parts) >= 2 else 5
        _print_selection(dashboard, n)
        return

    if cmd == "topk":
        k = int(_arg(parts, 1, "topk <k> [metric]"))
        metric = parts[2].lower() if len(parts) >= 3 else None
        for country, value in dashboard.topk(k, metric):
            print(f"{country}: {value:,}")
        return

    if cmd == "table":
        from .render import html_table
        out_path = _arg(parts, 1, 'table "<out.html>"')
        html = html_table(dashboard.selected_series(), dashboard.selection)
        with open(out_path, "w", encoding="utf-8") as f:
            f.write(html)
        print(f"Table written to {out_path}")
        return

    if cmd == "chart":
        from .render import line_chart
        out_path = _arg(parts, 1, 'chart "<out.png>" [metric]')
        metric = parts[2].lower() if len(parts) >= 3 else None
        line_chart(dashboard.selected_series(metric), dashboard.selection, out_path,
                   title=metric or dashboard.primary_metric)
        print(f"Chart written to {out_path}")
        return

    if cmd == "export":
        if len(parts) < 3:
            print('Usage: export csv "out.csv" [metric]  OR  export json "out.json"')
            return
        fmt = parts[1].lower()
        out_path = parts[2]
        if not dashboard.selection:
            print("Nothing to export: no country selected.")
            return
        if fmt == "csv":
            metric = parts[3].lower() if len(parts) >= 4 else None
            dashboard.export_csv(out_path, metric)
            print(f"Exported CSV to {out_path}")
            return
        if fmt == "json":
            dashboard.export_json(out_path)
            print(f"Exported JSON to {out_path}")
            return
        print("Unknown export format. Use: csv or json")
        return

    if cmd == "report":
        from .report import generate_docx_report, ReportConfig
        out_path = _arg(parts, 1, 'report "<out.docx>"')
        cfg = ReportConfig(command_log=dashboard.command_log)
        generate_docx_report(dashboard, out_path, config=cfg)
        print(f"Report written to {out_path}")
        return

    print("Unknown command. Type 'help'.")


def _arg(parts, i: int, usage: str) -> str:
    if len(parts) <= i:
        raise ValueError(f"Usage: {usage}")
    return parts[i]


def _print_selection(dashboard: Dashboard, n: int) -> None:
    if n < 1:
        raise ValueError("show needs n >= 1")
    if not dashboard.selection:
        print("No country selected.")
        return
    if dashboard.combined is not None:
        for country in dashboard.selection:
            m = dashboard.combined.get(country)
            confirmed = m.confirmed_per_day[-n:] if m else ()
            deaths = {r.date: r.value for r in m.deaths_per_day} if m else {}
            print(country)
            for r in confirmed:
                print(f"  {r.date.isoformat()} confirmed={r.value} deaths={deaths.get(r.date, 0)}")
        return
    for country, series in dashboard.selected_series().items():
        print(country)
        for r in series[-n:]:
            print(f"  {r.date.isoformat()} {dashboard.primary_metric}={r.value}")


if __name__ == "__main__":
    main()
