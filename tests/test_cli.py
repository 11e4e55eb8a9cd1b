import pytest

from racoon import cli
from racoon.dashboard import Dashboard


def test_parser_defaults(monkeypatch):
    monkeypatch.setenv("PUBLIC_URL", "https://example.org/app")
    args = cli.build_parser().parse_args([])
    assert args.base_url == "https://example.org/app"
    assert args.metric == ("confirmed", "deaths")


def test_parser_metric():
    assert cli.build_parser().parse_args(["--metric", "deaths"]).metric == ("deaths",)
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["--metric", "recovered"])


def test_loading_dashboard_answers_loading(capsys):
    cli.handle(Dashboard(), 'select "Germany"')
    assert capsys.readouterr().out.strip() == "Loading"


def test_countries_and_select(dashboard, capsys):
    cli.handle(dashboard, "countries ge")
    assert capsys.readouterr().out.split("\n")[0] == "Germany"
    cli.handle(dashboard, 'select "Germany"')
    cli.handle(dashboard, 'select "Italy"')
    assert "Selected: Germany, Italy" in capsys.readouterr().out
    cli.handle(dashboard, "undo")
    assert dashboard.selection == ["Germany"]


def test_show_uses_combined_view(dashboard, capsys):
    cli.handle(dashboard, 'select "Germany"')
    capsys.readouterr()
    cli.handle(dashboard, "show 1")
    out = capsys.readouterr().out
    assert "2020-01-25 confirmed=5 deaths=1" in out


def test_export_and_table(dashboard, tmp_path, capsys):
    cli.handle(dashboard, f'export csv "{tmp_path / "x.csv"}"')
    assert "Nothing to export" in capsys.readouterr().out
    cli.handle(dashboard, 'select "Italy"')
    cli.handle(dashboard, f'export json "{tmp_path / "x.json"}"')
    cli.handle(dashboard, f'table "{tmp_path / "x.html"}"')
    assert (tmp_path / "x.json").exists()
    assert "<table" in (tmp_path / "x.html").read_text(encoding="utf-8")


def test_unknown_command(dashboard, capsys):
    cli.handle(dashboard, "frobnicate")
    assert "Unknown command" in capsys.readouterr().out


def test_main_runs_repl(data_tree, monkeypatch, capsys):
    lines = iter(['select "Canada"', "topk 1", "quit"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(lines))
    cli.main(["--base-url", str(data_tree)])
    out = capsys.readouterr().out
    assert "Loaded 4 countries" in out
    assert "Germany: 5" in out


def test_main_with_unreachable_data(tmp_path, monkeypatch, capsys):
    lines = iter(["countries", "stats"])

    def fake_input(prompt=""):
        try:
            return next(lines)
        except StopIteration:
            raise EOFError

    monkeypatch.setattr("builtins.input", fake_input)
    cli.main(["--base-url", str(tmp_path)])
    out = capsys.readouterr().out.splitlines()
    assert out == ["Loading dataset...", "Loading", "Loading", "Loading"]


def test_topk_zero_reports_error_and_keeps_session(data_tree, monkeypatch, capsys):
    lines = iter(["topk 0", "topk 1", "quit"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(lines))
    cli.main(["--base-url", str(data_tree)])
    out = capsys.readouterr().out
    assert "Error: k must be >= 1" in out
    assert "Germany: 5" in out


def test_show_rejects_non_positive_n(dashboard, capsys):
    cli.handle(dashboard, 'select "Germany"')
    capsys.readouterr()
    for n in ("0", "-1"):
        with pytest.raises(ValueError):
            cli.handle(dashboard, f"show {n}")
    assert "2020-01" not in capsys.readouterr().out
