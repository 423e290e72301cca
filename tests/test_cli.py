import json
from pathlib import Path

from typer.testing import CliRunner

from apkfeed.cli import app

runner = CliRunner()


def test_strip_links_overwrites_file(tmp_path: Path):
    body = tmp_path / "body.html"
    body.write_text('<p><a href="https://ext.test">Partner</a> and <a href="/item/a">A</a></p>', encoding="utf-8")

    result = runner.invoke(app, ["strip-links", str(body)])

    assert result.exit_code == 0
    assert body.read_text(encoding="utf-8") == '<p>Partner and <a href="/item/a">A</a></p>'


def test_strip_links_to_output(tmp_path: Path):
    body = tmp_path / "body.html"
    out = tmp_path / "clean.html"
    original = '<p><a href="https://ext.test">Partner</a></p>'
    body.write_text(original, encoding="utf-8")

    result = runner.invoke(app, ["strip-links", str(body), "--output", str(out)])

    assert result.exit_code == 0
    assert out.read_text(encoding="utf-8") == "<p>Partner</p>"
    assert body.read_text(encoding="utf-8") == original


def _config(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text("logging:\n  console: false\n  file: false\n", encoding="utf-8")
    return path


def test_link_command(tmp_path: Path):
    items = tmp_path / "items.json"
    items.write_text(
        json.dumps(
            [
                {"id": "a", "title": "Turbo Racer", "slug": "turbo-racer", "content": "<p>Turbo racing.</p>"},
                {"id": "b", "title": "Turbo Racer Pro", "slug": "turbo-racer-pro", "content": "<p>Turbo pro.</p>"},
            ]
        ),
        encoding="utf-8",
    )
    out = tmp_path / "linked.json"

    result = runner.invoke(app, ["link", str(items), "--output", str(out), "--config", str(_config(tmp_path))])

    assert result.exit_code == 0
    assert json.loads(out.read_text(encoding="utf-8"))["total"] == 2


def test_link_command_unknown_item_exits_nonzero(tmp_path: Path):
    items = tmp_path / "items.json"
    items.write_text("[]", encoding="utf-8")

    result = runner.invoke(
        app,
        ["link", str(items), "--item-id", "missing", "--config", str(_config(tmp_path))],
    )

    assert result.exit_code == 1
