"""
Tests for the command-line interface (offline providers only)
"""

import json
import sys

import pytest

import cli


def run_cli(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["cli.py", *argv])
    return cli.main()


def test_generate_and_stats(monkeypatch, capsys, tmp_path):
    grid_path = tmp_path / "grid.json"
    png_path = tmp_path / "grid.png"

    code = run_cli(
        monkeypatch,
        "generate", "--city", "test", "--provider", "mock", "--grid-resolution", "100",
        "--output", str(grid_path), "--png", str(png_path), "--scale", "2", "--summary",
    )

    assert code == 0
    assert grid_path.exists()
    assert png_path.exists()
    summary = json.loads(capsys.readouterr().out)
    assert summary["provider"] == "mock"
    assert summary["statistics"]["total_tiles"] > 0

    assert run_cli(monkeypatch, "stats", "--input", str(grid_path)) == 0
    stats = json.loads(capsys.readouterr().out)
    assert stats["metadata"]["algorithm"] == "default_rasterization"
    assert stats["total_tiles"] == summary["statistics"]["total_tiles"]


def test_generate_from_file(monkeypatch, tmp_path, overpass_payload):
    source = tmp_path / "export.json"
    source.write_text(json.dumps(overpass_payload))
    grid_path = tmp_path / "grid.json"

    assert run_cli(monkeypatch, "generate", "--input", str(source), "--output", str(grid_path)) == 0
    assert grid_path.exists()


def test_generate_failures_return_nonzero(monkeypatch, tmp_path):
    output = str(tmp_path / "grid.json")
    assert run_cli(monkeypatch, "generate", "--city", "Atlantis", "--provider", "mock", "--output", output) == 1
    assert run_cli(monkeypatch, "generate", "--provider", "file", "--output", output) == 1


def test_bad_bbox_argument(monkeypatch):
    with pytest.raises(SystemExit):
        run_cli(monkeypatch, "generate", "--bbox", "1,2,3")


def test_stats_missing_file(monkeypatch, tmp_path):
    assert run_cli(monkeypatch, "stats", "--input", str(tmp_path / "missing.json")) == 1


def test_providers(monkeypatch, capsys):
    assert run_cli(monkeypatch, "providers") == 0
    lines = capsys.readouterr().out.splitlines()
    assert [line.split()[0] for line in lines] == ["overpass", "mock", "file"]


def test_no_command(monkeypatch):
    assert run_cli(monkeypatch) == 1


@pytest.mark.parametrize("scale", ["0", "-2", "two"])
def test_bad_scale_is_rejected_before_generating(monkeypatch, tmp_path, scale):
    grid_path = tmp_path / "grid.json"
    with pytest.raises(SystemExit):
        run_cli(
            monkeypatch,
            "generate", "--city", "test", "--provider", "mock",
            "--output", str(grid_path), "--png", str(tmp_path / "grid.png"), "--scale", scale,
        )
    assert not grid_path.exists()


def test_unwritable_output_returns_nonzero(monkeypatch, tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("")
    output = str(blocker / "grid.json")
    assert run_cli(monkeypatch, "generate", "--city", "test", "--provider", "mock", "--output", output) == 1


def test_bad_settings_return_nonzero(monkeypatch, tmp_path):
    monkeypatch.setenv("OSM_TILES_MAX_RETRIES", "many")
    output = tmp_path / "grid.json"
    assert run_cli(monkeypatch, "generate", "--city", "test", "--provider", "mock", "--output", str(output)) == 1
    assert not output.exists()
