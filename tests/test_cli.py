from __future__ import annotations

import json

from typer.testing import CliRunner

from static_file_cache.cli import app


def _write_config(tmp_path, **policy: object):
    payload = {
        "static_file_cache": {
            "whitelist_cids": ["cache-variables"],
            "cache_directory": str(tmp_path / "static"),
            **policy,
        },
        "fallback": {"directory": str(tmp_path / "fallback")},
    }
    path = tmp_path / "config.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_cli_help() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    assert "Usage:" in result.output
    assert "--help" in result.output


def test_cli_set_get_clear_static_item(tmp_path) -> None:
    runner = CliRunner()
    config = _write_config(tmp_path, add_allowed=True, delete_allowed=True)

    stored = runner.invoke(
        app,
        [
            "set",
            "cache",
            "variables",
            "--data",
            '{"site_name": "Example"}',
            "--config",
            str(config),
        ],
    )
    assert stored.exit_code == 0
    assert "stored bin=cache cid=variables" in stored.output
    assert (tmp_path / "static" / "cache" / "variables.json").exists()

    fetched = runner.invoke(app, ["get", "cache", "variables", "--config", str(config)])
    assert fetched.exit_code == 0
    assert '"site_name":"Example"' in fetched.output

    cleared = runner.invoke(app, ["clear", "cache", "variables", "--config", str(config)])
    assert cleared.exit_code == 0
    assert not (tmp_path / "static" / "cache" / "variables.json").exists()


def test_cli_set_refused_without_permission(tmp_path) -> None:
    runner = CliRunner()
    config = _write_config(tmp_path)

    result = runner.invoke(
        app,
        ["set", "cache", "variables", "--data", "1", "--config", str(config)],
    )

    assert result.exit_code == 1


def test_cli_get_miss_exits_nonzero(tmp_path) -> None:
    runner = CliRunner()
    config = _write_config(tmp_path)

    result = runner.invoke(app, ["get", "cache", "missing", "--config", str(config)])

    assert result.exit_code == 1


def test_cli_rejects_invalid_json_data(tmp_path) -> None:
    runner = CliRunner()
    config = _write_config(tmp_path, add_allowed=True)

    result = runner.invoke(
        app,
        ["set", "cache", "variables", "--data", "{oops", "--config", str(config)],
    )

    assert result.exit_code == 1


def test_cli_whitelist_lists_cids(tmp_path) -> None:
    runner = CliRunner()
    config = _write_config(tmp_path, get_allowed=False)

    result = runner.invoke(app, ["whitelist", "--config", str(config)])

    assert result.exit_code == 0
    assert "get=False" in result.output
    assert "cache-variables" in result.output


def test_cli_debug_storage_smoke(tmp_path) -> None:
    runner = CliRunner()
    cache_dir = tmp_path / "static"

    result = runner.invoke(app, ["debug", "storage", "--cache-dir", str(cache_dir)])

    assert result.exit_code == 0
    assert "storage ok" in result.output
    assert cache_dir.exists()
