from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import typer
from pydantic import BaseModel

from static_file_cache.config import AppConfig, load_config
from static_file_cache.decorator import StaticFileCache
from static_file_cache.schemas import Expire

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

app = typer.Typer(help="Static file cache CLI")
debug_app = typer.Typer(help="Debug commands")
app.add_typer(debug_app, name="debug")

ConfigOption = typer.Option(
    None,
    "--config",
    help="Config file path (YAML or JSON).",
    exists=True,
    dir_okay=False,
    readable=True,
)


@app.command("get")
def get_item(
    bin_name: str = typer.Argument(..., help="Cache bin."),
    cid: str = typer.Argument(..., help="Cache identifier within the bin."),
    config_path: Path | None = ConfigOption,
) -> None:
    """Print the cached object for CID as JSON."""
    cache = _build_cache(bin_name, config_path)
    value = cache.get(cid)
    if value is None or value is False:
        typer.echo(f"miss bin={cache.bin_name} cid={cid}", err=True)
        raise typer.Exit(code=1)
    typer.echo(_to_json(value))


@app.command("set")
def set_item(
    bin_name: str = typer.Argument(..., help="Cache bin."),
    cid: str = typer.Argument(..., help="Cache identifier within the bin."),
    data: str = typer.Option(..., "--data", help="JSON payload to store."),
    expire: int = typer.Option(
        int(Expire.PERMANENT),
        "--expire",
        help="0 = permanent, -1 = temporary, otherwise a unix timestamp.",
        min=int(Expire.TEMPORARY),
    ),
    config_path: Path | None = ConfigOption,
) -> None:
    """Store a JSON payload under CID."""
    try:
        payload = json.loads(data)
    except json.JSONDecodeError as exc:
        typer.echo(f"invalid --data JSON: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    cache = _build_cache(bin_name, config_path)
    result = cache.set(cid, payload, expire)
    if result is False:
        typer.echo(f"set refused bin={cache.bin_name} cid={cid}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"stored bin={cache.bin_name} cid={cid}")


@app.command("clear")
def clear_items(
    bin_name: str = typer.Argument(..., help="Cache bin."),
    cid: str | None = typer.Argument(None, help="Cache identifier or prefix."),
    wildcard: bool = typer.Option(
        False,
        "--wildcard",
        help="Treat CID as a prefix ('*' clears everything).",
    ),
    config_path: Path | None = ConfigOption,
) -> None:
    """Clear one cid, a prefix, or expired temporary items."""
    if wildcard and cid is None:
        typer.echo("--wildcard requires a CID prefix", err=True)
        raise typer.Exit(code=1)

    cache = _build_cache(bin_name, config_path)
    cache.clear(cid, wildcard)
    typer.echo(f"cleared bin={cache.bin_name} cid={cid or '-'} wildcard={wildcard}")


@app.command("whitelist")
def show_whitelist(config_path: Path | None = ConfigOption) -> None:
    """List whitelisted cids and the active permission flags."""
    policy = _load_app_config(config_path).static_file_cache
    typer.echo(
        "get={} add={} update={} delete={} fallback={}".format(
            policy.get_allowed,
            policy.add_allowed,
            policy.update_allowed,
            policy.delete_allowed,
            policy.fallback_cache_class,
        )
    )
    if not policy.whitelist_cids:
        typer.echo("no whitelisted cids")
        return
    for qualified_cid in sorted(policy.whitelist_cids):
        typer.echo(qualified_cid)


@debug_app.command("storage")
def debug_storage(
    cache_dir: Path = typer.Option(
        Path("data/static_cache"),
        "--cache-dir",
        help="Static file cache directory.",
    ),
) -> None:
    """Run static file round-trip smoke test."""
    config = AppConfig.model_validate(
        {
            "static_file_cache": {
                "add_allowed": True,
                "update_allowed": True,
                "delete_allowed": True,
                "whitelist_cids": ["debug-storage"],
                "cache_directory": str(cache_dir),
            }
        }
    )
    cache = StaticFileCache(
        "debug",
        config.static_file_cache,
        fallback_config=config.fallback,
    )

    cache_value = {"status": "smoke_ok"}
    stored = cache.set("storage", cache_value, Expire.PERMANENT)
    cached = cache.get("storage")
    fallback_stored = cache.set("not-whitelisted", cache_value, Expire.TEMPORARY)
    fallback_cached = cache.get("not-whitelisted")

    if (
        stored is not True
        or cached is None
        or cached.data != cache_value
        or fallback_stored is not True
        or fallback_cached is None
    ):
        typer.echo("storage smoke test failed", err=True)
        raise typer.Exit(code=1)

    cache.clear("storage")
    typer.echo("storage ok")


def _load_app_config(config_path: Path | None) -> AppConfig:
    if config_path is None:
        return AppConfig()
    try:
        return load_config(config_path)
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc


def _build_cache(bin_name: str, config_path: Path | None) -> StaticFileCache:
    config = _load_app_config(config_path)
    try:
        cache = StaticFileCache(
            bin_name,
            config.static_file_cache,
            fallback_config=config.fallback,
        )
        cache.get_fallback_cache()
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    return cache


def _to_json(value: Any) -> str:
    if isinstance(value, BaseModel):
        return value.model_dump_json()
    return json.dumps(value, ensure_ascii=False, default=str)


def main() -> None:
    """CLI entrypoint."""
    app()


if __name__ == "__main__":
    main()
