"""Cache commands -- inspect and empty the on-disk response cache."""

from __future__ import annotations

import typer

from distmatrix.output import format_response, info, success

cache_app = typer.Typer(no_args_is_help=True)


def _open_cache():
    from distmatrix.cache import DiskCache
    from distmatrix.config import get_cache_dir, load_global_config

    settings = load_global_config()
    return DiskCache(get_cache_dir(), settings.cache)


@cache_app.command("stats")
def cache_stats() -> None:
    """Show cache size, location, and TTL."""
    cache = _open_cache()
    try:
        format_response(cache.stats())
    finally:
        cache.close()


@cache_app.command("clear")
def cache_clear() -> None:
    """Remove every cached response."""
    cache = _open_cache()
    try:
        stats = cache.stats()
        if not stats["enabled"]:
            info("Cache is disabled; nothing to clear.")
            return
        cache.clear()
        success(f"Removed {stats['size']} cached responses")
    finally:
        cache.close()
