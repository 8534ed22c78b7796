"""Dynasty Cube CLI — watch a live draft and poke at CubeCobra ratings.

Usage:
    dynasty-cube watch 6f1c...                   # Print picks as they happen
    dynasty-cube elo "Lightning Bolt" -c mycube  # One card's ELO in a cube
    dynasty-cube sync -c mycube                  # Sync ELO into pool + picks
    dynasty-cube duplicates                      # Card ids with several copies
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from typing import Any, Optional
from urllib.parse import quote

import click
import httpx

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"


def _api_url() -> str:
    return os.environ.get("DYNASTY_CUBE_API_URL", DEFAULT_API_URL).rstrip("/")


def _client(timeout: Optional[float] = 30.0) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the Dynasty Cube backend."""
    return httpx.AsyncClient(base_url=_api_url(), timeout=timeout)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from a synchronous Click handler.

    Inside an already running loop (CliRunner in an async test) the
    coroutine is run on a worker thread with its own loop.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _cube_id(cube_id: Optional[str]) -> str:
    """Resolve the cube id from the flag or DYNASTY_CUBE_DEFAULT_CUBE_ID."""
    cid = cube_id or os.environ.get("DYNASTY_CUBE_DEFAULT_CUBE_ID")
    if not cid:
        click.secho(
            "Error: --cube-id required (or set DYNASTY_CUBE_DEFAULT_CUBE_ID)",
            fg="red",
            err=True,
        )
        sys.exit(1)
    return cid


class SSEFrameParser:
    """Collect `data:` lines into one payload per blank-line-terminated frame."""

    def __init__(self):
        self._data: list[str] = []

    def feed(self, line: str) -> Optional[str]:
        line = line.rstrip("\r\n")
        if not line:
            if not self._data:
                return None
            data, self._data = "\n".join(self._data), []
            return data
        if line.startswith(":"):
            return None
        field, _, value = line.partition(":")
        if field == "data":
            self._data.append(value[1:] if value.startswith(" ") else value)
        return None


class PickDeduper:
    """Remembers pick ids already printed; the stream may repeat them."""

    def __init__(self):
        self.seen: set[str] = set()

    def is_new(self, pick: dict[str, Any]) -> bool:
        pick_id = pick.get("id")
        if pick_id is None:
            return True
        if pick_id in self.seen:
            return False
        self.seen.add(pick_id)
        return True


def format_pick(pick: dict[str, Any]) -> str:
    card_set = f" ({pick['card_set']})" if pick.get("card_set") else ""
    return (
        f"#{pick.get('pick_number', '?'):>3}  "
        f"{pick.get('team_name', pick.get('team_id', '?'))} → "
        f"{pick.get('card_name', '?')}{card_set}"
    )


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version="0.1.0", prog_name="dynasty-cube")
def main():
    """Dynasty Cube — live draft and CubeCobra rating tools."""


# ---------------------------------------------------------------------------
# dynasty-cube watch
# ---------------------------------------------------------------------------


@main.command()
@click.argument("session_id")
def watch(session_id: str):
    """Print each pick of a live draft session as it happens.

    SESSION_ID is the draft session UUID. Stop with Ctrl-C.
    """
    try:
        _run(_watch_impl(session_id))
    except KeyboardInterrupt:
        click.echo()


async def _watch_impl(session_id: str):
    parser = SSEFrameParser()
    deduper = PickDeduper()

    # No read timeout: an idle draft can go minutes between picks
    async with _client(timeout=None) as c:
        async with c.stream("GET", f"/api/draft-stream/{session_id}") as r:
            if r.status_code != 200:
                await r.aread()
                click.secho(f"Stream refused ({r.status_code}): {r.text}", fg="red")
                sys.exit(1)

            click.secho(f"Watching draft {session_id}…", bold=True)
            async for line in r.aiter_lines():
                data = parser.feed(line)
                if data is None:
                    continue
                try:
                    pick = json.loads(data)
                except ValueError:
                    click.secho(f"Skipping malformed frame: {data[:80]}", fg="yellow", err=True)
                    continue
                if isinstance(pick, dict) and deduper.is_new(pick):
                    click.echo(format_pick(pick))


# ---------------------------------------------------------------------------
# dynasty-cube elo
# ---------------------------------------------------------------------------


@main.command()
@click.argument("card_name")
@click.option("--cube-id", "-c", help="CubeCobra cube id (or set DYNASTY_CUBE_DEFAULT_CUBE_ID)")
def elo(card_name: str, cube_id: Optional[str]):
    """Look up one card's CubeCobra ELO.

    CARD_NAME is matched case-insensitively.
    """
    _run(_elo_impl(card_name, cube_id))


async def _elo_impl(card_name: str, cube_id: Optional[str]):
    cid = _cube_id(cube_id)
    async with _client() as c:
        r = await c.get(f"/api/v1/cubes/{quote(cid, safe='')}/cards/{quote(card_name)}/elo")

        if r.status_code == 404:
            click.secho(r.json().get("detail", "Not found"), fg="yellow")
            sys.exit(1)
        elif r.status_code == 502:
            click.secho(f"CubeCobra unavailable: {r.json().get('detail')}", fg="red")
            sys.exit(1)

        r.raise_for_status()
        data = r.json()
        click.echo(f"{data['card_name']}: {data['elo']}  ({data['cube_name']})")


# ---------------------------------------------------------------------------
# dynasty-cube sync
# ---------------------------------------------------------------------------


@main.command()
@click.option("--cube-id", "-c", help="CubeCobra cube id (or set DYNASTY_CUBE_DEFAULT_CUBE_ID)")
def sync(cube_id: Optional[str]):
    """Sync CubeCobra ELO into the card pool and drafted picks."""
    _run(_sync_impl(cube_id))


async def _sync_impl(cube_id: Optional[str]):
    cid = _cube_id(cube_id)
    # The backend waits on the CubeCobra rate limiter before fetching
    async with _client(timeout=120.0) as c:
        r = await c.post("/api/v1/ratings/sync", json={"cube_id": cid})
        r.raise_for_status()
        result = r.json()

    click.secho(result["message"], fg="green" if result["success"] else "red")
    for key in ("pool", "picks"):
        table = result.get(key)
        if table:
            click.echo(
                f"  {table['table']:18s}  updated={table['updated_count']}  "
                f"not_found={table['not_found_count']}  errors={len(table['errors'])}"
            )
    if not result["success"]:
        sys.exit(1)


# ---------------------------------------------------------------------------
# dynasty-cube duplicates
# ---------------------------------------------------------------------------


@main.command()
def duplicates():
    """List card ids that appear more than once in the pool."""
    _run(_duplicates_impl())


async def _duplicates_impl():
    async with _client() as c:
        r = await c.get("/api/v1/pool/duplicates")
        r.raise_for_status()
        data = r.json()

    if not data["card_ids"]:
        click.echo("No duplicated cards in the pool.")
        return
    click.secho(f"{data['count']} duplicated card ids:", bold=True)
    for card_id in data["card_ids"]:
        click.echo(f"  {card_id}")


if __name__ == "__main__":
    main()
