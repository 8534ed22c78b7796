#!/usr/bin/env python3
"""
Dynasty Cube live draft demo — a short draft from empty pool to picks.

Creates two teams → fills the pool (with a duplicated card) → queues →
opens a session → makes picks, printing how the queues react.
Watch the picks arrive live in another terminal with:

    dynasty-cube watch <session id printed below>

Run with: python examples/live_draft_demo.py
Requires: pip install httpx
Backend must be running: http://localhost:8000
"""

import sys
import uuid

import httpx

BASE = "http://localhost:8000/api/v1"


def main():
    run_id = uuid.uuid4().hex[:6]
    client = httpx.Client(base_url=BASE, timeout=10)

    # ── Health check ──────────────────────────────────────────────
    print("Checking backend health...")
    try:
        health = client.get("/health").json()
    except httpx.ConnectError:
        print(f"Backend not reachable at {BASE}")
        sys.exit(1)
    print(f"  Postgres: {'✓' if health['postgres'] == 'ok' else '✗'}")
    print(f"  Redis:    {'✓' if health['redis'] == 'ok' else '✗ (picks work, live board stays quiet)'}")

    # ── Teams ─────────────────────────────────────────────────────
    print("\n1. Creating teams...")
    teams = []
    for slug, name in [("shards", "Shards"), ("ninja", "Ninja")]:
        resp = client.post("/teams", json={"id": f"{slug}-{run_id}", "name": name})
        assert resp.status_code == 201, f"Failed: {resp.text}"
        teams.append(resp.json())
        print(f"   Team: {name} ({teams[-1]['id']})")
    shards, ninja = teams

    # ── Pool ──────────────────────────────────────────────────────
    print("\n2. Filling the pool (two copies of Lightning Bolt)...")
    pool_name = f"demo-{run_id}"
    resp = client.post("/pool/cards", json={"cards": [
        {"card_id": f"bolt-{run_id}", "card_name": "Lightning Bolt", "rarity": "common",
         "card_set": "lea", "colors": ["R"], "cmc": 1, "pool_name": pool_name},
        {"card_id": f"bolt-{run_id}", "card_name": "Lightning Bolt", "rarity": "common",
         "card_set": "lea", "colors": ["R"], "cmc": 1, "pool_name": pool_name},
        {"card_id": f"ring-{run_id}", "card_name": "Sol Ring", "rarity": "uncommon",
         "card_set": "lea", "colors": [], "cmc": 1, "pool_name": pool_name},
    ]})
    assert resp.status_code == 201, f"Failed: {resp.text}"
    bolt_a, bolt_b, ring = resp.json()
    dupes = client.get("/pool/duplicates").json()
    print(f"   {len(resp.json())} cards added, duplicated ids: {dupes['card_ids']}")

    # ── Queues ────────────────────────────────────────────────────
    print("\n3. Ninja queues both Bolts and the Sol Ring...")
    for card in (bolt_a, bolt_b, ring):
        resp = client.post(f"/teams/{ninja['id']}/queue", json={"card_pool_id": card["id"]})
        assert resp.status_code == 201, f"Failed: {resp.text}"

    def show_queue():
        queue = client.get(f"/teams/{ninja['id']}/queue").json()
        print(f"   Ninja queue: {[e['card_name'] for e in queue] or '(empty)'}")

    show_queue()

    # ── Session ───────────────────────────────────────────────────
    print("\n4. Opening an active draft session...")
    resp = client.post("/draft-sessions", json={"status": "active", "total_rounds": 3})
    assert resp.status_code == 201, f"Failed: {resp.text}"
    session = resp.json()
    print(f"   Session: {session['id']}")
    print(f"   → dynasty-cube watch {session['id']}")
    input("   Press Enter to start picking...")

    # ── Picks ─────────────────────────────────────────────────────
    def pick(team, card):
        resp = client.post(
            f"/draft-sessions/{session['id']}/picks",
            json={"team_id": team["id"], "card_pool_id": card["id"]},
        )
        assert resp.status_code == 201, f"Failed: {resp.text}"
        p = resp.json()
        print(f"\n   #{p['pick_number']} {team['name']} drafts {p['card_name']}")

    print("\n5. Drafting...")
    pick(shards, bolt_a)
    show_queue()  # one Bolt still available: queue untouched
    pick(ninja, bolt_b)
    show_queue()  # last Bolt gone: both Bolt entries cleared
    pick(shards, ring)
    show_queue()

    print("\nDone. Session picks:")
    for p in client.get(f"/draft-sessions/{session['id']}/picks").json():
        print(f"   {p['team_id']:>16}  {p['card_name']}")


if __name__ == "__main__":
    main()
