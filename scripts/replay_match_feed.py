#!/usr/bin/env python3
"""
Replay a list of match events against a running API and print each response.
Run with the API already up: uvicorn fplbotola.api:app --reload --port 8000

  python3 scripts/replay_match_feed.py events.json [--base http://127.0.0.1:8000]

events.json: [{"playerId": "wac-fwd-9", "action": "goal"}, ...]
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import httpx


def main() -> None:
    parser = argparse.ArgumentParser(description="Post match events to /process-match-event")
    parser.add_argument("events", type=Path, help="JSON list of {playerId, action}")
    parser.add_argument("--base", default="http://127.0.0.1:8000", help="API base URL")
    args = parser.parse_args()

    events = json.loads(args.events.read_text(encoding="utf-8"))
    failures = 0
    with httpx.Client(base_url=args.base, timeout=30.0) as client:
        for event in events:
            r = client.post("/process-match-event", json=event)
            body = r.json()
            if r.status_code == 200:
                print(f"{event.get('playerId')}: {event.get('action')} -> {body['pointsAdded']:+d}")
            else:
                failures += 1
                print(f"{event.get('playerId')}: {event.get('action')} -> {r.status_code} {body.get('detail')}")
    if failures:
        print(f"{failures} of {len(events)} events rejected", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
