#!/usr/bin/env python3
"""Dump everything the lastpos engine can read.

This script connects to Redis, and for each namespace prints stats,
health and the full listing (or one id's record) so you can spot records
that fail to decode or decode with missing fields.  It never writes.

Usage
-----
Set environment variables and run::

    export REDIS_HOST="localhost"
    python scripts/dump_all.py

Options::

    --namespace device   Only dump this namespace (device or mobile)
    --id device-001      Only look up this id
    --view full          Projection for listed records (full, gps, mobile)
    --limit N            Only list the first N records
    --offset N           Skip the first N records
    --json               Output as machine-readable JSON
    --output FILE        Write output to FILE instead of stdout
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from lastpos import LastPosConfig, LastPosError, LastPositionClient, LastPositionService, Namespace  # noqa: E402

# ── helpers ──────────────────────────────────────────────────


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def _format_record(record: dict[str, Any], indent: int = 2) -> str:
    prefix = " " * indent
    lines = []
    for key, value in record.items():
        if isinstance(value, dict):
            lines.append(f"{prefix}{key}: <dict with {len(value)} keys>")
        else:
            lines.append(f"{prefix}{key}: {value}")
    return "\n".join(lines)


# ── main ─────────────────────────────────────────────────────


async def dump_namespace(
    service: LastPositionService,
    *,
    entity_id: str | None,
    view: str | None,
    limit: int | None,
    offset: int,
    json_mode: bool,
) -> dict[str, Any]:
    """Fetch and dump all data for one namespace."""
    out: list[str] = []
    namespace = str(service.spec.namespace)
    ns_data: dict[str, Any] = {"namespace": namespace, "prefix": service.spec.key_prefix}

    out.append(_section(f"STATS  namespace={namespace}"))
    try:
        stats = await service.stats()
        out.append(_format_record(stats.to_dict()))
        ns_data["stats"] = stats.to_dict()
    except LastPosError as exc:
        out.append(f"  !! stats failed: [{exc.code}] {exc}")
        ns_data["stats"] = exc.to_dict()

    health = await service.health()
    out.append(_section(f"HEALTH  namespace={namespace}"))
    out.append(_format_record(health.to_dict()))
    ns_data["health"] = health.to_dict()

    if entity_id:
        out.append(_section(f"RECORD  {namespace}:{entity_id}"))
        try:
            result = await service.get_last_position(entity_id, view or "full")
            out.append(_format_record(result.data))
            ns_data["record"] = result.to_dict()
        except LastPosError as exc:
            out.append(f"  !! lookup failed: [{exc.code}] {exc}")
            ns_data["record"] = exc.to_dict()
    else:
        out.append(_section(f"LISTING  namespace={namespace}"))
        try:
            listing = await service.list_last_positions(limit=limit, offset=offset, view=view)
            for item in listing.data:
                out.append(_format_record(item))
                out.append("")
            out.append(f"  returned {listing.summary.returned} of {listing.summary.total}")
            ns_data["listing"] = listing.to_dict()
        except LastPosError as exc:
            out.append(f"  !! listing failed: [{exc.code}] {exc}")
            ns_data["listing"] = exc.to_dict()

    if not json_mode:
        print("\n".join(out))

    return ns_data


async def main() -> None:
    parser = argparse.ArgumentParser(
        description="Dump all last positions lastpos can read for debugging / development.",
    )
    parser.add_argument("--namespace", choices=[ns.value for ns in Namespace], help="Only dump this namespace")
    parser.add_argument("--id", dest="entity_id", help="Only look up this id")
    parser.add_argument("--view", choices=["full", "gps", "mobile"], help="Projection (default: namespace listing view)")
    parser.add_argument("--limit", type=int, help="Only list the first N records")
    parser.add_argument("--offset", type=int, default=0, help="Skip the first N records")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--output", "-o", help="Write output to FILE instead of stdout")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    config = LastPosConfig.from_env()
    result: dict[str, Any] = {
        "timestamp": datetime.now(UTC).isoformat(),
        "namespaces": [],
    }

    namespaces = [Namespace(args.namespace)] if args.namespace else list(Namespace)
    async with LastPositionClient(config) as client:
        result["target"] = client.devices.store.connection.target
        if not args.json_mode:
            print(_section("lastpos dump_all"))
            print(f"  time      : {result['timestamp']}")
            print(f"  target    : {result['target']}")

        for namespace in namespaces:
            ns_data = await dump_namespace(
                client.service(namespace),
                entity_id=args.entity_id,
                view=args.view,
                limit=args.limit,
                offset=args.offset,
                json_mode=args.json_mode,
            )
            result["namespaces"].append(ns_data)

    # ── Output ──
    payload = json.dumps(result, indent=2, default=str, ensure_ascii=False)
    if args.output:
        Path(args.output).write_text(payload, encoding="utf-8")
        print(f"JSON written to {args.output}", file=sys.stderr)
    elif args.json_mode:
        print(payload)


if __name__ == "__main__":
    asyncio.run(main())
