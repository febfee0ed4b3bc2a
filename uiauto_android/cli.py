# uiauto_android/cli.py
"""
@file cli.py
@brief Command-line interface for uiauto-android.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from .adb import AdbBridge
from .config import ResolverConfig
from .device import DeviceSelector
from .diaglogger import DIAG_LOGGER
from .exceptions import UIAutoError
from .inspector import INSPECT_MODES, Inspector
from .recorder import Recorder
from .resolver import ElementResolver, coordinate_locator
from .snapshot import SnapshotCache
from .timings import list_presets


def _configure_logging_from_env() -> None:
    """Configure stdlib logging and the diagnostic logger from environment variables."""
    level = os.getenv("UIAUTO_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    DIAG_LOGGER.configure_from_env()


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _build_config(args: argparse.Namespace) -> ResolverConfig:
    overrides: Dict[str, Any] = {}
    if getattr(args, "tolerance", None) is not None:
        overrides["containment_tolerance"] = args.tolerance
    if getattr(args, "radius", None) is not None:
        overrides["proximity_radius"] = args.radius
    return ResolverConfig.build_from(
        preset=args.preset,
        config_path=args.config,
        overrides=overrides,
    )


def _add_point_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--x", type=float, required=True, help="X coordinate in device pixels")
    p.add_argument("--y", type=float, required=True, help="Y coordinate in device pixels")
    p.add_argument("--device", "-d", default=None, help="Device id (defaults to the primary device)")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    argv = argv if argv is not None else sys.argv[1:]
    _configure_logging_from_env()

    p = argparse.ArgumentParser(
        prog="uiauto-android",
        description="uiauto-android - resolve Android screen coordinates to UI elements",
    )
    p.add_argument("--adb", default=os.getenv("UIAUTO_ADB_PATH", "adb"), help="Path to the adb executable")
    p.add_argument("--config", default=None, help="Resolver config YAML")
    p.add_argument("--preset", choices=sorted(list_presets()), default=None, help="Resolver preset")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("devices", help="List connected devices, primary first")

    dumpp = sub.add_parser("dump", help="Print the current hierarchy XML")
    dumpp.add_argument("--device", "-d", default=None)
    dumpp.add_argument("--out", "-o", default=None, help="Write to file instead of stdout")

    resp = sub.add_parser("resolve", help="Resolve a coordinate to an element and locator")
    _add_point_args(resp)
    resp.add_argument("--tolerance", type=float, default=None, help="Containment tolerance override")
    resp.add_argument("--radius", type=float, default=None, help="Proximity radius override")

    insp = sub.add_parser("inspect", help="Inspect a coordinate and list scored locators")
    _add_point_args(insp)
    insp.add_argument("--mode", choices=INSPECT_MODES, default="tap")

    tapp = sub.add_parser("tap", help="Resolve, tap and record a coordinate")
    _add_point_args(tapp)
    tapp.add_argument("--scenario-out", default=None, help="Append the step to a new scenario YAML")

    args = p.parse_args(argv)

    bridge = AdbBridge(adb_path=args.adb)
    selector = DeviceSelector(bridge)

    try:
        if args.cmd == "devices":
            _print_json([
                {"id": d.id, "status": d.status, "type": d.type}
                for d in selector.refresh()
            ])
            return 0

        config = _build_config(args)
        device_id = selector.select(args.device)
        cache = SnapshotCache(bridge, config=config)

        if args.cmd == "dump":
            snap = cache.fetch_snapshot(device_id, force_fresh=True)
            if not snap.xml:
                print(f"Error: no hierarchy from {device_id}", file=sys.stderr)
                return 1
            if args.out:
                with open(args.out, "w", encoding="utf-8") as f:
                    f.write(snap.xml)
                print(f"Hierarchy written to: {args.out}")
            else:
                print(snap.xml)
            return 0

        resolver = ElementResolver(cache, config=config, capture_func=bridge.screencap)

        if args.cmd == "resolve":
            match = resolver.resolve(args.x, args.y, device_id)
            if match is None:
                _print_json({
                    "device_id": device_id,
                    "resolved": False,
                    "locator": coordinate_locator(args.x, args.y),
                })
                return 2
            _print_json({"device_id": device_id, "resolved": True, **match.to_dict()})
            return 0

        if args.cmd == "inspect":
            inspector = Inspector(cache, config=config)
            _print_json(inspector.inspect_point(args.x, args.y, device_id, mode=args.mode))
            return 0

        if args.cmd == "tap":
            recorder = Recorder(resolver, selector, bridge, scenario_out_path=args.scenario_out)
            step = recorder.record_tap(args.x, args.y, device_id=device_id)
            _print_json(step)
            if args.scenario_out:
                recorder.save_scenario()
                print(f"Scenario saved to: {args.scenario_out}", file=sys.stderr)
            return 0

    except UIAutoError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 1


if __name__ == "__main__":
    sys.exit(main())
