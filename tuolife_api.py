#!/usr/bin/env python3

"""
TuoLife cloud API tester.

Lists rooms and bulbs of an account and sends power/brightness/mode changes
through the same client the Home Assistant integration uses.

Usage examples:
  # List rooms and bulbs
  python tuolife_api.py --api-key 'KEY' --list

  # Turn a bulb off (bulb id as shown by --list)
  python tuolife_api.py --api-key 'KEY' --bulb 1A2B3C --off

  # Set brightness (0-100), which also turns the bulb on
  python tuolife_api.py --api-key 'KEY' --bulb 1A2B3C --brightness 60

  # Start a named mode
  python tuolife_api.py --api-key 'KEY' --bulb 1A2B3C --mode active5

Notes:
 - Control commands resolve the bulb from a fresh room list, so the
   current group and colour channels are sent along unchanged.
 - Needs no running Home Assistant instance, but the package root imports
   Home Assistant, so the homeassistant package must be installed.
"""

import argparse
import asyncio
import dataclasses
import json
import sys

from custom_components.tuolife.api import TuoLifeClient
from custom_components.tuolife.const import MODE_OFF, MODE_ON, OFF_BRIGHTNESS


async def main_async():
    ap = argparse.ArgumentParser(description="TuoLife cloud API tester")
    ap.add_argument("--api-key", required=True)
    ap.add_argument("--list", action="store_true", help="List rooms and bulbs and exit")
    ap.add_argument("--bulb", help="Bulb id for control")
    ap.add_argument("--on", action="store_true")
    ap.add_argument("--off", action="store_true")
    ap.add_argument("--brightness", type=int, help="Brightness 0-100")
    ap.add_argument("--mode", help="Mode id, e.g. calm5 or active5")
    args = ap.parse_args()

    client = await TuoLifeClient.create(args.api_key)
    try:
        rooms, err = await client.get_rooms()
        if err:
            print(f"Could not list rooms: {err}", file=sys.stderr)
            sys.exit(1)

        if args.list or not args.bulb:
            out = [
                {
                    "room": room.name or room.room_id,
                    "devices": [dataclasses.asdict(d) for d in room.devices],
                }
                for room in rooms
            ]
            print(json.dumps(out, indent=2))
            return

        device = next((d for room in rooms for d in room.devices if d.bulb_id == args.bulb), None)
        if device is None:
            print(f"Bulb {args.bulb} not found in account.", file=sys.stderr)
            sys.exit(2)

        if args.on or args.off:
            device.mode_id = MODE_ON if args.on else MODE_OFF
            if args.off:
                device.brightness = OFF_BRIGHTNESS
        if args.brightness is not None:
            device.brightness = args.brightness
            device.mode_id = MODE_ON
        if args.mode:
            device.mode_id = args.mode

        ok, err = await client.start_room_mode(device)
        print(f"MODE {device.mode_id} BRIGHTNESS {device.brightness} → {ok}{'' if ok else f' ({err})'}")
    finally:
        await client.close()


def main():
    try:
        asyncio.run(main_async())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
