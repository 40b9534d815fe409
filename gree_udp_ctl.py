#!/usr/bin/env python3
"""
Gree UDP controller (command line)

Talks to one Gree-protocol air conditioner on the local network without Home
Assistant: scan, bind, optionally send commands, print the reported state.

Installation:
  pip install pycryptodome

Examples:
  python3 gree_udp_ctl.py --host 192.168.1.50 --debug
  python3 gree_udp_ctl.py --host 192.168.1.50 --power on --mode cool --temp 22
  python3 gree_udp_ctl.py --host 192.168.1.50 --fan auto --swing full
"""

from __future__ import annotations

import argparse
import asyncio
import logging

from custom_components.gree_heatercooler.gree.commands import (
    VOCABULARY,
    FanSpeed,
    Mode,
    SwingVert,
)
from custom_components.gree_heatercooler.gree.device import (
    DEFAULT_DISCOVERY_PORT,
    GreeDevice,
)

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
log = logging.getLogger("gree_udp_ctl")

EXIT_OK = 0
EXIT_NOT_BOUND = 2


def _enum_choices(enum_cls) -> dict[str, int]:
    return {member.name.lower().replace("_", "-"): member.value for member in enum_cls}


MODE_CHOICES = _enum_choices(Mode)
FAN_CHOICES = _enum_choices(FanSpeed)
SWING_CHOICES = _enum_choices(SwingVert)


class GreeController:
    def __init__(self, host: str, port: int, interval: float) -> None:
        self._bound = asyncio.Event()
        self._answered = asyncio.Event()
        self.device = GreeDevice(
            host,
            discovery_port=port,
            update_interval=interval,
            on_connected=lambda record: self._bound.set(),
            on_update=lambda record: self._answered.set(),
            on_status=lambda record: self._answered.set(),
            on_error=lambda record: log.warning("Error: %s", self.device.last_error),
        )

    async def _wait(self, event: asyncio.Event, timeout: float) -> bool:
        try:
            await asyncio.wait_for(event.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True

    async def run(self, args: argparse.Namespace) -> int:
        await self.device.async_start()
        try:
            log.info("Waiting for %s to bind (local port %d)", args.host, self.device.transport.local_port)
            if not await self._wait(self._bound, args.timeout):
                log.error("No bind confirmation from %s within %.0f s", args.host, args.timeout)
                return EXIT_NOT_BOUND

            record = self.device.record
            log.info("Bound to %s (%s), session key %s", record.name, record.id, record.key)

            sent = self._send_requested(args)
            if not sent:
                # Nothing to set: ask for the current status right away
                self.device.request_status()

            if not await self._wait(self._answered, args.timeout):
                log.warning("No answer from %s within %.0f s", args.host, args.timeout)

            for cmd in VOCABULARY:
                print(f"{cmd.code:>8}  {self.device.get(cmd.code)}")
            return EXIT_OK
        finally:
            await self.device.async_stop()

    def _send_requested(self, args: argparse.Namespace) -> bool:
        sent = False
        if args.power is not None:
            sent |= self.device.set_power(args.power == "on")
        if args.mode is not None:
            sent |= self.device.set_mode(MODE_CHOICES[args.mode])
        if args.temp is not None:
            sent |= self.device.set_temp(args.temp)
        if args.fan is not None:
            sent |= self.device.set_fan_speed(FAN_CHOICES[args.fan])
        if args.swing is not None:
            sent |= self.device.set_swing_vert(SWING_CHOICES[args.swing])
        return sent


def build_cli() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Gree UDP controller")
    parser.add_argument("--host", required=True, help="IPv4 address of the unit")
    parser.add_argument("--port", type=int, default=DEFAULT_DISCOVERY_PORT, help="UDP port of the unit")
    parser.add_argument("--interval", type=float, default=10.0, help="Status poll interval in seconds")
    parser.add_argument("--timeout", type=float, default=10.0, help="Seconds to wait for bind / answers")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--power", choices=["on", "off"], help="Switch the unit on or off")
    parser.add_argument("--mode", choices=sorted(MODE_CHOICES), help="Operating mode")
    parser.add_argument("--temp", type=int, help="Target temperature in °C")
    parser.add_argument("--fan", choices=sorted(FAN_CHOICES), help="Fan speed")
    parser.add_argument("--swing", choices=sorted(SWING_CHOICES), help="Vertical swing")
    return parser


def main() -> int:
    parser = build_cli()
    args = parser.parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    controller = GreeController(args.host, args.port, args.interval)
    return asyncio.run(controller.run(args))


if __name__ == "__main__":
    raise SystemExit(main())
