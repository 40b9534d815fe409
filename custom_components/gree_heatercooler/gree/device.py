"""Gree unit session: device record, binding state machine and commands.

Lifecycle of one :class:`GreeDevice`::

    DISCONNECTED ──start──▶ AWAITING_HANDSHAKE ──dev──▶ AWAITING_BIND
                                                          │
                                      bindok (session key)▼
                                                        BOUND ◀── dat / res

* ``dev``: the unit answered the scan.  The record is filled in and a bind
  request encrypted with the generic key is sent.  Further ``dev`` packets
  before binding just re-send the bind request.
* ``bindok``: the unit issued a session key.  Status polling starts and the
  *connected* notification fires, once.
* ``dat`` / ``res``: merged into :attr:`DeviceRecord.props` while bound;
  rejected as protocol errors before.

Stopping a session is final; :meth:`GreeDevice.async_start` refuses to run
again afterwards.  There is no handshake timeout: a unit that never answers
leaves the session waiting, exactly like the vendor app.  All handlers run on
the event loop, so the record is only ever mutated from one place at a time.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from .commands import (
    FAN_SPEED,
    MODE,
    POWER,
    ROOM_TEMPERATURE,
    SWING_VERT,
    TEMPERATURE,
    TEMPERATURE_UNIT,
    Power,
    TemperatureUnit,
    command_for_code,
    status_columns,
)
from .crypto import AesEcbCodec, PackCodec
from .protocol import (
    PackType,
    ParsedPack,
    bind_payload,
    build_envelope,
    command_payload,
    parse_datagram,
    status_payload,
)
from .transport import GreeTransport

_LOGGER = logging.getLogger(__name__)

DEFAULT_DISCOVERY_PORT = 7000
DEFAULT_UPDATE_INTERVAL = 10.0
"""Seconds between two status requests once bound."""


# ═════════════════════════════════════════════════════════════════════════════
# State model
# ═════════════════════════════════════════════════════════════════════════════

class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    AWAITING_HANDSHAKE = "awaiting_handshake"
    AWAITING_BIND = "awaiting_bind"
    BOUND = "bound"


class DeviceEvent(str, Enum):
    """Notifications emitted by :class:`GreeDevice`."""
    STATUS = "status"
    UPDATE = "update"
    CONNECTED = "connected"
    ERROR = "error"
    DISCONNECTED = "disconnected"


@dataclass
class DeviceRecord:
    """What is known about the remote unit.

    ``id``, ``name`` and ``port`` are filled in by the first handshake
    response.  ``bound`` goes from ``False`` to ``True`` once and stays there.
    ``props`` holds raw wire values keyed by vocabulary code.
    """

    address: str
    port: int
    id: str | None = None
    name: str | None = None
    bound: bool = False
    key: str | None = None
    props: dict[str, int] = field(default_factory=dict)


DeviceCallback = Callable[[DeviceRecord], None]


# ═════════════════════════════════════════════════════════════════════════════
# Session
# ═════════════════════════════════════════════════════════════════════════════

class GreeDevice:
    """Controls one Gree unit over UDP.

    Args:
        host:             IPv4 address of the unit.
        discovery_port:   UDP port of the unit (7000).
        update_interval:  Seconds between status polls once bound.
        codec:            Pack codec; AES/ECB unless overridden.
        on_status:        Called after a status report was merged.
        on_update:        Called after a command result was merged.
        on_connected:     Called once, when binding completes.
        on_error:         Called on socket and protocol faults.
        on_disconnected:  Called when the local socket cannot be bound.
    """

    def __init__(
        self,
        host: str,
        *,
        discovery_port: int = DEFAULT_DISCOVERY_PORT,
        update_interval: float = DEFAULT_UPDATE_INTERVAL,
        codec: PackCodec | None = None,
        on_status: DeviceCallback | None = None,
        on_update: DeviceCallback | None = None,
        on_connected: DeviceCallback | None = None,
        on_error: DeviceCallback | None = None,
        on_disconnected: DeviceCallback | None = None,
    ) -> None:
        self.host = host
        self.discovery_port = discovery_port
        self.update_interval = update_interval
        self._codec: PackCodec = codec or AesEcbCodec()

        self.record = DeviceRecord(address=host, port=discovery_port)
        self.state = ConnectionState.DISCONNECTED
        self.last_error: str | None = None

        self._listeners: dict[DeviceEvent, list[DeviceCallback]] = {
            event: [] for event in DeviceEvent
        }
        for event, cb in (
            (DeviceEvent.STATUS, on_status),
            (DeviceEvent.UPDATE, on_update),
            (DeviceEvent.CONNECTED, on_connected),
            (DeviceEvent.ERROR, on_error),
            (DeviceEvent.DISCONNECTED, on_disconnected),
        ):
            if cb is not None:
                self._listeners[event].append(cb)

        self.transport = GreeTransport(
            host,
            discovery_port,
            on_datagram=self._on_datagram,
            on_error=self._on_transport_error,
            on_disconnected=self._on_transport_disconnected,
            on_started=self._on_transport_started,
        )
        self._poll_task: asyncio.Task[None] | None = None
        self._stopped = False

        _LOGGER.debug(
            "[%s] Device session created [server port %d]",
            host, self.transport.local_port,
        )

    # ── Public API ─────────────────────────────────────────────────────────────

    @property
    def bound(self) -> bool:
        return self.record.bound

    def register_callback(self, event: DeviceEvent, cb: DeviceCallback) -> Callable[[], None]:
        """Register an additional listener for *event*.

        Listeners are called in registration order with the device record.

        Returns:
            A function removing the listener again.
        """
        self._listeners[event].append(cb)

        def _remove() -> None:
            try:
                self._listeners[event].remove(cb)
            except ValueError:
                pass

        return _remove

    async def async_start(self) -> None:
        """Open the socket and send the discovery scan.

        The state moves to ``awaiting_handshake`` once the scan is out, which
        may be after one or more bind retries.

        Raises:
            RuntimeError: If the session was stopped before.  A stopped
                session keeps its bound record, so a new one is needed.
        """
        if self._stopped:
            raise RuntimeError(
                f"Session for {self.host} was stopped, create a new GreeDevice"
            )
        _LOGGER.info("[%s] Start discovering device", self.host)
        await self.transport.async_start()

    async def async_stop(self) -> None:
        """Stop polling, cancel a pending bind retry and close the socket.

        Stopping is final for this session.
        """
        self._stopped = True
        if self._poll_task is not None and not self._poll_task.done():
            self._poll_task.cancel()
            try:
                await self._poll_task
            except asyncio.CancelledError:
                pass
        self._poll_task = None
        await self.transport.async_stop()
        self.state = ConnectionState.DISCONNECTED
        _LOGGER.info("[%s] Device session stopped", self.host)

    # ── Command dispatcher ─────────────────────────────────────────────────────

    def send_command(self, codes: list[str], values: list[int]) -> bool:
        """Send a ``cmd`` pack setting ``codes[i]`` to ``values[i]``.

        The eventual ``res`` answer updates :attr:`record` and fires the
        *update* notification.

        Returns:
            ``False`` if the unit is not bound yet (nothing is sent).

        Raises:
            ValueError: On mismatched lists or values outside an attribute's
                enumeration.
        """
        if len(codes) != len(values):
            raise ValueError(
                f"Command codes and values must match 1:1 ({len(codes)} != {len(values)})"
            )
        checked = []
        for code, value in zip(codes, values):
            cmd = command_for_code(code)
            checked.append(cmd.validate(value) if cmd is not None else int(value))
        payload = command_payload(list(codes), checked)

        if not self.record.bound:
            _LOGGER.warning(
                "[%s] Not bound yet, dropping command %s", self.host, payload
            )
            return False

        self._send_pack(payload, key=self.record.key)
        return True

    def get(self, code: str) -> int:
        """Last value reported for *code*, ``0`` if never seen."""
        return self.record.props.get(code, 0)

    def set_power(self, value: bool) -> bool:
        return self.send_command([POWER.code], [Power.ON if value else Power.OFF])

    def get_power(self) -> int:
        return self.get(POWER.code)

    def set_temp(self, value: int, unit: int = TemperatureUnit.CELSIUS) -> bool:
        """Set the target temperature (unit and value travel together)."""
        return self.send_command(
            [TEMPERATURE_UNIT.code, TEMPERATURE.code], [unit, int(value)]
        )

    def get_temp(self) -> int:
        return self.get(TEMPERATURE.code)

    def set_mode(self, value: int) -> bool:
        return self.send_command([MODE.code], [value])

    def get_mode(self) -> int:
        return self.get(MODE.code)

    def set_fan_speed(self, value: int) -> bool:
        return self.send_command([FAN_SPEED.code], [value])

    def get_fan_speed(self) -> int:
        return self.get(FAN_SPEED.code)

    def set_swing_vert(self, value: int) -> bool:
        return self.send_command([SWING_VERT.code], [value])

    def get_swing_vert(self) -> int:
        return self.get(SWING_VERT.code)

    def get_room_temp(self) -> int:
        """Raw internal sensor reading (``TemSen``), offset not removed."""
        return self.get(ROOM_TEMPERATURE.code)

    # ── Outbound ───────────────────────────────────────────────────────────────

    def _send_pack(self, payload: dict, key: str | None = None, i: int = 0) -> None:
        try:
            pack = self._codec.encrypt(payload, key)
        except ValueError as exc:
            self._report_error(f"Cannot encrypt {payload.get('t')} pack: {exc}")
            return
        _LOGGER.debug("[%s] → %s", self.host, payload)
        self.transport.send(build_envelope(pack, i=i), self.record.address, self.record.port)

    def _send_bind_request(self) -> None:
        _LOGGER.debug("[%s] Sending bind request to %s", self.host, self.record.id)
        self._send_pack(bind_payload(self.record.id or ""), i=1)

    def request_status(self) -> bool:
        """Ask the unit for every vocabulary attribute.

        The ``dat`` answer fires the *status* notification.  Returns ``False``
        without sending anything while the unit is not bound.
        """
        if not self.record.bound:
            return False
        self._send_pack(
            status_payload(self.record.id or "", status_columns()), key=self.record.key
        )
        return True

    async def _poll_loop(self) -> None:
        while True:
            await asyncio.sleep(self.update_interval)
            self.request_status()

    # ── Inbound ────────────────────────────────────────────────────────────────

    def _on_datagram(self, data: bytes, addr: tuple[str, int]) -> None:
        key = self.record.key if self.record.bound else None
        parsed = parse_datagram(data, key, self._codec)

        if parsed.type == PackType.DEV:
            self._handle_handshake(parsed, addr)
        elif parsed.type == PackType.BINDOK:
            self._handle_bindok(parsed)
        elif parsed.type in (PackType.DAT, PackType.RES):
            self._handle_values(parsed)
        elif parsed.type == PackType.UNKNOWN:
            self._report_error(f"Unexpected pack: {parsed.payload}")
        else:
            self._report_error(parsed.reason or "Undecodable datagram")

    def _handle_handshake(self, parsed: ParsedPack, addr: tuple[str, int]) -> None:
        if self.record.bound:
            _LOGGER.debug("[%s] Ignoring handshake response, already bound", self.host)
            return

        if self.record.id is None:
            self.record.id = parsed.cid
            self.record.name = parsed.name
            self.record.address = addr[0]
            self.record.port = addr[1] or self.discovery_port
            _LOGGER.info(
                "[%s] New device: id=%s name=%s port=%d",
                self.host, self.record.id, self.record.name, self.record.port,
            )
        elif parsed.cid != self.record.id:
            _LOGGER.warning(
                "[%s] Handshake response from %s, expected %s",
                self.host, parsed.cid, self.record.id,
            )
        else:
            _LOGGER.debug("[%s] Repeated handshake response, re-sending bind", self.host)

        self.state = ConnectionState.AWAITING_BIND
        self._send_bind_request()

    def _handle_bindok(self, parsed: ParsedPack) -> None:
        if self.record.bound:
            _LOGGER.debug("[%s] Ignoring repeated bind confirmation", self.host)
            return
        if self.record.id is None:
            self._report_error("Bind confirmation before handshake")
            return

        self.record.bound = True
        self.record.key = parsed.key
        self.state = ConnectionState.BOUND
        _LOGGER.info("[%s] Device is bound: %s", self.host, self.record.name)

        self._poll_task = asyncio.get_running_loop().create_task(self._poll_loop())
        self._fire(DeviceEvent.CONNECTED)

    def _handle_values(self, parsed: ParsedPack) -> None:
        if not self.record.bound:
            self._report_error(f"'{parsed.type.value}' pack received before binding")
            return

        self.record.props.update(parsed.values)
        _LOGGER.debug("[%s] Properties: %s", self.host, self.record.props)
        self._fire(DeviceEvent.STATUS if parsed.type == PackType.DAT else DeviceEvent.UPDATE)

    # ── Faults & notifications ─────────────────────────────────────────────────

    def _on_transport_error(self, exc: Exception) -> None:
        self.last_error = str(exc)
        self._fire(DeviceEvent.ERROR)

    def _on_transport_started(self) -> None:
        if not self.record.bound:
            self.state = ConnectionState.AWAITING_HANDSHAKE

    def _on_transport_disconnected(self) -> None:
        self._fire(DeviceEvent.DISCONNECTED)

    def _report_error(self, reason: str) -> None:
        _LOGGER.warning("[%s] Error communicating with device: %s", self.host, reason)
        self.last_error = reason
        self._fire(DeviceEvent.ERROR)

    def _fire(self, event: DeviceEvent) -> None:
        for cb in list(self._listeners[event]):
            try:
                cb(self.record)
            except Exception:  # noqa: BLE001
                _LOGGER.exception("[%s] Error in %s callback", self.host, event.value)
