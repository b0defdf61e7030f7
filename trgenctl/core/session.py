"""Device session: capability state and the command surface of one TrGEN unit."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from trgenctl.core.errors import (
    InstructionRangeError,
    NotConnectedError,
    ProtocolError,
    TransportError,
    TrgenError,
)
from trgenctl.core.model import Acknowledgment, BitOrder, DeviceCapabilities, DeviceConfig, SessionState
from trgenctl.core.pins import PINS_BY_CLASS, PinClass, TriggerPin, mask_pins, pin_name
from trgenctl.core.program import PULSE_SLOTS, TriggerProgram
from trgenctl.core.reporting import LoggingReporter, Reporter
from trgenctl.protocol import instructions
from trgenctl.protocol.capabilities import MemoryLengthRule, decode_capabilities, default_memory_length
from trgenctl.protocol.framing import Command, build_frame, parse_acknowledgment, program_command_id
from trgenctl.transports.base import Transport
from trgenctl.transports.tcp import TCPTransport


class DeviceSession:
    """Synchronous driver for one device.

    Every command is its own connect/write/read/close cycle and at most one
    command is outstanding. Sessions are not thread safe; callers sharing a
    session must serialise access themselves.

    ``connected`` is True after the last command reached the device and
    got a reply, False after a transport failure.
    """

    def __init__(
        self,
        config: DeviceConfig | None = None,
        *,
        transport: Transport | None = None,
        reporter: Reporter | None = None,
        memory_length_rule: MemoryLengthRule = default_memory_length,
    ) -> None:
        self.config = config or DeviceConfig()
        self.transport = transport or TCPTransport()
        self.reporter = reporter or LoggingReporter()
        self.memory_length_rule = memory_length_rule
        self.state = SessionState.DISCONNECTED
        self.capabilities: DeviceCapabilities | None = None
        self.last_error: TrgenError | None = None
        self.connected = False

    @property
    def memory_length(self) -> int:
        if self.capabilities is None:
            raise NotConnectedError("Device capabilities unknown. Call connect() first.")
        return self.capabilities.program_memory_length

    # Connection

    def connect(self) -> bool:
        """Query and store device capabilities.

        Failures are reported and kept on ``last_error``; the previous state
        and capabilities stay in place. ``connected`` is not restored: it
        always reflects the outcome of the last transport exchange.
        """
        previous_state = self.state
        self.state = SessionState.CONNECTING
        try:
            packed = self.request_capabilities()
            capabilities = decode_capabilities(packed, memory_length_rule=self.memory_length_rule)
        except TrgenError as exc:
            self.state = previous_state
            self.last_error = exc
            self.reporter.connect_failed(exc)
            return False

        self.capabilities = capabilities
        self.state = SessionState.READY
        self.last_error = None
        self.reporter.connected(capabilities)
        return True

    def is_available(self, timeout_s: float | None = None) -> bool:
        try:
            return self.transport.probe(
                self.config.host,
                port=self.config.port,
                timeout_s=self.config.timeout_s if timeout_s is None else timeout_s,
            )
        except Exception:
            return False

    def send_command(self, command_id: int, payload: Sequence[int] = ()) -> Acknowledgment:
        frame = build_frame(command_id, payload)
        self.reporter.command_sent(command_id, frame)
        try:
            reply = self.transport.send(
                self.config.host,
                frame,
                port=self.config.port,
                timeout_s=self.config.timeout_s,
            )
        except TransportError as exc:
            self.connected = False
            self.state = SessionState.DISCONNECTED
            self.reporter.command_failed(command_id, exc)
            raise
        self.connected = True
        if self.capabilities is not None:
            self.state = SessionState.READY

        try:
            return parse_acknowledgment(reply.decode("ascii", errors="replace"), command_id)
        except ProtocolError as exc:
            self.reporter.command_failed(command_id, exc)
            raise

    def request_capabilities(self) -> int:
        return self.send_command(Command.QUERY_CAPABILITIES).value

    # Trigger memory

    def create_program(self, pin_id: int) -> TriggerProgram:
        return TriggerProgram(pin_id, self.memory_length)

    def send_program(self, program: TriggerProgram) -> Acknowledgment:
        return self.send_command(program_command_id(program.pin_id), program.slots)

    def reset_pin(self, pin_id: int) -> None:
        self.send_program(TriggerProgram.reset(pin_id, self.memory_length))

    def reset_pins(self, pin_ids: Iterable[int]) -> None:
        for pin_id in pin_ids:
            self.reset_pin(pin_id)

    def reset_class(self, pin_class: PinClass) -> None:
        self.reset_pins(PINS_BY_CLASS[pin_class])

    def reset_all_ns(self) -> None:
        self.reset_pins(TriggerPin.ALL_NS)

    def reset_all_sa(self) -> None:
        self.reset_pins(TriggerPin.ALL_SA)

    def reset_all_gpio(self) -> None:
        self.reset_pins(TriggerPin.ALL_GPIO)

    def reset_tmso(self) -> None:
        self.reset_pin(TriggerPin.TMSO)

    def _pulse_width(self, active_us: int | None) -> int:
        width = self.config.pulse_width_us if active_us is None else active_us
        instructions.active_for_us(width)
        return width

    def _check_pulse_fits(self) -> None:
        if self.memory_length < PULSE_SLOTS:
            raise InstructionRangeError(
                f"A pulse needs at least {PULSE_SLOTS} instruction slots, device has {self.memory_length}"
            )

    def program_default_pulse(self, pin_id: int, active_us: int | None = None) -> None:
        self.send_program(TriggerProgram.pulse(pin_id, self.memory_length, self._pulse_width(active_us)))

    # Orchestration

    def start_triggers(self, pin_ids: Iterable[int], active_us: int | None = None) -> None:
        """Silence every addressable pin, arm a pulse on each requested pin, then START.

        Pin ids, pulse width and memory length are checked before the first
        frame goes out.

        Raises:
            PinResolutionError: if an id is not in the pin table.
            InstructionRangeError: for a bad width or a memory too short for a pulse.
        """
        targets = list(pin_ids)
        width = self._pulse_width(active_us)
        self._check_pulse_fits()
        for pin_id in targets:
            pin_name(pin_id)

        self.reset_all_gpio()
        self.reset_all_sa()
        self.reset_all_ns()
        for pin_id in targets:
            self.program_default_pulse(pin_id, width)
        self.start()

    def start_trigger(self, pin_id: int, active_us: int | None = None) -> None:
        self.start_triggers([pin_id], active_us)

    def send_marker(
        self,
        ns: int | None = None,
        sa: int | None = None,
        gpio: int | None = None,
        bit_order: BitOrder | None = None,
        active_us: int | None = None,
    ) -> list[int]:
        """Pulse every pin selected by the NeuroScan, SynAmps and GPIO masks at once.

        Returns the programmed pin ids, in programming order. Nothing is sent
        when all masks are None.
        """
        if ns is None and sa is None and gpio is None:
            return []
        order = self.config.bit_order if bit_order is None else bit_order
        width = self._pulse_width(active_us)
        self._check_pulse_fits()

        # validate all masks before touching the device
        targets: list[int] = []
        for mask, pin_class in ((ns, PinClass.NEUROSCAN), (sa, PinClass.SYNAMPS), (gpio, PinClass.GPIO)):
            if mask is not None:
                targets.extend(mask_pins(mask, pin_class, order))

        self.reset_all_ns()
        self.reset_all_sa()
        self.reset_all_gpio()
        self.reset_tmso()
        for pin_id in targets:
            self.program_default_pulse(pin_id, width)
        self.start()
        return targets

    def start(self) -> None:
        self.send_command(Command.START)

    def stop(self) -> None:
        self.send_command(Command.STOP)

    def stop_and_reset_all(self) -> None:
        self.stop()
        self.reset_tmso()
        self.reset_all_sa()
        self.reset_all_gpio()
        self.reset_all_ns()

    # Levels and GPIO

    def set_level(self, mask: int) -> None:
        self.send_command(Command.SET_LEVEL, [mask])

    def set_gpio(self, mask: int) -> None:
        self.send_command(Command.SET_GPIO, [mask])

    def get_level(self) -> int:
        return self.send_command(Command.QUERY_LEVEL).value

    def get_status(self) -> int:
        return self.send_command(Command.QUERY_STATUS).value

    def get_gpio(self) -> int:
        return self.send_command(Command.QUERY_GPIO).value

