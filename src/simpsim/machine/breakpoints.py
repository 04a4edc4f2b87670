"""
Breakpoints and Run Control
===========================

Tracks the conditions that end a continuous run of the Machine:

- HALT instruction executed
- Stop requested by the host (e.g. a UI "Break" button)
- PC breakpoint reached
- Memory write watchpoint triggered
- Step budget exhausted

The BreakpointManager is consulted by Machine.run() between instructions,
so every stop happens on an instruction boundary.

Example usage:

    >>> from simpsim.machine import Machine, BreakReason
    >>> machine = Machine()
    >>> machine.breakpoints.add_breakpoint(0x10)
    >>> event = machine.run()
    >>> if event.reason == BreakReason.PC_BREAKPOINT:
    ...     print(f"Hit breakpoint at ${event.address:02X}")
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional, Set


class BreakReason(Enum):
    """Why a run stopped."""
    HALT = auto()            # HALT instruction executed
    PC_BREAKPOINT = auto()   # PC reached a breakpoint address
    MEMORY_WRITE = auto()    # Memory write watchpoint triggered
    STEP = auto()            # Single step completed
    USER_INTERRUPT = auto()  # Host requested stop
    MAX_STEPS = auto()       # Step budget exhausted


@dataclass
class BreakEvent:
    """
    Information about why execution stopped.

    Attributes:
        reason: Why execution stopped
        address: PC or memory address involved (if applicable)
        value: Value written (for watchpoints)
        steps: Instructions executed during the run
        message: Human-readable description
    """
    reason: BreakReason
    address: Optional[int] = None
    value: Optional[int] = None
    steps: int = 0
    message: str = ""

    def __str__(self) -> str:
        if self.message:
            return self.message
        match self.reason:
            case BreakReason.HALT:
                return "Halted"
            case BreakReason.PC_BREAKPOINT:
                return f"Breakpoint at ${self.address:02X}"
            case BreakReason.MEMORY_WRITE:
                return f"Write ${self.value:02X} to ${self.address:02X}"
            case BreakReason.STEP:
                return "Single step"
            case BreakReason.USER_INTERRUPT:
                return "Stopped"
            case BreakReason.MAX_STEPS:
                return "Maximum steps reached"
            case _:
                return "Unknown"


class BreakpointManager:
    """
    Manages PC breakpoints, write watchpoints and stop requests.

    request_break() may be called from another thread or from an event
    callback while the machine is running; the request is honored before
    the next instruction is fetched.
    """

    def __init__(self):
        self._pc_breakpoints: Set[int] = set()
        self._write_watchpoints: Set[int] = set()
        self._last_event: Optional[BreakEvent] = None
        self._break_requested: bool = False
        self._watch_hit: Optional[BreakEvent] = None

    @property
    def last_event(self) -> Optional[BreakEvent]:
        """Get the last break event that occurred."""
        return self._last_event

    @property
    def break_requested(self) -> bool:
        return self._break_requested

    # =========================================================================
    # PC Breakpoints
    # =========================================================================

    def add_breakpoint(self, address: int) -> None:
        """
        Add PC breakpoint at address.

        Execution stops when PC reaches this address, before the
        instruction at that address is executed.
        """
        self._pc_breakpoints.add(address & 0xFF)

    def remove_breakpoint(self, address: int) -> None:
        self._pc_breakpoints.discard(address & 0xFF)

    def has_breakpoint(self, address: int) -> bool:
        return (address & 0xFF) in self._pc_breakpoints

    def clear_breakpoints(self) -> None:
        self._pc_breakpoints.clear()

    def list_breakpoints(self) -> List[int]:
        return sorted(self._pc_breakpoints)

    # =========================================================================
    # Write Watchpoints
    # =========================================================================

    def add_write_watchpoint(self, address: int) -> None:
        """Stop after the instruction that writes to address."""
        self._write_watchpoints.add(address & 0xFF)

    def remove_write_watchpoint(self, address: int) -> None:
        self._write_watchpoints.discard(address & 0xFF)

    def list_write_watchpoints(self) -> List[int]:
        return sorted(self._write_watchpoints)

    def clear_watchpoints(self) -> None:
        self._write_watchpoints.clear()

    # =========================================================================
    # Break Control
    # =========================================================================

    def request_break(self) -> None:
        """Request execution to stop at the next instruction boundary."""
        self._break_requested = True

    def clear_break_request(self) -> None:
        self._break_requested = False

    def clear_pending(self) -> None:
        """Drop a stop request or watchpoint hit not yet reported."""
        self._break_requested = False
        self._watch_hit = None

    def clear_all(self) -> None:
        """Remove all breakpoints and watchpoints and any pending request."""
        self.clear_breakpoints()
        self.clear_watchpoints()
        self._break_requested = False
        self._watch_hit = None
        self._last_event = None

    def record(self, event: BreakEvent) -> BreakEvent:
        """Remember event as the last break event and return it."""
        self._last_event = event
        return event

    # =========================================================================
    # Check Functions (called by the Machine)
    # =========================================================================

    def check_instruction(self, pc: int, check_breakpoints: bool = True) -> Optional[BreakEvent]:
        """
        Check if execution should stop before the instruction at pc.

        Args:
            pc: Address of the next instruction
            check_breakpoints: False for the first instruction of a run, so
                that resuming from a breakpoint does not stop immediately

        Returns:
            The BreakEvent to stop with, or None to continue
        """
        if self._break_requested:
            self._break_requested = False
            return BreakEvent(BreakReason.USER_INTERRUPT, address=pc, message="User interrupt")

        if self._watch_hit is not None:
            event, self._watch_hit = self._watch_hit, None
            return event

        if check_breakpoints and pc in self._pc_breakpoints:
            return BreakEvent(
                BreakReason.PC_BREAKPOINT, address=pc, message=f"Breakpoint at ${pc:02X}"
            )

        return None

    def check_memory_write(self, address: int, value: int) -> None:
        """Arm a watchpoint break if address is watched."""
        if address in self._write_watchpoints:
            self._watch_hit = BreakEvent(
                BreakReason.MEMORY_WRITE,
                address=address,
                value=value,
                message=f"Write ${value:02X} to ${address:02X}",
            )
