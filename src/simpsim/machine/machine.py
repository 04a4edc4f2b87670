"""
Simple Simulator Machine
========================

Fetch/decode/execute engine for the two-byte instruction set.

The machine owns 256 bytes of memory, sixteen 8-bit registers, the program
counter and the instruction register. Every mutation of that state is
published to subscribers after the new value has been committed, so a host
(a UI, a tracer, a test) can mirror the machine live.

Step sequence:
    1. IR := memory[pc], memory[pc + 1]     INSTRUCTION_REGISTER_CHANGED
    2. pc := pc + 2                         PROGRAM_COUNTER_CHANGED
    3. execute IR                           REGISTER_CHANGED / MEMORY_CHANGED / ...

Jumps overwrite the already-advanced PC. Addresses and register indices
wrap, and arithmetic wraps at 8 bits; nothing in this module raises for an
out-of-range value.

Example:
    >>> from simpsim.assembler import assemble
    >>> machine = Machine()
    >>> machine.load_instructions(assemble("load R1,5\\naddi R2,R1,R1\\nhalt"))
    >>> machine.run().reason
    <BreakReason.HALT: 1>
    >>> machine.read_register(2)
    10
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Iterable, Optional

from simpsim.cpu.floating import float_add
from simpsim.cpu.isa import OUTPUT_PORT, Instruction, Opcode, to_signed
from simpsim.machine.breakpoints import BreakEvent, BreakpointManager, BreakReason
from simpsim.machine.memory import Memory, RegisterFile

logger = logging.getLogger(__name__)


class MachineState(Enum):
    IDLE = auto()     # Between instructions or halted
    RUNNING = auto()  # Inside run()


class MachineEvent(Enum):
    """
    Notifications published by the Machine.

    Callback arguments per event:
        REGISTER_CHANGED              (index, value)
        MEMORY_CHANGED                (address, value)
        PROGRAM_COUNTER_CHANGED       (pc,)
        INSTRUCTION_REGISTER_CHANGED  (instruction,)
        STATE_CHANGED                 (state,)
        OUTPUT                        (character,)
    """
    REGISTER_CHANGED = auto()
    MEMORY_CHANGED = auto()
    PROGRAM_COUNTER_CHANGED = auto()
    INSTRUCTION_REGISTER_CHANGED = auto()
    STATE_CHANGED = auto()
    OUTPUT = auto()


@dataclass(frozen=True)
class MachineSnapshot:
    """Point-in-time copy of the complete machine state."""
    registers: bytes
    memory: bytes
    program_counter: int
    instruction_register: Instruction
    state: MachineState


class Machine:
    """
    The simulated processor and its memory.

    Attributes:
        memory: 256-byte main memory
        registers: R0-RF
        breakpoints: PC breakpoints, watchpoints and stop requests for run()
        output_port: Address whose store instructions publish OUTPUT
    """

    def __init__(self, output_port: int = OUTPUT_PORT):
        self.memory = Memory()
        self.registers = RegisterFile()
        self.breakpoints = BreakpointManager()
        self.output_port = output_port & 0xFF

        self._pc = 0
        self._ir = Instruction(0, 0)
        self._state = MachineState.IDLE
        self._subscribers: dict[MachineEvent, list[Callable[..., None]]] = defaultdict(list)

        self.memory.on_write = self._on_memory_write
        self.registers.on_write = self._on_register_write

    # =========================================================================
    # Observers
    # =========================================================================

    def subscribe(self, event: MachineEvent, callback: Callable[..., None]) -> None:
        """Register callback for event. Arguments are listed on MachineEvent."""
        self._subscribers[event].append(callback)

    def unsubscribe(self, event: MachineEvent, callback: Callable[..., None]) -> None:
        """Remove a callback; unknown callbacks are ignored."""
        callbacks = self._subscribers[event]
        if callback in callbacks:
            callbacks.remove(callback)

    def _publish(self, event: MachineEvent, *args) -> None:
        for callback in list(self._subscribers[event]):
            callback(*args)

    def _on_memory_write(self, address: int, value: int) -> None:
        self._publish(MachineEvent.MEMORY_CHANGED, address, value)

    def _on_register_write(self, index: int, value: int) -> None:
        self._publish(MachineEvent.REGISTER_CHANGED, index, value)

    # =========================================================================
    # State Properties
    # =========================================================================

    @property
    def program_counter(self) -> int:
        return self._pc

    @program_counter.setter
    def program_counter(self, value: int) -> None:
        self._pc = value & 0xFF
        self._publish(MachineEvent.PROGRAM_COUNTER_CHANGED, self._pc)

    @property
    def instruction_register(self) -> Instruction:
        return self._ir

    @instruction_register.setter
    def instruction_register(self, instruction: Instruction) -> None:
        self._ir = instruction
        self._publish(MachineEvent.INSTRUCTION_REGISTER_CHANGED, instruction)

    @property
    def state(self) -> MachineState:
        return self._state

    def _set_state(self, state: MachineState) -> None:
        if state != self._state:
            self._state = state
            self._publish(MachineEvent.STATE_CHANGED, state)

    @property
    def is_running(self) -> bool:
        return self._state == MachineState.RUNNING

    # =========================================================================
    # Control Surface
    # =========================================================================

    def reset_program_counter(self) -> None:
        self.program_counter = 0

    def clear_memory(self) -> None:
        """Set all 256 memory cells to 0x00."""
        logger.debug("Clearing memory")
        self.memory.clear()

    def clear_registers(self) -> None:
        """Set R0-RF to 0x00."""
        logger.debug("Clearing registers")
        self.registers.clear()

    def read_register(self, index: int) -> int:
        return self.registers.read(index)

    def write_register(self, index: int, value: int) -> None:
        self.registers.write(index, value)

    def read_memory(self, address: int) -> int:
        return self.memory.read(address)

    def write_memory(self, address: int, value: int) -> None:
        self.memory.write(address, value)

    def load_instructions(self, instructions: Iterable[Instruction]) -> None:
        """Write instructions into memory from address 0, two bytes each."""
        instructions = list(instructions)
        self.memory.load_instructions(instructions)
        logger.debug(f"Loaded {len(instructions)} instructions")

    def load_bytes(self, data: Iterable[int], address: int = 0) -> None:
        self.memory.load(data, address)

    def request_stop(self) -> None:
        """
        Ask a running machine to stop.

        Safe to call from a subscriber callback or another thread; run()
        returns before fetching the next instruction. Ignored while idle.
        """
        if self.is_running:
            self.breakpoints.request_break()

    def snapshot(self) -> MachineSnapshot:
        return MachineSnapshot(
            registers=self.registers.to_bytes(),
            memory=self.memory.to_bytes(),
            program_counter=self._pc,
            instruction_register=self._ir,
            state=self._state,
        )

    # =========================================================================
    # Execution
    # =========================================================================

    def step(self) -> Instruction:
        """
        Fetch, decode and execute one instruction.

        Returns:
            The instruction that was executed
        """
        self.instruction_register = self.memory.read_instruction(self._pc)
        self.program_counter = self._pc + 2
        self._execute(self._ir)
        return self._ir

    def _execute(self, instruction: Instruction) -> None:
        r, x, y = instruction.r, instruction.x, instruction.y
        regs = self.registers

        match instruction.opcode:
            case Opcode.NOP:
                pass
            case Opcode.DIRECT_LOAD:
                regs[r] = self.memory[instruction.address]
            case Opcode.IMMEDIATE_LOAD:
                regs[r] = instruction.address
            case Opcode.DIRECT_STORE:
                self._store(instruction.address, regs[r])
            case Opcode.MOVE:
                regs[x] = regs[y]
            case Opcode.INTEGER_ADD:
                regs[r] = regs[x] + regs[y]
            case Opcode.FLOATING_POINT_ADD:
                regs[r] = float_add(regs[x], regs[y])
            case Opcode.OR:
                regs[r] = regs[x] | regs[y]
            case Opcode.AND:
                regs[r] = regs[x] & regs[y]
            case Opcode.XOR:
                regs[r] = regs[x] ^ regs[y]
            case Opcode.ROR:
                count = y % 8
                value = regs[r]
                regs[r] = (value >> count) | (value << (8 - count))
            case Opcode.JUMP_EQUAL:
                if regs[r] == regs[0]:
                    self.program_counter = instruction.address
            case Opcode.HALT:
                logger.debug(f"HALT at ${(self._pc - 2) & 0xFF:02X}")
                self._set_state(MachineState.IDLE)
            case Opcode.INDIRECT_LOAD:
                regs[x] = self.memory[regs[y]]
            case Opcode.INDIRECT_STORE:
                self._store(regs[y], regs[x])
            case Opcode.JUMP_LESS_EQUAL:
                if to_signed(regs[r]) <= to_signed(regs[0]):
                    self.program_counter = instruction.address

    def _store(self, address: int, value: int) -> None:
        self.memory[address] = value
        if self.is_running:
            self.breakpoints.check_memory_write(address, value)
        if address == self.output_port:
            self._publish(MachineEvent.OUTPUT, chr(value))

    def run(self, max_steps: Optional[int] = None) -> BreakEvent:
        """
        Run until HALT, a stop request, a breakpoint or the step budget.

        A breakpoint at the starting PC is not reported, so calling run()
        again after a PC_BREAKPOINT resumes execution.

        Args:
            max_steps: Maximum instructions to execute (None for no limit)

        Returns:
            BreakEvent describing why execution stopped
        """
        logger.debug(f"Run from ${self._pc:02X} (max_steps={max_steps})")
        self._set_state(MachineState.RUNNING)
        steps = 0
        try:
            while True:
                event = self.breakpoints.check_instruction(self._pc, check_breakpoints=steps > 0)
                if event is not None:
                    break
                if max_steps is not None and steps >= max_steps:
                    event = BreakEvent(
                        BreakReason.MAX_STEPS,
                        address=self._pc,
                        message=f"Reached max steps ({max_steps})",
                    )
                    break
                instruction = self.step()
                steps += 1
                if instruction.opcode == Opcode.HALT:
                    event = BreakEvent(BreakReason.HALT, address=(self._pc - 2) & 0xFF)
                    break
        finally:
            self.breakpoints.clear_pending()
            self._set_state(MachineState.IDLE)

        event.steps = steps
        logger.debug(f"Run stopped after {steps} steps: {event}")
        return self.breakpoints.record(event)

    def run_until_pc(self, address: int, max_steps: Optional[int] = None) -> bool:
        """
        Run until PC reaches address.

        Returns:
            True if address was reached before any other stop
        """
        was_set = self.breakpoints.has_breakpoint(address)
        if not was_set:
            self.breakpoints.add_breakpoint(address)

        try:
            event = self.run(max_steps)
            return (event.reason == BreakReason.PC_BREAKPOINT and
                    event.address == (address & 0xFF))
        finally:
            if not was_set:
                self.breakpoints.remove_breakpoint(address)
