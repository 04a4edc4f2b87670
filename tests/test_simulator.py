"""
Simulator Façade Tests
======================

Tests for SimulatorConfig and the Assembler + Machine pairing.
"""

import pytest

from simpsim import Simulator, SimulatorConfig
from simpsim.errors import UnrecognizedMnemonicError
from simpsim.machine import BreakReason

HELLO = """
        load  R1,0x48
        store R1,[0xFF]
        load  R1,0x69
        store R1,[0xFF]
        halt
"""


class TestSimulatorConfig:

    def test_defaults(self):
        config = SimulatorConfig()
        assert config.max_steps == 10_000
        assert config.clear_memory_on_load is True
        assert config.output_port == 0xFF

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("SIMPSIM_MAX_STEPS", "50")
        monkeypatch.setenv("SIMPSIM_CLEAR_MEMORY", "no")
        config = SimulatorConfig.from_env()
        assert config.max_steps == 50
        assert config.clear_memory_on_load is False

    def test_from_env_ignores_invalid_values(self, monkeypatch):
        monkeypatch.setenv("SIMPSIM_MAX_STEPS", "lots")
        monkeypatch.setenv("SIMPSIM_CLEAR_MEMORY", "maybe")
        config = SimulatorConfig.from_env()
        assert config.max_steps == 10_000
        assert config.clear_memory_on_load is True

    def test_from_env_without_variables(self, monkeypatch):
        monkeypatch.delenv("SIMPSIM_MAX_STEPS", raising=False)
        monkeypatch.delenv("SIMPSIM_CLEAR_MEMORY", raising=False)
        assert SimulatorConfig.from_env() == SimulatorConfig()


class TestSimulator:

    def test_hello(self, simulator):
        simulator.assemble_and_load(HELLO)
        event = simulator.run()
        assert event.reason == BreakReason.HALT
        assert simulator.output == "Hi"

    def test_load_resets_program_counter(self, simulator):
        simulator.machine.program_counter = 0x40
        simulator.assemble_and_load("halt")
        assert simulator.machine.program_counter == 0

    def test_load_clears_memory(self, simulator):
        simulator.machine.write_memory(0x80, 0xAA)
        simulator.assemble_and_load("halt")
        assert simulator.machine.read_memory(0x80) == 0

    def test_load_can_keep_memory(self):
        sim = Simulator(SimulatorConfig(clear_memory_on_load=False))
        sim.machine.write_memory(0x80, 0xAA)
        sim.assemble_and_load("halt")
        assert sim.machine.read_memory(0x80) == 0xAA

    def test_failed_assembly_leaves_machine_untouched(self, simulator):
        simulator.assemble_and_load("load R1,7\nhalt")
        before = simulator.machine.snapshot()
        with pytest.raises(UnrecognizedMnemonicError):
            simulator.assemble_and_load("frobnicate R1")
        assert simulator.machine.snapshot() == before

    def test_run_uses_configured_step_budget(self):
        sim = Simulator(SimulatorConfig(max_steps=25))
        sim.assemble_and_load("loop: jmp loop")
        event = sim.run()
        assert event.reason == BreakReason.MAX_STEPS
        assert event.steps == 25

    def test_run_step_budget_argument(self, simulator):
        simulator.assemble_and_load("loop: jmp loop")
        assert simulator.run(5).steps == 5

    def test_step(self, simulator):
        simulator.assemble_and_load("load R1,3\nhalt")
        event = simulator.step()
        assert event.reason == BreakReason.STEP
        assert event.address == 0x02
        assert simulator.machine.read_register(1) == 3
        assert str(event) == "Step at $02"

    def test_step_onto_halt(self, simulator):
        simulator.assemble_and_load("load R1,3\nhalt")
        simulator.step()
        event = simulator.step()
        assert event.reason == BreakReason.HALT
        assert event.address == 0x02
        assert str(event) == "Halted"

    def test_load_file(self, simulator, tmp_path):
        source = tmp_path / "hello.asm"
        source.write_text(HELLO)
        simulator.load_file(source)
        simulator.run()
        assert simulator.output == "Hi"

    def test_reset(self, simulator):
        simulator.assemble_and_load(HELLO)
        simulator.run()
        simulator.reset()
        assert simulator.output == ""
        assert simulator.machine.program_counter == 0
        assert simulator.machine.registers.to_bytes() == bytes(16)
        assert simulator.machine.memory.to_bytes() == bytes(256)

    def test_float_program(self, simulator):
        simulator.assemble_and_load("load R1,0x48\naddf R2,R1,R1\nhalt")
        simulator.run()
        assert simulator.machine.read_register(2) == 0x58
