"""
Shared pytest fixtures for the SimpSim test suite.
"""

import pytest

from simpsim.assembler import Assembler, assemble
from simpsim.machine import Machine
from simpsim.simulator import Simulator, SimulatorConfig


@pytest.fixture
def assembler():
    return Assembler()


@pytest.fixture
def machine():
    return Machine()


@pytest.fixture
def simulator():
    return Simulator(SimulatorConfig(max_steps=1000))


@pytest.fixture
def load_program(machine):
    """Assemble source and load it into the machine fixture."""
    def _load(source: str) -> Machine:
        machine.load_instructions(assemble(source))
        return machine
    return _load
