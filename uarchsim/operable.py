"""Clocked components that advance one cycle at a time, with clock scaling."""

from __future__ import annotations

from abc import ABC, abstractmethod


class Operable(ABC):
    """A component driven by the global clock.

    A component with a clock scale greater than one skips cycles, so that it
    operates once every ``scale`` global ticks on average.
    """

    def __init__(self, scale: float) -> None:
        self.clock_scale = scale - 1
        self.leap_operation = 0.0
        self.current_cycle = 0
        self.warmup = True
        self.phase_start_cycle = 0
        self.phase_end_cycles: dict[int, int] = {}

    def tick(self) -> int:
        """Advance the global clock by one tick, operating if this cycle is not skipped."""
        if self.leap_operation >= 1:
            self.leap_operation -= 1
            return 0

        result = self.operate()

        self.leap_operation += self.clock_scale
        self.current_cycle += 1

        return result

    @abstractmethod
    def operate(self) -> int:
        """Do one cycle of work and return the amount of progress made."""

    def initialize(self) -> None:
        """Prepare the component before simulation starts."""
        self.leap_operation = 0.0

    def begin_phase(self) -> None:
        """Note the cycle at which a simulation phase starts."""
        self.phase_start_cycle = self.current_cycle

    def end_phase(self, cpu: int) -> None:
        """Note the cycle at which ``cpu`` finished the current phase."""
        self.phase_end_cycles[cpu] = self.current_cycle

    def print_deadlock(self) -> str:
        """Report internal state when the simulation stops making progress."""
        message = f"{type(self).__name__} deadlocked at cycle {self.current_cycle}"
        print(message)
        return message