"""Perceptron branch predictor with a speculative global history."""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass

from .counters import SignedSaturatingCounter

PERCEPTRON_HISTORY = 24
PERCEPTRON_BITS = 8
NUM_PERCEPTRONS = 163
NUM_UPDATE_ENTRIES = 100
THETA = math.floor(1.93 * PERCEPTRON_HISTORY + 14)


class Perceptron:
    """A bias weight and one weight per history bit, all saturating signed counters.

    Histories are integers whose bit ``i`` is the outcome ``i`` branches ago.
    """

    def __init__(self, history_length: int, bits: int) -> None:
        self.history_length = history_length
        self.bias = SignedSaturatingCounter(bits, 0)
        self.weights = [SignedSaturatingCounter(bits, 0) for _ in range(history_length)]

    def _bits(self, history: int):
        return (bool((history >> i) & 1) for i in range(self.history_length))

    def predict(self, history: int) -> int:
        """Dot product of the history (as +1/-1) with the weights, plus the bias."""
        output = self.bias.value()
        for bit, weight in zip(self._bits(history), self.weights):
            output += weight.value() if bit else -weight.value()
        return output

    def update(self, result: bool, history: int) -> None:
        """Move each weight towards agreement between its history bit and ``result``."""
        self.bias += 1 if result else -1
        mask = (1 << self.history_length) - 1
        upd_mask = history & mask if result else ~history & mask
        for bit, weight in zip(self._bits(upd_mask), self.weights):
            weight += 1 if bit else -1


@dataclass
class PerceptronState:
    """What a prediction was based on, kept until the branch resolves."""

    ip: int
    prediction: bool
    output: int
    history: int


class PerceptronPredictor:
    """A table of perceptrons indexed by branch address."""

    def __init__(self) -> None:
        self.perceptrons = [Perceptron(PERCEPTRON_HISTORY, PERCEPTRON_BITS) for _ in range(NUM_PERCEPTRONS)]
        self.state_buffer: deque[PerceptronState] = deque(maxlen=NUM_UPDATE_ENTRIES)
        self.spec_global_history = 0
        self.global_history = 0

    @staticmethod
    def _shift(history: int, bit: bool) -> int:
        return ((history << 1) | int(bit)) & ((1 << PERCEPTRON_HISTORY) - 1)

    def predict(self, ip: int) -> bool:
        """Predict the branch at ``ip`` and update the speculative history."""
        output = self.perceptrons[ip % NUM_PERCEPTRONS].predict(self.spec_global_history)
        prediction = output >= 0
        self.state_buffer.append(PerceptronState(ip, prediction, output, self.spec_global_history))
        self.spec_global_history = self._shift(self.spec_global_history, prediction)
        return prediction

    def last_branch_result(self, ip: int, branch_target: int, taken: bool, branch_type: int) -> None:
        """Train on a resolved branch; ignored if its prediction state has been lost."""
        state = next((s for s in self.state_buffer if s.ip == ip), None)
        if state is None:
            return
        self.state_buffer.remove(state)

        taken = bool(taken)
        self.global_history = self._shift(self.global_history, taken)

        if state.prediction != taken:
            self.spec_global_history = self.global_history

        if -THETA <= state.output <= THETA or state.prediction != taken:
            self.perceptrons[ip % NUM_PERCEPTRONS].update(taken, state.history)