"""Hashed perceptron branch predictor with geometric history lengths and dynamic threshold."""

from __future__ import annotations

NTABLES = 16
MAXHIST = 232
MINHIST = 3
SPEED = 18
LOG_TABLE_SIZE = 12
TABLE_SIZE = 1 << LOG_TABLE_SIZE
NGHIST_WORDS = MAXHIST // LOG_TABLE_SIZE + 1

HISTORY_LENGTHS = (0, 3, 4, 6, 8, 10, 14, 19, 26, 36, 49, 67, 91, 125, 170, MAXHIST)

WEIGHT_MAX = 127
WEIGHT_MIN = -128
INITIAL_THETA = 10


class HashedPerceptronPredictor:
    """Sums one weight from each of several tables, each indexed by a hash of the
    branch address and a different length of global history."""

    def __init__(self) -> None:
        self.tables = [[0] * TABLE_SIZE for _ in range(NTABLES)]
        self.ghist_words = [0] * NGHIST_WORDS
        self.indices = [0] * NTABLES
        self.theta = INITIAL_THETA
        self.tc = 0
        self.yout = 0

    def _index(self, history_length: int, pc: int) -> int:
        most_words, last_word = divmod(history_length, LOG_TABLE_SIZE)
        x = 0
        for word in self.ghist_words[:most_words]:
            x ^= word
        x ^= self.ghist_words[most_words] & ((1 << last_word) - 1)
        x ^= pc
        return x & (TABLE_SIZE - 1)

    def predict(self, pc: int) -> bool:
        """Return True when the branch at ``pc`` is predicted taken."""
        self.indices = [self._index(n, pc) for n in HISTORY_LENGTHS]
        self.yout = sum(table[x] for table, x in zip(self.tables, self.indices))
        return self.yout >= 1

    def last_branch_result(self, pc: int, branch_target: int, taken: bool, branch_type: int) -> None:
        """Record the outcome in the history and train on the last prediction's weights."""
        taken = bool(taken)
        correct = taken == (self.yout >= 1)

        carry = taken
        for i, word in enumerate(self.ghist_words):
            word = (word << 1) | int(carry)
            carry = bool(word & TABLE_SIZE)
            self.ghist_words[i] = word & (TABLE_SIZE - 1)

        magnitude = abs(self.yout)
        if correct and magnitude >= self.theta:
            return

        for table, x in zip(self.tables, self.indices):
            if taken:
                if table[x] < WEIGHT_MAX:
                    table[x] += 1
            elif table[x] > WEIGHT_MIN:
                table[x] -= 1

        if not correct:
            self.tc += 1
            if self.tc >= SPEED:
                self.theta += 1
                self.tc = 0
        elif magnitude < self.theta:
            self.tc -= 1
            if self.tc <= -SPEED:
                self.theta -= 1
                self.tc = 0