"""Fixed-width saturating counters."""

from __future__ import annotations

from typing import Union

_Operand = Union[int, "SaturatingCounter"]


def _trunc_div(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b >= 0) else -quotient


class SaturatingCounter:
    """An unsigned counter of ``bits`` bits that clamps instead of wrapping."""

    def __init__(self, bits: int, value: int = 0) -> None:
        if bits <= 0:
            raise ValueError("a counter needs at least one bit")
        self.bits = bits
        self.minimum, self.maximum = self._bounds(bits)
        self._value = self._clamp(self._coerce(value))

    @staticmethod
    def _bounds(bits: int) -> tuple[int, int]:
        return 0, (1 << bits) - 1

    @staticmethod
    def _coerce(other: _Operand) -> int:
        if isinstance(other, SaturatingCounter):
            return other.value()
        return int(other)

    def _clamp(self, value: int) -> int:
        return max(self.minimum, min(self.maximum, value))

    def _with(self, value: int) -> "SaturatingCounter":
        return type(self)(self.bits, value)

    def value(self) -> int:
        """The current count."""
        return self._value

    def assign(self, value: _Operand) -> "SaturatingCounter":
        """Set the count, clamping it to the counter's range."""
        self._value = self._clamp(self._coerce(value))
        return self

    def __add__(self, other: _Operand) -> "SaturatingCounter":
        return self._with(self._value + self._coerce(other))

    __radd__ = __add__

    def __sub__(self, other: _Operand) -> "SaturatingCounter":
        return self._with(self._value - self._coerce(other))

    def __mul__(self, other: _Operand) -> "SaturatingCounter":
        return self._with(self._value * self._coerce(other))

    __rmul__ = __mul__

    def __truediv__(self, other: _Operand) -> "SaturatingCounter":
        return self._with(_trunc_div(self._value, self._coerce(other)))

    __floordiv__ = __truediv__

    def __iadd__(self, other: _Operand) -> "SaturatingCounter":
        return self.assign(self._value + self._coerce(other))

    def __isub__(self, other: _Operand) -> "SaturatingCounter":
        return self.assign(self._value - self._coerce(other))

    def __imul__(self, other: _Operand) -> "SaturatingCounter":
        return self.assign(self._value * self._coerce(other))

    def __itruediv__(self, other: _Operand) -> "SaturatingCounter":
        return self.assign(_trunc_div(self._value, self._coerce(other)))

    __ifloordiv__ = __itruediv__

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (int, SaturatingCounter)):
            return self._value == self._coerce(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __lt__(self, other: _Operand) -> bool:
        return self._value < self._coerce(other)

    def __le__(self, other: _Operand) -> bool:
        return self._value <= self._coerce(other)

    def __gt__(self, other: _Operand) -> bool:
        return self._value > self._coerce(other)

    def __ge__(self, other: _Operand) -> bool:
        return self._value >= self._coerce(other)

    def __int__(self) -> int:
        return self._value

    def __repr__(self) -> str:
        return f"{type(self).__name__}(bits={self.bits}, value={self._value})"


class SignedSaturatingCounter(SaturatingCounter):
    """A two's-complement counter of ``bits`` bits that clamps instead of wrapping."""

    def __init__(self, bits: int, value: int = 0) -> None:
        super().__init__(bits, value)

    @staticmethod
    def _bounds(bits: int) -> tuple[int, int]:
        return -(1 << (bits - 1)), (1 << (bits - 1)) - 1