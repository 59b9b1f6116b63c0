import pytest

from uarchsim.counters import SaturatingCounter, SignedSaturatingCounter


def _make(signed, bits, value):
    return SignedSaturatingCounter(bits, value) if signed else SaturatingCounter(bits, value)


@pytest.mark.parametrize("signed", [False, True])
def test_equality(signed):
    lhs = _make(signed, 8, 1)
    assert not (lhs == 0)
    assert lhs == 1
    assert not (lhs == 2)


@pytest.mark.parametrize("signed", [False, True])
def test_inequality(signed):
    lhs = _make(signed, 8, 1)
    assert lhs != 0
    assert not (lhs != 1)
    assert lhs != 2


@pytest.mark.parametrize("signed", [False, True])
def test_less(signed):
    lhs = _make(signed, 8, 1)
    assert lhs < 2
    assert not (lhs < 1)
    assert not (lhs < 0)


@pytest.mark.parametrize("signed", [False, True])
def test_greater(signed):
    lhs = _make(signed, 8, 1)
    assert lhs > 0
    assert not (lhs > 1)
    assert not (lhs > 2)


@pytest.mark.parametrize("signed", [False, True])
def test_less_or_equal(signed):
    lhs = _make(signed, 8, 1)
    assert not (lhs <= 0)
    assert lhs <= 1
    assert lhs <= 2


@pytest.mark.parametrize("signed", [False, True])
def test_greater_or_equal(signed):
    lhs = _make(signed, 8, 1)
    assert lhs >= 0
    assert lhs >= 1
    assert not (lhs >= 2)


@pytest.mark.parametrize("signed", [False, True])
def test_add(signed):
    lhs = _make(signed, 8, 1)
    assert (lhs + 1).value() == 2
    assert lhs.value() == 1


@pytest.mark.parametrize("signed", [False, True])
def test_add_in_place(signed):
    lhs = _make(signed, 8, 1)
    lhs += 1
    assert lhs.value() == 2


@pytest.mark.parametrize("signed", [False, True])
def test_subtract(signed):
    lhs = _make(signed, 8, 1)
    assert (lhs - 1).value() == 0


@pytest.mark.parametrize("signed", [False, True])
def test_subtract_in_place(signed):
    lhs = _make(signed, 8, 1)
    lhs -= 1
    assert lhs.value() == 0


@pytest.mark.parametrize("signed", [False, True])
def test_multiply(signed):
    lhs = _make(signed, 8, 2)
    assert (lhs * 2).value() == 4


@pytest.mark.parametrize("signed", [False, True])
def test_multiply_in_place(signed):
    lhs = _make(signed, 8, 2)
    lhs *= 2
    assert lhs.value() == 4


@pytest.mark.parametrize("signed", [False, True])
def test_divide(signed):
    lhs = _make(signed, 8, 4)
    assert (lhs / 2).value() == 2


@pytest.mark.parametrize("signed", [False, True])
def test_divide_in_place(signed):
    lhs = _make(signed, 8, 4)
    lhs /= 2
    assert lhs.value() == 2


@pytest.mark.parametrize("signed", [False, True])
def test_add_negative(signed):
    lhs = _make(signed, 8, 1)
    assert (lhs + -1).value() == 0


@pytest.mark.parametrize("signed", [False, True])
def test_add_negative_in_place(signed):
    lhs = _make(signed, 8, 1)
    lhs += -1
    assert lhs.value() == 0


@pytest.mark.parametrize("signed", [False, True])
def test_subtract_negative(signed):
    lhs = _make(signed, 8, 1)
    assert (lhs - (-1)).value() == 2


@pytest.mark.parametrize("signed", [False, True])
def test_subtract_negative_in_place(signed):
    lhs = _make(signed, 8, 1)
    lhs -= -1
    assert lhs.value() == 2


@pytest.mark.parametrize("signed", [False, True])
def test_saturates_with_addition(signed):
    lhs = _make(signed, 2, 1)
    lhs += 3 * lhs.maximum
    assert lhs.value() == lhs.maximum


@pytest.mark.parametrize("signed", [False, True])
def test_saturates_with_subtraction(signed):
    lhs = _make(signed, 2, 1)
    lhs -= 3 * lhs.maximum
    assert lhs.value() == lhs.minimum


@pytest.mark.parametrize("signed", [False, True])
def test_saturates_with_multiplication(signed):
    lhs = _make(signed, 2, 2)
    lhs *= lhs.maximum
    assert lhs.value() == lhs.maximum


@pytest.mark.parametrize("signed", [False, True])
def test_assignable_with_integer(signed):
    lhs = _make(signed, 2, 1)
    lhs.assign(0)
    assert lhs.value() == 0


@pytest.mark.parametrize("signed", [False, True])
def test_assignable_with_out_of_bounds_integer(signed):
    lhs = _make(signed, 2, 1)
    lhs.assign(100)
    assert lhs.value() == lhs.maximum


@pytest.mark.parametrize("signed", [False, True])
def test_default_value_is_zero(signed):
    counter = SignedSaturatingCounter(8) if signed else SaturatingCounter(8)
    assert counter.value() == 0


def test_bounds_unsigned():
    counter = SaturatingCounter(2)
    assert counter.minimum == 0
    assert counter.maximum == 3


def test_bounds_signed():
    counter = SignedSaturatingCounter(8)
    assert counter.minimum == -128
    assert counter.maximum == 127


def test_signed_division_truncates_toward_zero():
    assert (SignedSaturatingCounter(8, -5) / 2).value() == -2


def test_counters_compare_with_counters():
    assert SaturatingCounter(8, 3) == SaturatingCounter(8, 3)
    assert SaturatingCounter(8, 2) < SaturatingCounter(8, 3)


def test_zero_bits_rejected():
    with pytest.raises(ValueError):
        SaturatingCounter(0)


def test_divide_by_zero_raises():
    with pytest.raises(ZeroDivisionError):
        SaturatingCounter(8, 4) / 0