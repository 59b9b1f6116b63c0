import pytest

from uarchsim.operable import Operable


class Counter(Operable):
    def __init__(self, scale, result=1):
        super().__init__(scale)
        self.calls = 0
        self.result = result

    def operate(self):
        self.calls += 1
        return self.result


def test_operable_is_abstract():
    with pytest.raises(TypeError):
        Operable(1)


def test_unit_scale_operates_every_tick():
    uut = Counter(1)
    results = [Operable.tick(uut) for _ in range(10)]
    assert uut.calls == 10
    assert uut.current_cycle == 10
    assert results == [1] * 10


def test_double_scale_operates_every_other_tick():
    uut = Counter(2, result=7)
    results = [Operable.tick(uut) for _ in range(6)]
    assert results == [7, 0, 7, 0, 7, 0]
    assert uut.current_cycle == uut.calls


def test_skipped_tick_does_not_advance_cycle():
    uut = Counter(3)
    Operable.tick(uut)
    cycle = uut.current_cycle
    assert Operable.tick(uut) == 0
    assert uut.current_cycle == cycle


def test_starts_in_warmup():
    uut = Counter(1)
    assert uut.warmup is True
    assert uut.current_cycle == 0
    assert Operable.tick(uut) == 1
    assert uut.current_cycle == 1
    assert uut.warmup is True


def test_fractional_scale_operates_less_often():
    uut = Counter(1.5)
    for _ in range(100):
        Operable.tick(uut)
    assert 0 < uut.calls < 100
    assert uut.calls == uut.current_cycle