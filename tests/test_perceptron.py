import pytest

from uarchsim.perceptron import (
    NUM_PERCEPTRONS,
    NUM_UPDATE_ENTRIES,
    PERCEPTRON_HISTORY,
    Perceptron,
    PerceptronPredictor,
)


def test_fresh_perceptron_outputs_zero():
    assert Perceptron(8, 8).predict(0b10110011) == 0


def test_update_taken_moves_output_positive():
    p = Perceptron(8, 8)
    p.update(True, 0b1010)
    assert p.predict(0b1010) > 0


def test_update_not_taken_moves_output_negative():
    p = Perceptron(8, 8)
    p.update(False, 0b1010)
    assert p.predict(0b1010) < 0


@pytest.mark.parametrize("history", [0, 0b1, 0b1100_0011, 0xFF])
def test_taken_and_not_taken_updates_are_symmetric(history):
    up, down = Perceptron(8, 8), Perceptron(8, 8)
    up.update(True, history)
    down.update(False, history)
    assert up.predict(history) == -down.predict(history)


def test_output_is_bounded_by_saturation():
    p = Perceptron(4, 8)
    for _ in range(300):
        p.update(True, 0b1111)
    assert p.predict(0b1111) == 5 * p.bias.maximum


def test_untrained_predictor_predicts_taken():
    assert PerceptronPredictor().predict(0x401000) is True


def test_learns_not_taken_branch():
    p = PerceptronPredictor()
    for _ in range(30):
        p.predict(0x401000)
        p.last_branch_result(0x401000, 0, False, 3)
    assert p.predict(0x401000) is False


def test_unknown_branch_result_is_ignored():
    p = PerceptronPredictor()
    p.predict(0x10)
    p.last_branch_result(0x20, 0, False, 3)
    assert len(p.state_buffer) == 1
    assert p.global_history == 0


def test_state_buffer_is_bounded():
    p = PerceptronPredictor()
    for i in range(NUM_UPDATE_ENTRIES + 50):
        p.predict(i)
    assert len(p.state_buffer) == NUM_UPDATE_ENTRIES
    assert p.state_buffer[0].ip == 50


def test_misprediction_restores_speculative_history():
    p = PerceptronPredictor()
    for _ in range(5):
        p.predict(0x40)
    p.last_branch_result(0x40, 0, False, 3)
    assert p.spec_global_history == p.global_history == 0


def test_speculative_history_is_bounded():
    p = PerceptronPredictor()
    for i in range(PERCEPTRON_HISTORY * 3):
        p.predict(i % NUM_PERCEPTRONS)
    assert p.spec_global_history == (1 << PERCEPTRON_HISTORY) - 1