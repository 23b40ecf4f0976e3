import numpy as np
import pytest

from dspan.tools import utils
from dspan.tasks.digit_span import (ConstrainedDigitSequencer, GenerationResult, check_sequence, generate_digits,
                                    is_near_neighbour, is_progression, max_count, MAX_ATTEMPTS, MIN_SEPARATION,
                                    COUNT_LIMIT_THRESHOLD, _SearchState)

logger = utils.logger.get_logger(__name__)
logger.propagate = False

# Parameters
n_trials = 1000
short_span = 6
long_span = 18


def assert_constraints(sequence, length):
    assert len(sequence) == length
    assert all(0 <= d <= 9 for d in sequence)
    for i in range(1, length):
        assert abs(sequence[i] - sequence[i - 1]) > 2
    for i in range(2, length):
        assert sequence[i] - sequence[i - 1] != sequence[i - 1] - sequence[i - 2]
    if length < 15:
        for d in set(sequence):
            positions = [idx for idx, x in enumerate(sequence) if x == d]
            assert len(positions) <= 2
            if len(positions) == 2:
                assert positions[1] - positions[0] >= 4


def test_constants():
    assert MAX_ATTEMPTS == 1000
    assert MIN_SEPARATION == 4
    assert COUNT_LIMIT_THRESHOLD == 15
    assert max_count(14) == 2
    assert max_count(15) == np.inf


def test_predicates():
    assert is_near_neighbour(5, 5)
    assert is_near_neighbour(5, 7)
    assert is_near_neighbour(5, 3)
    assert not is_near_neighbour(5, 8)
    assert not is_near_neighbour(5, 2)
    assert is_progression(1, 4, 7)
    assert is_progression(9, 5, 1)
    assert not is_progression(1, 4, 9)


def test_check_sequence():
    assert check_sequence([0, 5, 9, 1, 6]) == []
    assert check_sequence([0, 1, 5]) == ['near_neighbour']
    assert check_sequence([0, 3, 6]) == ['progression']
    assert check_sequence([0, 5, 0, 7]) == ['separation']
    assert 'max_count' in check_sequence([0, 5, 0, 5, 0, 5])
    assert check_sequence([0, 5, 12]) == ['range']
    assert check_sequence([0, 5], length=3) == ['range']
    assert check_sequence([0, None, 5]) == ['range']
    assert check_sequence([0, 5.5, 9]) == ['range']


def test_search_state_bookkeeping():
    state = _SearchState(length=6, max_count=2, min_separation=4)
    state.place(3, 0)
    state.place(8, 1)
    assert not state.accepts(3, 2)  # too close to the first 3
    assert not state.accepts(7, 2)  # near neighbour of 8
    state.remove(8)
    assert state.sequence == [3]
    assert state.counts[8] == 0
    assert state.positions[8] == []
    assert state.accepts(8, 1)


def test_short_sequences_are_valid():
    rng = np.random.default_rng(123)
    sequencer = ConstrainedDigitSequencer(rng=rng)
    results = [sequencer.generate(short_span) for _ in range(n_trials)]

    assert np.mean([r.is_valid for r in results]) >= 0.99
    for res in results:
        assert len(res.sequence) == short_span
        assert all(0 <= d <= 9 for d in res.sequence)
        if res.is_valid:
            assert_constraints(res.sequence, short_span)


def test_all_spans_respect_constraints():
    rng = np.random.default_rng(1234)
    for length in range(1, long_span + 1):
        for _ in range(20):
            res = generate_digits(length, rng=rng)
            assert isinstance(res, GenerationResult)
            assert len(res.sequence) == length
            if res.is_valid:
                assert_constraints(res.sequence, length)
                assert check_sequence(res.sequence) == []


def test_long_sequences_allow_repeats():
    # 0 5 0 5 ... breaks neither the neighbour nor the progression rule, only the count and separation rules
    alternating = [0, 5] * 9
    assert check_sequence(alternating, length=long_span) == []
    assert set(check_sequence(alternating[:14], length=14)) == {'max_count', 'separation'}

    rng = np.random.default_rng(42)
    results = [generate_digits(long_span, rng=rng) for _ in range(200)]
    valid = [r.sequence for r in results if r.is_valid]
    assert len(valid) > 0
    for seq in valid:
        assert len(seq) == long_span
        for i in range(1, long_span):
            assert abs(seq[i] - seq[i - 1]) > 2
        for i in range(2, long_span):
            assert seq[i] - seq[i - 1] != seq[i - 1] - seq[i - 2]
    assert any(max(np.bincount(seq)) > 2 for seq in valid)


def test_termination():
    rng = np.random.default_rng(7)
    for seed in range(10):
        sequencer = ConstrainedDigitSequencer(rng=np.random.default_rng(rng.integers(10 ** 9)))
        for length in range(1, long_span + 1):
            res = sequencer.generate(length)
            assert len(res.sequence) == length
            assert 1 <= sequencer.attempts <= MAX_ATTEMPTS
            assert sequencer.steps < 10 ** 6


def test_candidates_shuffled_at_every_position():
    sequencer = ConstrainedDigitSequencer(rng=np.random.default_rng(5))
    calls = []
    shuffle = sequencer.shuffled_tokens

    def counting_shuffle():
        calls.append(1)
        return shuffle()

    sequencer.shuffled_tokens = counting_shuffle
    sequencer.generate(10)
    assert len(calls) == sequencer.steps
    assert len(calls) >= 10


def test_fallback():
    rng = np.random.default_rng(99)
    res = generate_digits(12, max_attempts=0, rng=rng)
    assert not res.is_valid
    assert len(res.sequence) == 12
    assert all(isinstance(d, int) and 0 <= d <= 9 for d in res.sequence)
    assert res.as_message() == {'sequence': res.sequence, 'isValid': False}


def test_unsatisfiable_search_falls_back():
    sequencer = ConstrainedDigitSequencer(parameters={'max_attempts': 5, 'max_repeats': 0},
                                          rng=np.random.default_rng(3))
    res = sequencer.generate(3)
    assert not res.is_valid
    assert sequencer.attempts == 5
    assert sequencer.steps == 5
    assert len(res.sequence) == 3


def test_reproducible():
    first = generate_digits(9, rng=np.random.default_rng(2020))
    second = generate_digits(9, rng=np.random.default_rng(2020))
    assert first == second


def test_invalid_arguments():
    with pytest.raises(ValueError):
        generate_digits(0)
    with pytest.raises(ValueError):
        generate_digits(-3)
    with pytest.raises(ValueError):
        generate_digits(4.5)
    with pytest.raises(ValueError):
        generate_digits(5, max_attempts=-1)
    with pytest.raises(KeyError):
        ConstrainedDigitSequencer(parameters={'attempts': 10})


def test_very_long_sequences():
    # deeper than the interpreter's recursion limit
    res = generate_digits(2000, rng=np.random.default_rng(1))
    assert res.is_valid
    assert len(res.sequence) == 2000
    assert check_sequence(res.sequence) == []


def test_explicit_max_attempts_wins():
    res = generate_digits(5, max_attempts=0, parameters={'max_attempts': 10}, rng=np.random.default_rng(4))
    assert not res.is_valid

    res = generate_digits(5, parameters={'max_attempts': 0}, rng=np.random.default_rng(4))
    assert not res.is_valid
