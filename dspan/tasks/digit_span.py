"""
========================================================================================================================
Digit Span
========================================================================================================================
Constrained random digit sequences for the digit span memory test.

A valid sequence of length L satisfies:
    - no digit occurs more than `max_repeats` times (only for L < `count_limit_threshold`)
    - consecutive digits differ by more than 2 (no repeats, no near neighbours)
    - no three consecutive digits form an arithmetic progression
    - a digit used twice has its occurrences at least `min_separation` positions apart (L < `count_limit_threshold`)

Sequences are found with a randomized depth-first backtracking search, restarted from scratch up to `max_attempts`
times. When every attempt fails, an unconstrained uniform sequence is returned and flagged as not valid.
"""
from collections import namedtuple

import numpy as np

from dspan.tasks.sequences import DigitSequencer
from dspan.tools import utils
from dspan.tools.parameters import ParameterSet, generator_defaults, validate_keys
from dspan.tools.utils.operations import is_integer

logger = utils.logger.get_logger(__name__)

MAX_ATTEMPTS = generator_defaults['max_attempts']
MIN_SEPARATION = generator_defaults['min_separation']
COUNT_LIMIT_THRESHOLD = generator_defaults['count_limit_threshold']
MAX_REPEATS = generator_defaults['max_repeats']

# minimum absolute difference that still counts as a near neighbour
NEIGHBOUR_DISTANCE = 2

CONSTRAINTS = ['range', 'max_count', 'near_neighbour', 'progression', 'separation']


class GenerationResult(namedtuple('GenerationResult', ['sequence', 'is_valid'])):
    """
    Generated digit sequence and whether it satisfies all the placement constraints
    """
    __slots__ = ()

    def as_message(self):
        return {'sequence': list(self.sequence), 'isValid': bool(self.is_valid)}


def max_count(length, threshold=COUNT_LIMIT_THRESHOLD, max_repeats=MAX_REPEATS):
    """
    Maximum number of occurrences of a single digit in a sequence of the given length (np.inf if unbounded)
    """
    return max_repeats if length < threshold else np.inf


def is_near_neighbour(a, b):
    return abs(a - b) <= NEIGHBOUR_DISTANCE


def is_progression(a, b, c):
    return b - a == c - b


def check_sequence(sequence, length=None, min_separation=MIN_SEPARATION, threshold=COUNT_LIMIT_THRESHOLD,
                   max_repeats=MAX_REPEATS):
    """
    List the constraints violated by a sequence
    :param sequence: list of digits
    :param length: requested length, which selects the active rules (defaults to len(sequence))
    :param min_separation:
    :param threshold:
    :param max_repeats:
    :return: list of constraint names (see CONSTRAINTS), empty if the sequence is valid
    """
    if length is None:
        length = len(sequence)
    violations = []

    integers = all(is_integer(d) for d in sequence)
    if len(sequence) != length or not integers or not all(0 <= d <= 9 for d in sequence):
        violations.append('range')
    if not integers:
        return violations

    counts = DigitSequencer.count(sequence)
    if any(c > max_count(length, threshold, max_repeats) for c in counts.values()):
        violations.append('max_count')

    if any(is_near_neighbour(a, b) for a, b in zip(sequence[:-1], sequence[1:])):
        violations.append('near_neighbour')

    if any(is_progression(a, b, c) for a, b, c in zip(sequence[:-2], sequence[1:-1], sequence[2:])):
        violations.append('progression')

    if length < threshold:
        for d, c in counts.items():
            if c < 2:
                continue
            first, second = [idx for idx, x in enumerate(sequence) if x == d][:2]
            if second - first < min_separation:
                violations.append('separation')
                break

    return violations


# ######################################################################################################################
class ConstrainedDigitSequencer(DigitSequencer):
    """
    Generate digit sequences obeying the placement constraints, with a bounded number of search attempts and an
    unconstrained fallback.
    """
    def __init__(self, parameters=None, rng=None, label='digit span'):
        """
        :param parameters: ParameterSet or dict with (a subset of) max_attempts, min_separation,
        count_limit_threshold and max_repeats
        :param rng: [numpy.random.Generator] seeded random number generator
        :param label: sequencer label
        """
        DigitSequencer.__init__(self, label=label, rng=rng)

        parameters = ParameterSet(dict(parameters or {}))
        validate_keys(parameters, accepted_keys=generator_defaults)
        self.parameters = ParameterSet(dict(generator_defaults))
        self.parameters.update(parameters)

        if not is_integer(self.parameters.max_attempts) or self.parameters.max_attempts < 0:
            raise ValueError("max_attempts must be a non-negative integer")

        self.attempts = 0
        self.steps = 0

    def generate(self, length):
        """
        Generate a digit sequence of the requested length
        :param length: [int >= 1] sequence length
        :return: GenerationResult
        """
        if not is_integer(length) or length < 1:
            raise ValueError("Sequence length must be a positive integer, got {!r}".format(length))
        length = int(length)
        self.attempts = 0
        self.steps = 0

        while self.attempts < self.parameters.max_attempts:
            self.attempts += 1
            sequence = self._search(length)
            if sequence is not None:
                logger.debug("Valid sequence of length {} found after {} attempt(s), {} steps".format(
                    length, self.attempts, self.steps))
                return GenerationResult(sequence, True)

        logger.warning("No valid sequence of length {} after {} attempts, falling back to a random "
                       "sequence".format(length, self.attempts))
        return GenerationResult(self.generate_random_sequence(length), False)

    def _search(self, length):
        """
        One full backtracking attempt, with fresh bookkeeping
        :return: list of digits or None
        """
        state = _SearchState(
            length=length,
            max_count=max_count(length, self.parameters.count_limit_threshold, self.parameters.max_repeats),
            min_separation=self.parameters.min_separation if length < self.parameters.count_limit_threshold else None)

        if self._backtrack(state):
            return list(state.sequence)
        return None

    def _candidates(self):
        """
        Candidate iterator for a newly visited position; the order is shuffled again at every visit
        """
        self.steps += 1
        return iter(self.shuffled_tokens())

    def _backtrack(self, state):
        """
        Depth-first search with an explicit stack, one candidate iterator per filled position. The first complete
        sequence wins.
        :return: bool
        """
        frames = [self._candidates()]
        while frames:
            idx = len(frames) - 1
            if len(state.sequence) > idx:
                # back from a dead end: undo the digit placed at this position
                state.remove(state.sequence[-1])

            placed = False
            for d in frames[-1]:
                if not state.accepts(d, idx):
                    continue
                state.place(d, idx)
                if idx >= 2 and is_progression(*state.sequence[idx - 2:idx + 1]):
                    state.remove(d)
                    continue
                placed = True
                break

            if not placed:
                frames.pop()
            elif len(state.sequence) == state.length:
                return True
            else:
                frames.append(self._candidates())
        return False


class _SearchState(object):
    """
    Bookkeeping of a single attempt: placed digits, per-digit counts and positions
    """
    def __init__(self, length, max_count, min_separation=None):
        self.length = length
        self.max_count = max_count
        self.min_separation = min_separation
        self.sequence = []
        self.counts = {}
        self.positions = {}

    def accepts(self, d, idx):
        c = self.counts.get(d, 0)
        if c >= self.max_count:
            return False
        if idx > 0 and is_near_neighbour(self.sequence[idx - 1], d):
            return False
        if self.min_separation is not None and c == 1 and idx - self.positions[d][0] < self.min_separation:
            return False
        return True

    def place(self, d, idx):
        self.sequence.append(d)
        self.counts[d] = self.counts.get(d, 0) + 1
        self.positions.setdefault(d, []).append(idx)

    def remove(self, d):
        self.sequence.pop()
        self.counts[d] -= 1
        self.positions[d].pop()


def generate_digits(length, max_attempts=None, rng=None, parameters=None):
    """
    Generate a constrained digit sequence of the requested length.

    :param length: [int >= 1] sequence length
    :param max_attempts: number of full search attempts before falling back to a random sequence (overrides
    `parameters`, defaults to MAX_ATTEMPTS)
    :param rng: [numpy.random.Generator]
    :param parameters: additional generator parameters (see ConstrainedDigitSequencer)
    :return: GenerationResult
    """
    parameters = dict(parameters or {})
    if max_attempts is not None:
        parameters['max_attempts'] = max_attempts
    parameters.setdefault('max_attempts', MAX_ATTEMPTS)
    return ConstrainedDigitSequencer(parameters=parameters, rng=rng).generate(length)
