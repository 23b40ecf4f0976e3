from collections import Counter
from math import log

import numpy as np

from dspan.tools import utils
from dspan.tools.utils.operations import empty, is_integer

logger = utils.logger.get_logger(__name__)

DIGITS = list(range(10))


# ######################################################################################################################
class DigitSequencer(object):
    """
    Build random digit sequences.
    Holds the alphabet (digits 0-9) and the random number generator, and provides the unconstrained generator and
    the descriptive statistics shared by all digit sequencers.
    """
    def __init__(self, label, alphabet=None, rng=None):
        """
        :param label: [string] label of the current sequencer
        :param alphabet: [list] unique digits, defaults to 0-9
        :param rng: [numpy.random.Generator] seeded random number generator
        """
        self.name = label
        self.tokens = list(alphabet) if alphabet is not None else list(DIGITS)

        if rng is None:
            self.rng = np.random.default_rng()
            logger.debug("{} sequences will not be reproducible!".format(self.name))
        else:
            self.rng = rng

    def generate_random_sequence(self, T=0, verbose=False):
        """
        Draw T digits independently and uniformly from the alphabet (with replacement)
        :param T: sequence length
        :return: list of ints
        """
        if not is_integer(T) or T < 0:
            raise ValueError("Sequence length must be a non-negative integer, got {!r}".format(T))
        if verbose:
            logger.info('Generating a random sequence of length {0!s}, '
                        'from a set of {1!s} digits'.format(T, len(self.tokens)))
        return [int(x) for x in self.rng.choice(self.tokens, int(T), replace=True)]

    def shuffled_tokens(self):
        """
        Fresh random permutation of the alphabet
        """
        return [int(x) for x in self.rng.permutation(self.tokens)]

    @staticmethod
    def count(sequence, as_freq=False):
        """
        Computes the frequency of each digit in the sequence
        :param sequence: list of digits
        :param as_freq: bool - return total counts (False) or frequencies
        :return dict: {digit: count or count/length}
        """
        if as_freq:
            return {k: v / len(sequence) for k, v in Counter(sequence).items()}
        else:
            return dict(Counter(sequence))

    @staticmethod
    def most_common(sequence, n, as_freq=False):
        """
        Return the counts of the n most common digits in the sequence
        :param sequence: list of digits
        :param n: n most common
        :param as_freq: bool - return total counts (False) or frequencies
        :return:
        """
        ctr = Counter(sequence).most_common(n)
        if as_freq:
            return {k: v / len(sequence) for (k, v) in ctr}
        else:
            return dict(ctr)

    def entropy(self, sequence):
        """
        Shannon entropy of the digit distribution in a sequence (bits)
        :param sequence: list of digits
        """
        if empty(sequence):
            return 0.
        ent = [p * log(p, 2) for p in self.count(sequence, as_freq=True).values()]
        return -1 * sum(ent)
