"""
========================================================================================================================
 Operations
========================================================================================================================
Common operations on digit sequences

Functions:
---------------
is_integer - check whether a value is an integral number (bool excluded)
empty - evaluate whether a sequence or array is empty
========================================================================================================================
"""
import numbers
import numpy as np


def is_integer(x):
    """
    Check if value is an integral number (python or numpy integer, not bool).

    :param x:
    :return: bool
    """
    return isinstance(x, numbers.Integral) and not isinstance(x, (bool, np.bool_))


def empty(seq):
    """
    Evaluate whether a sequence is empty
    :param seq: list, tuple or numpy array (or None)
    :return: bool
    """
    if isinstance(seq, np.ndarray):
        return not bool(seq.size)
    return not seq

