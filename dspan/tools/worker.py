"""
Asynchronous request/response channel to the digit sequence generator.

The caller submits a request message {'length': L} and receives a future resolving to the response message
{'sequence': [...], 'isValid': bool}. Each request builds its own sequencer, so requests share no state.
"""
import concurrent.futures
import threading

import numpy as np

from dspan.tasks.digit_span import ConstrainedDigitSequencer
from dspan.tools import utils

logger = utils.logger.get_logger(__name__)


class SequenceWorker(object):
    """
    Runs sequence generation off the calling thread
    """
    def __init__(self, max_workers=1, parameters=None, seed=None):
        """
        :param max_workers: number of worker threads
        :param parameters: generator parameters (see ConstrainedDigitSequencer)
        :param seed: seed of the SeedSequence from which each request draws its own generator
        """
        self.parameters = parameters
        self._seeds = np.random.SeedSequence(seed)
        self._seeds_lock = threading.Lock()
        self._executor = concurrent.futures.ThreadPoolExecutor(max_workers=max_workers,
                                                               thread_name_prefix='dspan-worker')

    def _next_seed(self):
        # SeedSequence.spawn advances a shared child counter
        with self._seeds_lock:
            return self._seeds.spawn(1)[0]

    def _handle(self, length, seed):
        sequencer = ConstrainedDigitSequencer(parameters=self.parameters, rng=np.random.default_rng(seed))
        return sequencer.generate(length).as_message()

    def request(self, message):
        """
        Submit a generation request
        :param message: dict with the requested 'length'
        :return: concurrent.futures.Future resolving to {'sequence': list, 'isValid': bool}
        """
        length = message['length']
        logger.debug("Sequence of length {} requested".format(length))
        return self._executor.submit(self._handle, length, self._next_seed())

    def generate(self, length, timeout=None):
        """
        Blocking convenience wrapper around `request`
        """
        return self.request({'length': length}).result(timeout=timeout)

    def close(self, wait=True):
        self._executor.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
