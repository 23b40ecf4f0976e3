"""
Recall scoring for the digit span test: the recalled digits are compared position by position with the presented
sequence (forward mode) or with its reverse (reverse mode).
"""
from dspan.tasks.digit_span import ConstrainedDigitSequencer
from dspan.tools import utils
from dspan.tools.utils.operations import empty, is_integer

logger = utils.logger.get_logger(__name__)

MIN_SPAN = 3
MAX_SPAN = 18
DEFAULT_SPAN = 6

FORWARD = 'forward'
REVERSE = 'reverse'
MODES = (FORWARD, REVERSE)


def clamp_span(span):
    """
    Restrict a requested span to [MIN_SPAN, MAX_SPAN]
    """
    if not is_integer(span):
        raise ValueError("Span must be an integer, got {!r}".format(span))
    return max(MIN_SPAN, min(MAX_SPAN, int(span)))


def _check_mode(mode):
    if mode not in MODES:
        raise ValueError("Unknown recall mode {!r}, should be one of {}".format(mode, MODES))


def target_sequence(digits, mode=FORWARD):
    """
    Sequence the subject should reproduce
    :param digits: presented digits
    :param mode: 'forward' or 'reverse'
    :return: list of digits
    """
    _check_mode(mode)
    if mode == REVERSE:
        return list(reversed(digits))
    return list(digits)


def score_recall(response, digits, mode=FORWARD):
    """
    Count the positions where the response matches the target sequence.
    Missing positions (short response) count as errors.

    :param response: recalled digits
    :param digits: presented digits
    :param mode: 'forward' or 'reverse'
    :return: dict with score, total and is_perfect
    """
    correct = target_sequence(digits, mode)
    if len(response) > len(correct):
        raise ValueError("Response has {} digits, the sequence only {}".format(len(response), len(correct)))

    score = sum(1 for given, expected in zip(response, correct) if given == expected)
    return {'score': score, 'total': len(correct), 'is_perfect': score == len(correct)}


class DigitSpanTrial(object):
    """
    Single digit span trial: holds the span and recall mode, requests the sequence to present and scores the
    response.
    """
    def __init__(self, span=DEFAULT_SPAN, mode=FORWARD, rng=None, parameters=None):
        _check_mode(mode)
        self.span = clamp_span(span)
        self.mode = mode
        self.sequencer = ConstrainedDigitSequencer(parameters=parameters, rng=rng)
        self.digits = []
        self.is_valid = None
        self.result = None

    def set_span(self, span):
        self.span = clamp_span(span)
        self.reset()

    def toggle_mode(self):
        self.mode = REVERSE if self.mode == FORWARD else FORWARD
        self.reset()
        return self.mode

    def reset(self):
        self.digits = []
        self.is_valid = None
        self.result = None

    def prepare(self, worker=None):
        """
        Obtain the sequence to present, either directly or through a SequenceWorker (blocking on its response)
        :param worker: optional dspan.tools.worker.SequenceWorker
        :return: list of digits
        """
        self.reset()
        if worker is None:
            message = self.sequencer.generate(self.span).as_message()
        else:
            message = worker.request({'length': self.span}).result()
        self.digits = message['sequence']
        self.is_valid = message['isValid']
        if not self.is_valid:
            logger.info("Presenting an unconstrained sequence of length {}".format(self.span))
        return self.digits

    @property
    def target(self):
        return target_sequence(self.digits, self.mode)

    def submit(self, response):
        """
        Score the recalled digits
        :param response: list of digits typed by the subject
        :return: dict with score, total and is_perfect
        """
        if empty(self.digits):
            raise RuntimeError("No sequence presented yet, call prepare() first")
        self.result = score_recall(response, self.digits, self.mode)
        logger.info("Span {} ({}): {}/{}".format(self.span, self.mode, self.result['score'], self.result['total']))
        return self.result
