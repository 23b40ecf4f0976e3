import io
import logging
import os
import resource
from time import time
import psutil

# all package loggers also write into this buffer, which `log_stats` can flush to a file
main_log = io.StringIO()
main_log_handler = logging.StreamHandler(main_log)
main_log_handler.setFormatter(logging.Formatter('[%(name)s:%(lineno)d - %(levelname)s] %(message)s'))
main_log_handler.setLevel(logging.INFO)


def get_logger(name):
    """
    Initialize a new logger called `name`.
    :param name: Logger name
    :return: logging.Logger object
    """
    logging.basicConfig(format='[%(filename)s:%(lineno)d - %(levelname)s] %(message)s', level=logging.INFO)
    logger_ = logging.getLogger(name)
    if logger_.level == logging.NOTSET:
        logger_.setLevel(logging.INFO)

    if main_log_handler not in logger_.handlers:
        logger_.addHandler(main_log_handler)

    return logger_


def memory_usage():
    """
    Current and peak memory of the process, in MB
    :return: dict
    """
    peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss / 1024.
    return {
        'current': psutil.Process(os.getpid()).memory_info().rss / float(2 ** 20),
        'peak': peak,
    }


class Timer:
    """
    Named wall-clock timers; `accumulate` adds up repeated runs of the same timer
    """

    def __init__(self):
        self.timers = {}

    def restart(self, name):
        """
        Start (or resume) the timer `name`, keeping the duration accumulated so far.
        :param name:
        :return:
        """
        timer = self.timers.setdefault(name, {'duration': 0.})
        timer['start'] = time()
        timer['stop'] = None

    def accumulate(self, name):
        timer = self.timers.get(name)
        if timer is None or timer['stop'] is not None:
            return
        timer['stop'] = time()
        timer['duration'] += timer['stop'] - timer['start']

    def duration(self, name):
        return self.timers[name]['duration'] if name in self.timers else 0.

    def get_all_timers(self):
        return self.timers


def log_stats(label=None, counts=None, flush_path=None):
    """
    Report a generation run: sequence counts, timers and memory. Optionally write the buffered log to
    `<flush_path>/<label>.log`.

    :param label: run label
    :param counts: dict with the number of sequences per outcome (e.g. {'valid': 98, 'fallback': 2})
    :param flush_path: directory for the log file
    :return: dict with the timers and memory readings
    """
    label = label or 'generation'
    stats = {
        'timers': {name: timer['duration'] for name, timer in log_timer.get_all_timers().items()},
        'memory': memory_usage(),
    }
    logger.info('---------- {} ----------'.format(label))
    for outcome, n in (counts or {}).items():
        logger.info('\t{}: {}'.format(outcome, n))
    for name, duration in stats['timers'].items():
        logger.info('\t{} timer: {:.3f} s'.format(name, duration))
    logger.info('\tmemory: {current:.1f} MB (peak {peak:.1f} MB)'.format(**stats['memory']))

    if flush_path:
        os.makedirs(flush_path, exist_ok=True)
        with open(os.path.join(flush_path, '{}.log'.format(label.replace(' ', '_'))), 'w') as f:
            f.write(main_log.getvalue())
    return stats


log_timer = Timer()
logger = get_logger(__name__)
