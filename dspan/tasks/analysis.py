"""
========================================================================================================================
Batch analysis
========================================================================================================================
Generate many digit sequences and summarise how often the constrained search succeeds, which constraints the
(fallback) sequences break, and how the digits are distributed.
"""
from pandas import DataFrame
from tqdm import tqdm

from dspan.tasks.digit_span import CONSTRAINTS, ConstrainedDigitSequencer, check_sequence
from dspan.tools import utils

logger = utils.logger.get_logger(__name__)


def generate_batch(length, n_sequences, parameters=None, rng=None, verbose=False, log_path=None):
    """
    Generate `n_sequences` sequences of the same length with a single sequencer
    :param length: sequence length
    :param n_sequences: number of sequences
    :param parameters: generator parameters
    :param rng: [numpy.random.Generator]
    :param verbose: show a progress bar and report the run (counts, timers, memory)
    :param log_path: directory where the run log is written (implies the report)
    :return: list of GenerationResult
    """
    sequencer = ConstrainedDigitSequencer(parameters=parameters, rng=rng)
    timer = utils.logger.log_timer
    timer.restart('generation')
    results = [sequencer.generate(length) for _ in tqdm(range(n_sequences), desc="Generating sequences: ",
                                                         disable=not verbose)]
    timer.accumulate('generation')

    if verbose or log_path:
        n_valid = sum(1 for res in results if res.is_valid)
        utils.logger.log_stats(label='span {} batch'.format(length),
                               counts={'valid': n_valid, 'fallback': len(results) - n_valid},
                               flush_path=log_path)
    return results


def batch_statistics(results, parameters=None):
    """
    One row per generated sequence
    :param results: list of GenerationResult
    :param parameters: generator parameters used to check the constraints
    :return: pandas DataFrame with columns length, is_valid, n_violations, max_repeats, entropy
    """
    checker = ConstrainedDigitSequencer(parameters=parameters, label='statistics')
    pars = checker.parameters
    rows = []
    for res in results:
        violations = check_sequence(res.sequence, min_separation=pars.min_separation,
                                    threshold=pars.count_limit_threshold, max_repeats=pars.max_repeats)
        rows.append({
            'length': len(res.sequence),
            'is_valid': bool(res.is_valid),
            'n_violations': len(violations),
            'max_repeats': max(checker.count(res.sequence).values()) if res.sequence else 0,
            'entropy': checker.entropy(res.sequence),
        })
    return DataFrame(rows, columns=['length', 'is_valid', 'n_violations', 'max_repeats', 'entropy'])


def summarize(results, parameters=None):
    """
    Summary statistics of a batch of results
    :param results: list of GenerationResult
    :param parameters: generator parameters used to check the constraints
    :return: dict with n_sequences, valid_fraction, mean_entropy and violations (count per constraint)
    """
    checker = ConstrainedDigitSequencer(parameters=parameters, label='statistics').parameters
    violations = dict.fromkeys(CONSTRAINTS, 0)
    for res in results:
        for name in check_sequence(res.sequence, min_separation=checker.min_separation,
                                   threshold=checker.count_limit_threshold, max_repeats=checker.max_repeats):
            violations[name] += 1

    stats = batch_statistics(results, parameters)
    summary = {
        'n_sequences': len(results),
        'valid_fraction': float(stats['is_valid'].mean()) if len(results) else 0.,
        'mean_entropy': float(stats['entropy'].mean()) if len(results) else 0.,
        'violations': violations,
    }
    logger.info("{n_sequences} sequences, {valid_fraction:.3f} valid, mean entropy {mean_entropy:.3f} "
                "bits".format(**summary))
    return summary
