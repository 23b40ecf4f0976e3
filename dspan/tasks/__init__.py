"""
========================================================================================================================
Tasks
========================================================================================================================
Digit span task components

[1] - Digit sequencers (unconstrained and constrained)
[2] - Recall scoring
[3] - Batch analysis of generated sequences
"""
from dspan.tasks.sequences import DigitSequencer
from dspan.tasks.digit_span import ConstrainedDigitSequencer, GenerationResult, check_sequence, generate_digits

__all__ = ["analysis", "digit_span", "recall", "sequences",
           "DigitSequencer", "ConstrainedDigitSequencer", "GenerationResult", "check_sequence", "generate_digits"]
