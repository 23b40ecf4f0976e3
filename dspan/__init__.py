"""
========================================================================================================================
DSpan
========================================================================================================================
Digit span memory test: constrained random digit sequence generation and recall scoring

[1] - tasks - sequence generators, recall scoring and batch statistics
[2] - tools - parameters, logging and asynchronous workers
"""
__all__ = ["tasks", "tools"]

__version__ = "0.1"
