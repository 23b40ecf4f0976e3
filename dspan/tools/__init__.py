"""
===========================================================================
DSpan Tools
===========================================================================
Utilities shared by the digit span tasks: parameters, logging, asynchronous workers
"""

__all__ = ['parameters', 'utils', 'worker']
