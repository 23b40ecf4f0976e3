from dspan.tools.utils import logger, operations

__all__ = ['logger', 'operations']
