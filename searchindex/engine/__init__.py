"""
Index building and query handling.
"""

from .builder import InvertedIndexBuilder, ConcurrentIndexBuilder
from .query_handler import QueryHandlerInterface, QueryHandler, ConcurrentQueryHandler

__all__ = [
    'InvertedIndexBuilder', 'ConcurrentIndexBuilder',
    'QueryHandlerInterface', 'QueryHandler', 'ConcurrentQueryHandler'
]
