"""
Storage Module

Persistence of registered picture books.
"""

from ehonsearch.storage.repository import BookRepository, Repository
from ehonsearch.exceptions import RepositoryError

__all__ = [
    "BookRepository",
    "Repository",
    "RepositoryError",
]
