"""
ehonsearch

Picture-book metadata search-and-match for a nursery lending library.
Operator-typed Japanese titles and authors are normalized, searched
against Google Books, scored, and registered one at a time or in batches.
"""

__version__ = "0.1.0"
