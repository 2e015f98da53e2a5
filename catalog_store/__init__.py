"""Catalog Store.

Product catalog persistence engine with a one-time seed import
from an external product feed.
"""

__version__ = "0.1.0"
