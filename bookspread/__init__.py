"""
Book authoring and spread reading.

This package holds the page editor and reader state machines, the book
and library models they operate on, and the JSON library store.
"""

__version__ = "1.0.0"
