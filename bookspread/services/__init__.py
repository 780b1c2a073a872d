"""
Service layer for bookspread.

Services hold the editor and reader state machines and the library store,
giving the command-line front end (or any other presentation layer) a
clean interface to the book logic.
"""

from .editor_service import PageEditor
from .library_service import LibraryService
from .reader_service import ReaderSession

__all__ = ['LibraryService', 'PageEditor', 'ReaderSession']
