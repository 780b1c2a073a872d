"""
Library Service - Persists the library to a JSON file.

This service loads and saves the library (settings and finished books),
applies library-level changes such as inserting an edited book, and
handles backup export and import.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Tuple

from ..config import EXPORT_FILENAME, resolve_library_path
from ..errors import BookNotFoundError, InvalidLibraryFormatError
from ..models import Book, Library, Theme, ValidationResult
from ..validators import LibraryValidator

logger = logging.getLogger(__name__)


class LibraryService:
    """
    Manages library persistence.

    Handles loading the library from disk, saving changes after each
    library-level action, and providing sensible defaults when the file
    doesn't exist.
    """

    def __init__(self, library_path: Optional[Path] = None):
        """
        Initialize library service.

        Args:
            library_path: Optional custom library file path.
                          If None, uses $BOOKSPREAD_LIBRARY or ~/.bookspread/library.json.
        """
        self.library_path = resolve_library_path(library_path)
        self._library: Optional[Library] = None

    @property
    def library(self) -> Library:
        """The current library, loaded from disk on first access."""
        if self._library is None:
            self._library = self.load()
        return self._library

    def load(self) -> Library:
        """
        Load the library from file.

        Returns:
            Library with loaded data, or defaults if the file doesn't exist

        Note:
            A corrupted file is logged and replaced by an empty library in
            memory; the file itself is left alone until the next save.
        """
        if not self.library_path.exists():
            return Library()

        try:
            with open(self.library_path, encoding='utf-8') as f:
                data = json.load(f)

            result = LibraryValidator.validate_payload(data)
            if not result.is_valid:
                raise InvalidLibraryFormatError(result.errors)
            return Library.from_dict(data)

        except (json.JSONDecodeError, IOError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("Failed to load library from %s: %s", self.library_path, e)
            logger.warning("Using an empty library")
            return Library()

    def save(self, library: Optional[Library] = None) -> bool:
        """
        Save the library to file.

        Args:
            library: Library to save (defaults to the current one)

        Returns:
            True if the file was written
        """
        if library is not None:
            self._library = library
        data = self.library.to_dict()

        try:
            self.library_path.parent.mkdir(parents=True, exist_ok=True)

            with open(self.library_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            return True

        except (IOError, OSError) as e:
            logger.warning("Failed to save library to %s: %s", self.library_path, e)
            return False

    # --- Books ----------------------------------------------------------

    def get_book(self, book_id: str) -> Book:
        """
        Raises:
            BookNotFoundError: If no book has this id
        """
        book = self.library.find_book(book_id)
        if book is None:
            raise BookNotFoundError(book_id)
        return book

    def upsert_book(self, book: Book) -> bool:
        """
        Insert a saved book, or replace the stored book with the same id.

        Returns:
            True if an existing book was replaced
        """
        books = self.library.books
        for index, existing in enumerate(books):
            if existing.id == book.id:
                books[index] = book
                self.save()
                return True

        books.append(book)
        self.save()
        return False

    def delete_book(self, book_id: str):
        """
        Raises:
            BookNotFoundError: If no book has this id
        """
        book = self.get_book(book_id)
        self.library.books.remove(book)
        self.save()
        logger.info("Deleted book '%s' (%s)", book.title, book.id)

    # --- Settings -------------------------------------------------------

    def set_user_name(self, name: str):
        name = (name or "").strip()
        if not name:
            raise ValueError("Enter your name")
        self.library.user_name = name
        self.save()

    def set_library_title(self, title: str):
        title = (title or "").strip()
        if not title:
            raise ValueError("Library name cannot be empty")
        self.library.library_title = title
        self.save()

    def set_welcome_message(self, message: str):
        """Set the welcome line; an empty message is allowed."""
        self.library.custom_welcome_message = (message or "").strip()
        self.save()

    def toggle_theme(self) -> Theme:
        self.library.current_theme = self.library.current_theme.toggled()
        self.save()
        return self.library.current_theme

    # --- Backup ---------------------------------------------------------

    def export_library(self, destination: Path) -> Path:
        """
        Write the stored library file to ``destination`` as a backup.

        Raises:
            FileNotFoundError: If nothing has been saved yet
            InvalidLibraryFormatError: If the stored file is not valid JSON
        """
        if not self.library_path.exists():
            raise FileNotFoundError(
                "No library data found to export. Create some books first!"
            )

        raw = self.library_path.read_text(encoding='utf-8')
        try:
            json.loads(raw)
        except json.JSONDecodeError as e:
            raise InvalidLibraryFormatError(
                [f"Library data appears to be corrupted and cannot be exported: {e}"]
            ) from e

        destination = Path(destination)
        if destination.is_dir():
            destination = destination / EXPORT_FILENAME
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(raw, encoding='utf-8')
        logger.info("Library exported to %s", destination)
        return destination

    def import_library(self, source: Path) -> Tuple[Library, ValidationResult]:
        """
        Replace the stored library with a backup file.

        The backup is validated as a whole first; on any error the stored
        library is left untouched.

        Returns:
            Tuple of (imported library, validation result with any warnings)

        Raises:
            InvalidLibraryFormatError: If the file is unreadable or invalid
        """
        try:
            data = json.loads(Path(source).read_text(encoding='utf-8'))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise InvalidLibraryFormatError([f"Not a valid JSON file: {e}"]) from e
        except (IOError, OSError) as e:
            raise InvalidLibraryFormatError([f"Could not read {source}: {e}"]) from e

        result = LibraryValidator.validate_payload(data)
        if not result.is_valid:
            raise InvalidLibraryFormatError(result.errors)
        for warning in result.warnings:
            logger.warning("Import: %s", warning)

        try:
            library = Library.from_dict(data)
        except ValueError as e:
            raise InvalidLibraryFormatError([str(e)]) from e

        self.save(library)
        logger.info("Library imported from %s (%d book(s))", source, len(library.books))
        return library, result

    def get_library_path(self) -> Path:
        """
        Get the path to the library file.

        Returns:
            Path to library file (may not exist yet)
        """
        return self.library_path
