"""
Error types raised by the editor, reader and importers.

Every error here is user-input shaped: the operation that raised it leaves
its state unchanged, and the caller is expected to show the message and let
the user correct the action.
"""

from typing import List


class BookError(ValueError):
    """Base class for recoverable book editing and import errors."""


class ProtectedPageError(BookError):
    """Attempt to delete the cover page."""

    def __init__(self, message: str = "The cover page cannot be deleted"):
        super().__init__(message)


class MinimumPagesError(BookError):
    """Attempt to go below the minimum page count."""


class EmptyTitleError(BookError):
    """A book needs a non-empty title."""

    def __init__(self, message: str = "Enter a title"):
        super().__init__(message)


class EmptyCoverError(BookError):
    """The cover has neither text nor an image."""

    def __init__(self, message: str = "Cover needs content or image"):
        super().__init__(message)


class InvalidImportFormatError(BookError):
    """An imported book payload does not have the expected shape."""


class InvalidLibraryFormatError(BookError):
    """
    A library backup failed validation.

    ``errors`` holds every problem found, not just the first.
    """

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        summary = self.errors[0] if self.errors else "Invalid library file format"
        if len(self.errors) > 1:
            summary += f" (and {len(self.errors) - 1} more)"
        super().__init__(summary)


class BookNotFoundError(BookError, KeyError):
    """No book with the requested id exists in the library."""

    def __init__(self, book_id: str):
        self.book_id = book_id
        super().__init__(f"No book with id '{book_id}'")

    def __str__(self):
        return self.args[0]
