"""
Validators for data coming from outside the application.

A library backup is checked as a whole before it replaces the stored
library, so the user sees every problem in the file at once instead of
fixing them one import attempt at a time.
"""

from typing import Any

from .models import Theme, ValidationResult


LIBRARY_STRING_FIELDS = ('userName', 'libraryTitle', 'customWelcomeMessage', 'currentTheme')


class LibraryValidator:
    """Validates library backup payloads."""

    @staticmethod
    def validate_payload(data: Any) -> ValidationResult:
        """
        Validate a parsed library backup.

        Args:
            data: Result of ``json.loads`` on the backup file

        Returns:
            ValidationResult with any errors or warnings

        Example:
            >>> LibraryValidator.validate_payload({'books': []}).is_valid
            False
        """
        result = ValidationResult(is_valid=True)

        if not isinstance(data, dict):
            result.add_error("Library file must contain a JSON object")
            return result

        for key in LIBRARY_STRING_FIELDS:
            if not isinstance(data.get(key), str):
                result.add_error(f"Missing or invalid '{key}' (expected a string)")

        theme = data.get('currentTheme')
        if isinstance(theme, str) and theme not in {t.value for t in Theme}:
            result.add_warning(f"Unknown theme '{theme}', the normal theme will be used")

        books = data.get('books')
        if not isinstance(books, list):
            result.add_error("Missing or invalid 'books' (expected a list)")
            return result

        seen_ids = set()
        for position, book in enumerate(books):
            LibraryValidator._check_book(book, position, result)
            if isinstance(book, dict) and isinstance(book.get('id'), str):
                if book['id'] in seen_ids:
                    result.add_error(f"Duplicate book id '{book['id']}'")
                seen_ids.add(book['id'])

        return result

    @staticmethod
    def _check_book(book: Any, position: int, result: ValidationResult):
        if not isinstance(book, dict):
            result.add_error(f"Book #{position + 1} is not an object")
            return

        title = book.get('title')
        label = title if isinstance(title, str) and title else 'Unknown'
        if (not isinstance(book.get('id'), str)
                or not isinstance(title, str)
                or not isinstance(book.get('pages'), list)):
            result.add_error(
                f'Invalid book data: "{label}" is missing required fields (id, title, pages)'
            )
            return

        if not title.strip():
            result.add_error(f"Book '{book['id']}' has an empty title")

        color = book.get('coverColor')
        if color is not None and not isinstance(color, str):
            result.add_error(f'Book "{label}" has an invalid coverColor')

        pages = book['pages']
        if not pages:
            result.add_warning(f'Book "{label}" has no pages, a blank cover will be added')

        for index, page in enumerate(pages):
            if (not isinstance(page, dict)
                    or not isinstance(page.get('content'), str)
                    or ('coverImageUrl' in page and not isinstance(page['coverImageUrl'], str))):
                result.add_error(
                    f'Invalid page data in book "{label}": page {index + 1} content '
                    f'or coverImageUrl format is incorrect'
                )
            elif index > 0 and page.get('coverImageUrl'):
                result.add_warning(
                    f'Book "{label}": cover image on page {index + 1} will be ignored'
                )
