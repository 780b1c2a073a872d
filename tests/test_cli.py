"""
Tests for the command-line front end.
"""

import json
import logging

import pytest

import book_reader
from bookspread.logger import setup_logger
from bookspread.models import Library
from bookspread.services.library_service import LibraryService
from conftest import make_book


def scripted(*answers):
    """input() replacement that replays the given answers."""
    replies = iter(answers)
    return lambda prompt="": next(replies)


def run_cli(library_path, *argv, answers=()):
    book_reader.main(['--library', str(library_path), *argv], input_fn=scripted(*answers))


@pytest.fixture
def stocked_library(library_path):
    LibraryService(library_path).save(Library(
        user_name="Lu",
        books=[make_book(5, book_id="five"), make_book(4, book_id="four", title="Even")]
    ))
    return library_path


class TestImportAndList:
    """Tests for import-book and list."""

    def test_import_book_then_list(self, library_path, tmp_path, sample_book_payload, capsys):
        book_file = tmp_path / "story.json"
        book_file.write_text(json.dumps(sample_book_payload), encoding='utf-8')

        run_cli(library_path, 'import-book', str(book_file))
        run_cli(library_path, 'list')

        out = capsys.readouterr().out
        assert "Imported 'T'" in out
        assert "T  (2 pages, cover u)" in out
        book = LibraryService(library_path).load().books[0]
        assert book.pages[1].to_dict() == {'content': 'B'}

    def test_import_invalid_book_exits(self, library_path, tmp_path, capsys):
        book_file = tmp_path / "story.json"
        book_file.write_text(json.dumps({'pages': []}), encoding='utf-8')

        with pytest.raises(SystemExit) as excinfo:
            run_cli(library_path, 'import-book', str(book_file))

        assert excinfo.value.code == 1
        assert "Error: Invalid JSON structure" in capsys.readouterr().out

    def test_list_empty_library(self, library_path, capsys):
        run_cli(library_path, 'list')

        out = capsys.readouterr().out
        assert "Welcome to My Library" in out
        assert "(no books yet)" in out


class TestInteractiveEditor:
    """Tests for the new/edit flows."""

    def test_create_book(self, library_path, capsys):
        run_cli(library_path, 'new', answers=[
            "My Book", "3",
            "e", "", "Cover words", ".",
            "n",
            "e", "First page", ".",
            "s",
        ])

        books = LibraryService(library_path).load().books
        assert len(books) == 1
        assert [p.content for p in books[0].pages] == ["Cover words", "First page", ""]
        assert "Saved 'My Book'" in capsys.readouterr().out

    def test_empty_cover_reports_error_and_cancel_saves_nothing(self, library_path, capsys):
        run_cli(library_path, 'new', answers=["T", "2", "s", "q"])

        out = capsys.readouterr().out
        assert "Error: Cover needs content or image" in out
        assert "Cancelled" in out
        assert not library_path.exists()

    def test_cleared_cover_image_with_no_text_is_rejected(self, library_path, capsys):
        run_cli(library_path, 'new', answers=[
            "Book", "2",
            "e", "http://img", "", ".",
            "e", "-", "", ".",
            "s", "q",
        ])

        out = capsys.readouterr().out
        assert "Error: Cover needs content or image" in out
        assert not library_path.exists()

    def test_cover_image_can_be_replaced_by_text(self, library_path):
        run_cli(library_path, 'new', answers=[
            "Book", "2",
            "e", "http://img", "", ".",
            "e", "-", "Title words", ".",
            "s",
        ])

        cover = LibraryService(library_path).load().books[0].cover
        assert cover.content == "Title words"
        assert not cover.cover_image_url

    def test_blank_url_keeps_cover_image(self, library_path):
        run_cli(library_path, 'new', answers=[
            "Book", "2",
            "e", "http://img", "", ".",
            "e", "", "Words", ".",
            "s",
        ])

        assert LibraryService(library_path).load().books[0].cover.cover_image_url == "http://img"

    def test_setup_retries_until_valid(self, library_path, capsys):
        run_cli(library_path, 'new', answers=[
            "", "2",         # no title
            "T", "zero",     # not a number
            "T", "0",        # below one
            "T", "2",
            "e", "", "Cover", ".",
            "s",
        ])

        out = capsys.readouterr().out
        assert "Error: Enter a title" in out
        assert "Error: Invalid page count" in out
        assert len(LibraryService(library_path).load().books) == 1

    def test_edit_deletes_page(self, stocked_library):
        run_cli(stocked_library, 'edit', 'five', answers=[
            "", "",          # keep title and page count
            "n", "n",
            "d", "y",
            "s",
        ])

        book = LibraryService(stocked_library).load().find_book('five')
        assert [p.content for p in book.pages] == ["Cover text", "Page 1", "Page 3", "Page 4"]

    def test_delete_cover_not_offered_but_rejected(self, stocked_library, capsys):
        run_cli(stocked_library, 'edit', 'five', answers=["", "", "d", "y", "q"])

        assert "Error: The cover page cannot be deleted" in capsys.readouterr().out


class TestReader:
    """Tests for the read command."""

    def test_read_through_book(self, stocked_library, capsys):
        run_cli(stocked_library, 'read', 'four', answers=["n", "n", "n", "p", "p", "p", "q"])

        out = capsys.readouterr().out
        assert "=== Even (cover) ===" in out
        assert "=== Even (pages 2 | 3) ===" in out
        assert "=== Even (pages 4 | -) ===" in out
        assert "End of Book" in out

    def test_unknown_key(self, stocked_library, capsys):
        run_cli(stocked_library, 'read', 'five', answers=["x", "q"])

        assert "Unknown key 'x'" in capsys.readouterr().out

    def test_read_missing_book(self, stocked_library, capsys):
        with pytest.raises(SystemExit):
            run_cli(stocked_library, 'read', 'nope')

        assert "Error: No book with id 'nope'" in capsys.readouterr().out


class TestLibraryCommands:
    """Tests for delete, settings and backup commands."""

    def test_delete_with_confirmation(self, stocked_library):
        run_cli(stocked_library, 'delete', 'four', answers=["y"])

        assert [b.id for b in LibraryService(stocked_library).load().books] == ['five']

    def test_delete_declined(self, stocked_library):
        run_cli(stocked_library, 'delete', 'four', answers=["n"])

        assert len(LibraryService(stocked_library).load().books) == 2

    def test_settings(self, stocked_library, capsys):
        run_cli(stocked_library, 'settings', '--library-title', 'Shelf', '--toggle-theme')

        out = capsys.readouterr().out
        assert "Theme: caldas" in out
        assert "Welcome to Shelf" in out

    def test_blank_user_name_exits(self, stocked_library, capsys):
        with pytest.raises(SystemExit):
            run_cli(stocked_library, 'settings', '--user-name', '  ')

        assert "Error: Enter your name" in capsys.readouterr().out

    def test_export_and_import_library(self, stocked_library, tmp_path):
        backup = tmp_path / "backup.json"
        other = tmp_path / "other.json"

        run_cli(stocked_library, 'export', str(backup))
        run_cli(other, 'import-library', str(backup), '--yes')

        assert LibraryService(other).load() == LibraryService(stocked_library).load()

    def test_import_library_prints_warnings(self, stocked_library, tmp_path, capsys):
        data = json.loads(stocked_library.read_text(encoding='utf-8'))
        data['currentTheme'] = 'neon'
        backup = tmp_path / "backup.json"
        backup.write_text(json.dumps(data), encoding='utf-8')

        run_cli(tmp_path / "other.json", 'import-library', str(backup), '--yes')

        out = capsys.readouterr().out
        assert "Library imported: 2 book(s)" in out
        assert "1 warning(s)" in out
        assert "Warning: Unknown theme 'neon'" in out

    def test_clean_import_prints_no_summary(self, stocked_library, tmp_path, capsys):
        backup = tmp_path / "backup.json"
        run_cli(stocked_library, 'export', str(backup))

        run_cli(tmp_path / "other.json", 'import-library', str(backup), '--yes')

        assert "warning(s)" not in capsys.readouterr().out

    def test_import_library_invalid(self, library_path, tmp_path, capsys):
        backup = tmp_path / "backup.json"
        backup.write_text(json.dumps({'books': []}), encoding='utf-8')

        with pytest.raises(SystemExit):
            run_cli(library_path, 'import-library', str(backup), answers=["y"])

        assert "Error: Missing or invalid 'userName'" in capsys.readouterr().out


class TestLogger:
    """Tests for logging setup."""

    def test_setup_logger_writes_file(self, tmp_path):
        log_file = tmp_path / "logs" / "bookspread.log"

        logger = setup_logger("bookspread", log_file=log_file, level=logging.DEBUG, console=False)
        logging.getLogger("bookspread.services.editor_service").debug("cursor moved")
        for handler in logger.handlers:
            handler.flush()

        assert "DEBUG - cursor moved" in log_file.read_text(encoding='utf-8')

    def test_setup_logger_replaces_handlers(self):
        setup_logger("bookspread")
        logger = setup_logger("bookspread")

        assert len(logger.handlers) == 1
        assert not logger.propagate
