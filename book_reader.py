#!/usr/bin/env python3
"""
bookspread - write books and read them two pages at a time.

Command-line front end for the library: list, read, create, edit, delete
and import books, and back the whole library up to a JSON file.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, List, Optional

from bookspread.config import cover_background
from bookspread.errors import BookError
from bookspread.logger import setup_logger
from bookspread.models import EditorStep, Page, PageDraft, ReaderFrame
from bookspread.services import LibraryService, PageEditor, ReaderSession
from bookspread.services.import_service import read_book_file

InputFn = Callable[[str], str]

READER_KEYS = {
    'n': 'forward', 'right': 'forward', '': 'forward',
    'p': 'backward', 'left': 'backward',
}
END_OF_BOOK = "~ End of Book ~"


def draft_for(editor: PageEditor) -> PageDraft:
    """Fresh draft holding what the editor has stored for the current page."""
    page = editor.current_page
    if editor.is_editing_cover:
        return PageDraft(page.content, page.cover_image_url or '')
    return PageDraft(page.content)


def format_page(page: Optional[Page], width: int = 60) -> List[str]:
    if page is None:
        return [END_OF_BOOK.center(width)]
    lines = page.content.splitlines() or [""]
    return [line.rstrip() for line in lines]


def render_frame(frame: ReaderFrame, title: str) -> str:
    """Plain-text view of what the reader shows."""
    out = []
    if frame.is_cover_view:
        out.append(f"=== {title} (cover) ===")
        if frame.cover.cover_image_url:
            out.append(f"[cover image: {frame.cover.cover_image_url}]")
        out.extend(format_page(frame.cover))
    else:
        spread = frame.spread
        right_label = spread.right_index + 1 if spread.right_index is not None else "-"
        out.append(f"=== {title} (pages {spread.left_index + 1} | {right_label}) ===")
        out.append("--- left ---")
        out.extend(format_page(frame.left))
        out.append("--- right ---")
        out.extend(format_page(frame.right))

    controls = []
    if frame.can_go_backward:
        controls.append("[p]rev")
    if frame.can_go_forward:
        controls.append("[n]ext")
    controls.append("[q]uit")
    out.append(" ".join(controls))
    return "\n".join(out)


def interactive_read(session: ReaderSession, input_fn: InputFn = input):
    """Page through the open book until the user quits."""
    title = session.book.title
    while True:
        print()
        print(render_frame(session.current_frame(), title))
        key = input_fn("> ").strip().lower()
        if key in ('q', 'quit', 'esc'):
            session.close_book()
            return
        direction = READER_KEYS.get(key)
        if direction is None:
            print(f"Unknown key '{key}'")
            continue
        session.turn_page(direction)


def read_multiline(input_fn: InputFn) -> str:
    """Read lines until a line with a single '.'."""
    print("Enter page text, finish with a line containing only '.'")
    lines = []
    while True:
        line = input_fn("")
        if line == ".":
            return "\n".join(lines)
        lines.append(line)


def interactive_setup(editor: PageEditor, input_fn: InputFn):
    """Setup step: ask for title and page count until both are valid."""
    print("\n=== Edit Book ===" if not editor.is_new else "\n=== Create New Book ===")
    while editor.step is EditorStep.SETUP:
        default_title = f" [{editor.title}]" if editor.title else ""
        title = input_fn(f"Title{default_title}: ").strip() or editor.title
        count_input = input_fn(f"Number of pages [{editor.page_count}]: ").strip()
        try:
            page_count = int(count_input) if count_input else editor.page_count
        except ValueError:
            print("Error: Invalid page count")
            continue
        try:
            editor.begin_page_editing(title, page_count)
        except BookError as e:
            print(f"Error: {e}")


def interactive_edit(editor: PageEditor, input_fn: InputFn = input):
    """
    Run the authoring flow.

    Returns:
        The saved Book, or None if the user cancelled
    """
    interactive_setup(editor, input_fn)
    draft = draft_for(editor)

    while True:
        print(f"\nEditing {editor.page_label} - {editor.page_indicator}")
        if editor.is_editing_cover:
            print(f"Cover image: {draft.cover_image_url or '(none)'}")
        print(draft.content or "(empty)")

        commands = ["[e]dit"]
        if editor.can_go_previous:
            commands.append("[p]rev")
        if editor.can_go_next:
            commands.append("[n]ext")
        if editor.can_delete_current:
            commands.append("[d]elete")
        commands += ["[b]ack", "[s]ave", "[q]uit"]
        command = input_fn(" ".join(commands) + ": ").strip().lower()

        try:
            if command == 'e':
                if editor.is_editing_cover:
                    url = input_fn(
                        f"Cover image URL [{draft.cover_image_url}] ('-' to remove): "
                    ).strip()
                    if url == '-':
                        draft.cover_image_url = ''
                    elif url:
                        draft.cover_image_url = url
                draft.content = read_multiline(input_fn)
                continue
            elif command == 'n':
                editor.navigate(1, draft)
            elif command == 'p':
                editor.navigate(-1, draft)
            elif command == 'd':
                confirm = input_fn("Delete this page? [y/N]: ").strip().lower()
                if confirm != 'y':
                    continue
                editor.delete_current_page(draft)
            elif command == 'b':
                editor.back_to_setup(draft)
                interactive_setup(editor, input_fn)
            elif command == 's':
                return editor.save(draft)
            elif command == 'q':
                print("Cancelled, nothing saved.")
                return None
            else:
                print(f"Unknown command '{command}'")
                continue
        except BookError as e:
            print(f"Error: {e}")

        draft = draft_for(editor)


def print_library(service: LibraryService):
    library = service.library
    print(f"{library.custom_welcome_message} {library.library_title}".strip())
    if library.user_name:
        print(f"Here are your creations, {library.user_name}:")
    if not library.books:
        print("  (no books yet)")
        return
    for book in library.books:
        background = cover_background(book, library.current_theme)
        print(f"  {book.id}  {book.title}  ({book.page_count} pages, cover {background})")


def confirm_action(question: str, assume_yes: bool, input_fn: InputFn = input) -> bool:
    if assume_yes:
        return True
    return input_fn(f"{question} [y/N]: ").strip().lower() == 'y'


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Write books and read them as two-page spreads.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s new
  %(prog)s import-book story.json
  %(prog)s list
  %(prog)s read book-1718000000000-1a2b3c4d
  %(prog)s export backups/
  %(prog)s --library /tmp/lib.json import-library library-backup.json --yes
        """
    )
    parser.add_argument('--library', type=Path,
                        help='Library file (default: $BOOKSPREAD_LIBRARY or ~/.bookspread/library.json)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Show debug logging')

    sub = parser.add_subparsers(dest='command', required=True)
    sub.add_parser('list', help='List the books in the library')

    read = sub.add_parser('read', help='Read a book')
    read.add_argument('book_id')

    sub.add_parser('new', help='Create a new book interactively')

    edit = sub.add_parser('edit', help='Edit a book interactively')
    edit.add_argument('book_id')

    delete = sub.add_parser('delete', help='Delete a book')
    delete.add_argument('book_id')
    delete.add_argument('--yes', '-y', action='store_true', help='Do not ask for confirmation')

    import_book = sub.add_parser('import-book', help='Add a book from a {title, pages} JSON file')
    import_book.add_argument('file', type=Path)
    import_book.add_argument('--edit', action='store_true',
                             help='Open the imported book in the editor before saving')

    export = sub.add_parser('export', help='Back up the library to a JSON file')
    export.add_argument('destination', type=Path)

    import_library = sub.add_parser('import-library', help='Replace the library with a backup')
    import_library.add_argument('file', type=Path)
    import_library.add_argument('--yes', '-y', action='store_true', help='Do not ask for confirmation')

    settings = sub.add_parser('settings', help='Change library settings')
    settings.add_argument('--user-name')
    settings.add_argument('--library-title')
    settings.add_argument('--welcome', help='Welcome message shown before the library title')
    settings.add_argument('--toggle-theme', action='store_true')

    return parser


def run(args: argparse.Namespace, service: LibraryService, input_fn: InputFn = input):
    """Dispatch a parsed command. Raises ValueError (usually BookError) on user errors."""
    if args.command == 'list':
        print_library(service)

    elif args.command == 'read':
        interactive_read(ReaderSession(service.get_book(args.book_id)), input_fn)

    elif args.command in ('new', 'edit'):
        if args.command == 'new':
            editor = PageEditor.for_new_book()
        else:
            editor = PageEditor.for_book(service.get_book(args.book_id))
        book = interactive_edit(editor, input_fn)
        if book is not None:
            service.upsert_book(book)
            print(f"Saved '{book.title}' ({book.id})")

    elif args.command == 'delete':
        book = service.get_book(args.book_id)
        if confirm_action(f"Delete '{book.title}'?", args.yes, input_fn):
            service.delete_book(book.id)
            print(f"Deleted '{book.title}'")

    elif args.command == 'import-book':
        data = read_book_file(args.file)
        editor = PageEditor.for_new_book()
        editor.load_from_import(data['title'], data['pages'])
        if args.edit:
            book = interactive_edit(editor, input_fn)
        else:
            book = editor.save(draft_for(editor))
        if book is not None:
            service.upsert_book(book)
            print(f"Imported '{book.title}' ({book.id}, {book.page_count} pages)")

    elif args.command == 'export':
        destination = service.export_library(args.destination)
        print(f"Library exported successfully as {destination}")

    elif args.command == 'import-library':
        if confirm_action("This will overwrite your current library. Continue?", args.yes, input_fn):
            library, result = service.import_library(args.file)
            print(f"Library imported: {len(library.books)} book(s)")
            if result.has_issues():
                print(result.get_summary())
                for warning in result.warnings:
                    print(f"  Warning: {warning}")

    elif args.command == 'settings':
        if args.user_name is not None:
            service.set_user_name(args.user_name)
        if args.library_title is not None:
            service.set_library_title(args.library_title)
        if args.welcome is not None:
            service.set_welcome_message(args.welcome)
        if args.toggle_theme:
            print(f"Theme: {service.toggle_theme().value}")
        print_library(service)


def main(argv: Optional[List[str]] = None, input_fn: InputFn = input):
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logger("bookspread", level=logging.DEBUG if args.verbose else logging.WARNING)
    service = LibraryService(args.library)

    try:
        run(args, service, input_fn)
    except (ValueError, FileNotFoundError) as e:
        print(f"\nError: {e}")
        sys.exit(1)
    except (KeyboardInterrupt, EOFError):
        print("\nCancelled.")
        sys.exit(1)


if __name__ == "__main__":
    main()
