"""Command line administration of a wiki store."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import AppConfig, get_current_config
from .naming import kebab_to_title
from .results import StoreResult
from .store import PageStore
from .types import PageInput, UploadedFile
from .validation import validate_page_input

logger = logging.getLogger(__name__)

DISPLAY_DATE_FORMAT = "%B %d, %Y"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wikistore",
        description="Inspect and edit the pages stored in a wiki database",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  wikistore list                              # List all pages
  wikistore save "Team Notes" --content hi    # Create or update a page
  wikistore get-file 3f2a... -o out.png       # Export an attachment
        """,
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging"
    )
    parser.add_argument(
        "--database", help="Database URL, overrides WIKI_DATABASE_URL", default=None
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("list", help="List all pages")

    show = commands.add_parser("show", help="Print a page")
    show.add_argument("name")

    new = commands.add_parser("new", help="Create an empty page from a title")
    new.add_argument("title")

    save = commands.add_parser("save", help="Create or update a page")
    save.add_argument("name")
    content = save.add_mutually_exclusive_group(required=True)
    content.add_argument("--content")
    content.add_argument("--content-file", type=Path)
    save.add_argument("--id", type=int, default=None)
    save.add_argument("--attach", type=Path, default=None, help="File to attach")

    delete_page = commands.add_parser("delete-page", help="Delete a page")
    delete_page.add_argument("id", type=int)

    delete_attachment = commands.add_parser(
        "delete-attachment", help="Delete an attachment from a page"
    )
    delete_attachment.add_argument("page_id", type=int)
    delete_attachment.add_argument("file_id")

    get_file = commands.add_parser("get-file", help="Export an attachment")
    get_file.add_argument("file_id")
    get_file.add_argument("-o", "--output", type=Path, default=None)

    return parser


def _report(result: StoreResult, message: str) -> int:
    if result:
        print(message)
        return 0

    if result.is_partial:
        print(
            "The attachment file is gone but the page may still list it",
            file=sys.stderr,
        )

    kind = result.kind.value if result.kind else "unknown"
    detail = f": {result.error}" if result.error else ""
    print(f"Failed ({kind}){detail}", file=sys.stderr)
    return 1


def _save(store: PageStore, args: argparse.Namespace) -> int:
    content = (
        args.content
        if args.content is not None
        else args.content_file.read_text(encoding="utf-8")
    )
    attachment = None
    if args.attach is not None:
        attachment = UploadedFile(
            filename=args.attach.name, data=args.attach.read_bytes()
        )

    page_input = PageInput(
        id=args.id, name=args.name, content=content, attachment=attachment
    )
    errors = validate_page_input(page_input, args.name, store.home_page_name)
    if errors:
        for field, messages in errors.items():
            for message in messages:
                print(f"{field}: {message}", file=sys.stderr)
        return 1

    result = store.save_page(page_input)
    verb = "Created" if result.created else "Saved"
    page = result.page
    return _report(result, f"{verb} page {page.id}: {page.name}" if page else "")


def run(store: PageStore, args: argparse.Namespace) -> int:
    if args.command == "list":
        for page in store.list_all_pages():
            print(f"{page.id}\t{page.name}\t{len(page.attachments)}")
        return 0

    if args.command == "show":
        page = store.get_page(args.name)
        if page is None:
            print(f"No page named {args.name}", file=sys.stderr)
            return 1
        print(kebab_to_title(page.name))
        modified = page.last_modified_utc.strftime(DISPLAY_DATE_FORMAT)
        print(f"Last modified: {modified}")
        print()
        print(page.content)
        for attachment in page.attachments:
            kind = "image" if attachment.is_image else "file"
            print(
                f"[{attachment.file_id}] {attachment.file_name} "
                f"({attachment.mime_type}, {kind})"
            )
        return 0

    if args.command == "new":
        result = store.ensure_page(args.title)
        page = result.page
        return _report(result, f"Page ready: {page.name}" if page else "")

    if args.command == "save":
        return _save(store, args)

    if args.command == "delete-page":
        result = store.delete_page(args.id)
        return _report(result, f"Deleted page {args.id}")

    if args.command == "delete-attachment":
        result = store.delete_attachment(args.page_id, args.file_id)
        return _report(result, f"Deleted attachment {args.file_id}")

    if args.command == "get-file":
        found = store.get_file(args.file_id)
        if found is None:
            print(f"No file with id {args.file_id}", file=sys.stderr)
            return 1
        info, data = found
        if args.output is None:
            sys.stdout.buffer.write(data)
        else:
            args.output.write_bytes(data)
            print(f"Wrote {info.length} bytes of {info.filename} to {args.output}")
        return 0

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None, config: Optional[AppConfig] = None) -> int:
    args = build_parser().parse_args(argv)
    config = config or get_current_config()

    logging.basicConfig(level=getattr(logging, config.log_level))
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.database:
        config = config.model_copy(update={"database_url": args.database})

    store = PageStore.from_config(config)
    logger.debug(f"Opened wiki store at {config.database_url}")
    try:
        return run(store, args)
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
