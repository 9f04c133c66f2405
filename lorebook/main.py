import argparse
import logging
import sys
from contextlib import contextmanager

from lorebook.core.config import settings
from lorebook.core.dependencies import (
    get_character_service,
    get_importer_service,
    get_relationship_service,
)
from lorebook.core.exceptions import LorebookError
from lorebook.core.logging_config import setup_logging
from lorebook.database import get_db, init_db
from lorebook.presenters.character import CharacterPresenter

logger = logging.getLogger(__name__)

@contextmanager
def session_scope():
    db_gen = get_db()
    db = next(db_gen)
    try:
        yield db
    finally:
        db_gen.close()

def cmd_init_db(args, out) -> int:
    init_db()
    print("Database initialized.", file=out)
    return 0

def cmd_import(args, out) -> int:
    with session_scope() as db, open(args.csv_path, newline="", encoding=args.encoding) as stream:
        report = get_importer_service(db).import_csv(stream)
        for line_number, outcome in enumerate(report.outcomes, start=2):
            name = outcome.source.get("name") or "<no name>"
            if outcome.imported:
                print(f"line {line_number}: imported {name} (#{outcome.character.id})", file=out)
            else:
                print(f"line {line_number}: rejected {name}: {'; '.join(outcome.errors)}", file=out)
        print(f"{report.imported_count} imported, {report.failed_count} rejected.", file=out)
    return 0

def cmd_reconcile(args, out) -> int:
    with session_scope() as db:
        for result in get_relationship_service(db).resolve_all():
            print(f"[{result.status.value}] {result.diagnosis}", file=out)
    return 0

def cmd_show(args, out) -> int:
    with session_scope() as db:
        character_service = get_character_service(db)
        if args.by_id:
            try:
                character_id = int(args.name)
            except ValueError:
                raise LorebookError(f"'{args.name}' is not a character ID.")
            character = character_service.require_by_id(character_id)
        else:
            character = character_service.require_by_name(args.name)
        summary = CharacterPresenter(character, get_relationship_service(db)).summary()
        for label, value in summary.items():
            if isinstance(value, list):
                value = ", ".join(value)
            print(f"{label.replace('_', ' ').capitalize()}: {value}", file=out)
    return 0

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lorebook",
        description="Import encyclopedia characters and reconcile their family links.",
    )
    parser.add_argument("--log-level", default=None, help="Overrides LOG_LEVEL from the environment")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init-db", help="Create the database tables")
    init_parser.set_defaults(handler=cmd_init_db)

    import_parser = subparsers.add_parser("import", help="Import characters from a CSV file")
    import_parser.add_argument("csv_path", help="CSV file with a header row")
    import_parser.add_argument("--encoding", default=settings.CSV_ENCODING)
    import_parser.set_defaults(handler=cmd_import)

    reconcile_parser = subparsers.add_parser("reconcile", help="Link every character to its parents")
    reconcile_parser.set_defaults(handler=cmd_reconcile)

    show_parser = subparsers.add_parser("show", help="Show a character's family")
    show_parser.add_argument("name", help="Exact character name, or its ID with --id")
    show_parser.add_argument("--id", dest="by_id", action="store_true", help="Look the character up by ID")
    show_parser.set_defaults(handler=cmd_show)

    return parser

def main(argv=None, out=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    out = out or sys.stdout
    try:
        return args.handler(args, out)
    except LorebookError as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        logger.error(f"{args.command} failed: {e}", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1

if __name__ == "__main__":
    sys.exit(main())
