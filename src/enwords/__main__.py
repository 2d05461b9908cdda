"""Command line entry point."""
import argparse
import sys
from datetime import UTC, datetime
from typing import Callable, List, Optional

from enwords import __version__
from enwords.config import ensure_directories, settings
from enwords.exceptions import EnWordsError
from enwords.logging_config import get_logger, setup_logging
from enwords.monitoring import start_monitoring
from enwords.services.backup_service import read_backup, write_backup
from enwords.services.catalog import CatalogProvider, JsonCatalog
from enwords.services.storage import SqlWordRepository, WordRepository
from enwords.services.word_service import WordService

logger = get_logger("enwords")

GRADE_ALIASES = {"easy": 5, "good": 3, "hard": 1}
CANCEL_ANSWERS = ("q", "quit")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def parse_grade(answer: str) -> Optional[int]:
    """Parse a grade typed by the learner, or None if it is not one."""
    answer = answer.strip().lower()
    if answer in GRADE_ALIASES:
        return GRADE_ALIASES[answer]
    if answer.isdigit() and 0 <= int(answer) <= 5:
        return int(answer)
    return None


class Cli:
    """Runs one command against a loaded study collection."""

    def __init__(
        self,
        repository: WordRepository,
        catalog: CatalogProvider,
        now: Optional[Callable[[], datetime]] = None,
        input_func: Optional[Callable[[str], str]] = None,
    ):
        self.repository = repository
        self.catalog = catalog
        self.now = now or (lambda: datetime.now(UTC))
        self.input = input_func or input
        self.service = WordService(repository.load_all(), repository.load_custom_words())

    def save(self) -> None:
        """Persist the collection."""
        self.repository.save_all(self.service.records)
        self.repository.save_custom_words(self.service.custom_words)

    def levels(self, args) -> None:
        for level in self.catalog.levels():
            print(f"{level}: {len(self.catalog.words_for_level(level))} words")

    def browse(self, args) -> None:
        studied = {record.word for record in self.service.records}
        for entry in self.catalog.words_for_level(args.level):
            marker = "*" if entry.word in studied else " "
            print(f"{marker} {entry.word} - {entry.translation} ({entry.category})")

    def add(self, args) -> None:
        record = self.service.create_record(args.word, args.translation, args.level, self.now())
        self.save()
        print(f"Added {record.word!r} to learning")

    def study(self, args) -> None:
        record = self.service.add_from_catalog(self.catalog, args.level, args.word, self.now())
        self.save()
        print(f"Added {record.word!r} to learning")

    def custom(self, args) -> None:
        if args.custom_command == "add":
            custom = self.service.add_custom_word(args.word, args.translation, args.level, self.now())
            self.save()
            print(f"Custom word {custom.word!r} added ({custom.id})")
        elif args.custom_command == "list":
            for custom in self.service.custom_words:
                print(f"{custom.id}  {custom.word} - {custom.translation} ({custom.level})")
        elif args.custom_command == "remove":
            if not self.service.remove_custom_word(args.id):
                raise EnWordsError(f"No custom word with id {args.id!r}")
            self.save()
            print("Custom word removed")
        elif args.custom_command == "study":
            record = self.service.study_custom_word(args.id, self.now())
            self.save()
            print(f"Added {record.word!r} to learning")

    def list(self, args) -> None:
        due = {record.id for record in self.service.due_words(self.now())}
        for record in self.service.records:
            if record.is_learned:
                status = "learned"
            elif record.id in due:
                status = "due"
            else:
                status = f"next {record.schedule.next_review.date().isoformat()}"
            print(f"{record.word} - {record.translation} [{record.level}] {status}")

    def learned(self, args) -> None:
        self.service.mark_learned(args.word, self.now())
        self.save()
        print(f"{args.word!r} marked as learned")

    def remove(self, args) -> None:
        if not self.service.remove_word(args.word):
            raise EnWordsError(f"{args.word!r} is not being studied")
        self.save()
        print(f"{args.word!r} removed from learning")

    def review(self, args) -> None:
        session = self.service.start_session(self.now())
        if session.is_complete:
            print("Nothing to review")
            return

        print(f"{len(session)} words to review")
        while session.current_word is not None:
            record = session.current_word
            print()
            print(record.word)
            self.input("Press Enter to show the translation...")
            print(record.translation)

            grade = None
            while grade is None:
                answer = self.input("Grade (0-5, easy/good/hard, q to stop): ")
                if answer.strip().lower() in CANCEL_ANSWERS:
                    session.cancel()
                    print(f"Review stopped, {session.index} of {len(session)} words reviewed")
                    return
                grade = parse_grade(answer)

            step = session.submit_grade(grade, self.now())
            self.save()
            if step.session_complete:
                print("Review session complete!")

    def stats(self, args) -> None:
        stats = self.service.statistics(self.now())
        print(f"Learning: {stats.total_learning}")
        print(f"Learned: {stats.total_learned}")
        print(f"Learned today: {stats.learned_today}")
        print(f"Due now: {stats.due_now}")
        print(f"Custom words: {stats.custom_words_added}")

    def export(self, args) -> None:
        path = write_backup(args.path, self.service.records, self.service.custom_words, self.now())
        print(f"Exported to {path}")

    def import_(self, args) -> None:
        records, custom_words = read_backup(args.path)
        result = self.service.merge(records, custom_words)
        self.save()
        print(f"Imported {result.new_learning} learning words, {result.new_custom} custom words")

    def clear(self, args) -> None:
        if not args.yes:
            raise EnWordsError("Refusing to delete all data without --yes")
        self.service.clear()
        self.repository.clear()
        print("All data deleted")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(prog="enwords", description="Vocabulary review scheduler")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--database", help="Database URL (default: DATABASE_URL)")
    parser.add_argument("--catalog", help="Catalog JSON file (default: CATALOG_PATH)")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Logging level (default: LOG_LEVEL)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("levels", help="List catalog levels")

    browse = subparsers.add_parser("browse", help="List the words of a level")
    browse.add_argument("level")

    add = subparsers.add_parser("add", help="Start studying a word")
    add.add_argument("word")
    add.add_argument("translation")
    add.add_argument("--level", default="custom")

    study = subparsers.add_parser("study", help="Start studying a catalog word")
    study.add_argument("level")
    study.add_argument("word")

    custom = subparsers.add_parser("custom", help="Manage custom words")
    custom_commands = custom.add_subparsers(dest="custom_command", required=True)
    custom_add = custom_commands.add_parser("add", help="Define a custom word")
    custom_add.add_argument("word")
    custom_add.add_argument("translation")
    custom_add.add_argument("--level", default="custom")
    custom_commands.add_parser("list", help="List custom words")
    custom_remove = custom_commands.add_parser("remove", help="Delete a custom word")
    custom_remove.add_argument("id")
    custom_study = custom_commands.add_parser("study", help="Start studying a custom word")
    custom_study.add_argument("id")

    subparsers.add_parser("list", help="List studied words")

    learned = subparsers.add_parser("learned", help="Mark a word as learned")
    learned.add_argument("word")

    remove = subparsers.add_parser("remove", help="Stop studying a word")
    remove.add_argument("word")

    subparsers.add_parser("review", help="Review the words due now")
    subparsers.add_parser("stats", help="Show learning statistics")

    export = subparsers.add_parser("export", help="Write a JSON backup")
    export.add_argument("path", nargs="?", default=str(settings.paths.backups_dir))

    import_ = subparsers.add_parser("import", help="Merge a JSON backup")
    import_.add_argument("path")

    clear = subparsers.add_parser("clear", help="Delete all data")
    clear.add_argument("--yes", action="store_true", help="Confirm deletion")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run the command line interface."""
    args = build_parser().parse_args(argv)

    ensure_directories()
    setup_logging(f"Starting enwords v{__version__} ...", args.log_level)

    if settings.monitoring.metrics_port:
        start_monitoring(settings.monitoring.metrics_port)

    try:
        repository = SqlWordRepository.from_url(args.database)
        catalog = JsonCatalog(args.catalog or settings.catalog.path)
        cli = Cli(repository, catalog)
        handler = getattr(cli, "import_" if args.command == "import" else args.command)
        handler(args)
    except (EnWordsError, ValueError) as e:
        logger.error(f"Command {args.command!r} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
