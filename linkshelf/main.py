import argparse
import sys

from psycopg_pool import PoolTimeout

from linkshelf.classification.exceptions import ClassificationError
from linkshelf.config.settings import Settings
from linkshelf.database.connection import apply_schema, close_pool, init_pool
from linkshelf.database.exceptions import RepositoryError
from linkshelf.logging.logger import Log
from linkshelf.processor.exceptions import ProcessorError
from linkshelf.processor.service import DocumentService, build_service
from linkshelf.worker.ingest_runner import IngestRunner


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linkshelf",
        description="Capture web pages as PDFs and categorize them.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    ingest = commands.add_parser("ingest", help="Capture and categorize one or more URLs")
    ingest.add_argument("urls", nargs="+", metavar="URL")
    ingest.add_argument("--note", action="store_true", help="Also write a note to the vault")

    train = commands.add_parser("train", help="Retrain the TF-IDF classifier")
    train.add_argument("--max-documents", type=int, default=None)

    reclassify = commands.add_parser("reclassify", help="Re-run classification for a document")
    reclassify.add_argument("document_id", metavar="ID")

    commands.add_parser("rebuild-categories", help="Recreate missing catalog entries")
    commands.add_parser("init-db", help="Create database tables")
    return parser


def run(args: argparse.Namespace, settings: Settings) -> int:
    """Execute one CLI command. Returns the process exit code."""
    if args.command == "init-db":
        apply_schema()
        Log.info("Database schema applied")
        return 0

    service = build_service(settings)
    try:
        return _run_service_command(args, settings, service)
    finally:
        service.close()


def _run_service_command(args: argparse.Namespace, settings: Settings, service: DocumentService) -> int:
    if args.command == "ingest":
        outcomes = IngestRunner(service, settings).run(args.urls, create_note=args.note)
        for outcome in outcomes:
            if outcome.ok:
                print(f"{outcome.url}\t{outcome.result.id}\t{outcome.result.artifact_locator}")
            else:
                print(f"{outcome.url}\tFAILED\t{outcome.error}")
        return 0 if all(o.ok for o in outcomes) else 1

    if args.command == "train":
        report = service.train_classifier(args.max_documents)
        print(
            f"Trained on {report.documents_processed} documents "
            f"({report.documents_skipped} skipped), "
            f"{len(report.categories)} categories, vocabulary {report.vocabulary_size}"
        )
        return 0

    if args.command == "reclassify":
        document = service.reclassify_document(args.document_id)
        for assignment in document.categories:
            print(f"{assignment.name}\t{assignment.confidence:.2f}\t{assignment.classifier}")
        return 0

    if args.command == "rebuild-categories":
        summary = service.rebuild_categories()
        print(
            f"Created {summary['categories_created']} of "
            f"{summary['total_categories']} categories"
        )
        return 0

    raise ValueError(f"Unknown command '{args.command}'")


def main(argv: list[str] | None = None) -> int:
    """Entry point: parse args -> initialize pool -> run command."""
    args = build_parser().parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)

    try:
        init_pool(settings)
        return run(args, settings)
    except PoolTimeout as exc:
        Log.error(f"Database not reachable: {exc}")
        return 1
    except (ProcessorError, ClassificationError, RepositoryError) as exc:
        Log.error(f"{args.command} failed: {exc}")
        return 1
    finally:
        close_pool()


if __name__ == "__main__":
    sys.exit(main())
