from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from linkshelf.config.settings import Settings
from linkshelf.logging.logger import Log
from linkshelf.processor.exceptions import IngestionError
from linkshelf.processor.models import IngestOptions, IngestResult
from linkshelf.processor.service import DocumentService, default_ingest_options


@dataclass(frozen=True)
class IngestOutcome:
    url: str
    result: IngestResult | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.result is not None


class IngestRunner:
    """Ingest a batch of URLs concurrently and report per-URL outcomes."""

    def __init__(self, service: DocumentService, settings: Settings) -> None:
        self._service = service
        self._settings = settings

    def run(self, urls: list[str], create_note: bool = False) -> list[IngestOutcome]:
        """Ingest every URL; outcomes are returned in input order."""
        options = default_ingest_options(self._settings, create_note=create_note)
        workers = max(1, min(self._settings.ingest_workers, len(urls)))
        Log.info(f"Ingesting {len(urls)} URLs with {workers} workers")
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="ingest") as pool:
            return list(pool.map(lambda url: self._ingest_one(url, options), urls))

    def _ingest_one(self, url: str, options: IngestOptions) -> IngestOutcome:
        try:
            result = self._service.ingest_url(url, options)
        except IngestionError as exc:
            Log.error(f"Ingestion of {url} failed at {exc.step.value}: {exc.message}")
            return IngestOutcome(url, error=str(exc))
        except Exception as exc:
            Log.exception(f"Unexpected error ingesting {url}")
            return IngestOutcome(url, error=str(exc))
        Log.info(f"Ingested {url} as {result.id}")
        return IngestOutcome(url, result=result)
