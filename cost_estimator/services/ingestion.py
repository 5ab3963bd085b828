"""
Ingestion Pipeline
==================
Counts tokens across uploaded files in bounded concurrent batches.
"""

import asyncio

import structlog
from prometheus_client import Counter

from cost_estimator.config import settings
from cost_estimator.core.extractor import extract, file_extension
from cost_estimator.core.tokenizer import TokenCounter, get_token_counter
from cost_estimator.schemas.tokens import FileTokenResult, TokenCountResponse

logger = structlog.get_logger()

FILES_PROCESSED = Counter(
    "estimator_files_processed_total",
    "Uploaded files run through the ingestion pipeline",
    ["status"],
)
TOKENS_COUNTED = Counter(
    "estimator_tokens_counted_total",
    "Tokens counted across successfully parsed files",
)


def count_characters(text: str) -> int:
    """Length of ``text`` in UTF-16 code units, so emoji count as two."""
    return len(text.encode("utf-16-le")) // 2


class EmptyUploadError(ValueError):
    """Raised when the pipeline is called without any files."""

    def __init__(self) -> None:
        super().__init__("No files provided")


class IngestionPipeline:
    """
    Extracts and counts tokens for a set of files.

    Files are processed in consecutive batches; the files of one batch run
    as concurrent tasks and the next batch starts once all of them settled.
    """

    def __init__(
        self,
        counter: TokenCounter | None = None,
        batch_size: int | None = None,
    ):
        self.counter = counter or get_token_counter()
        if batch_size is None:
            batch_size = settings.ingest_batch_size
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.batch_size = batch_size

    async def process_file(self, file_name: str, data: bytes) -> FileTokenResult:
        """Extract and count one file. Failures are returned, not raised."""
        try:
            parsed = extract(data, file_name)
            if parsed.error:
                return FileTokenResult(
                    file_name=file_name,
                    file_type=parsed.file_type,
                    tokens=0,
                    characters=0,
                    error=parsed.error,
                )

            # Extraction and counting are synchronous; yield so the other
            # files of the batch get a turn between the two steps
            await asyncio.sleep(0)

            return FileTokenResult(
                file_name=file_name,
                file_type=parsed.file_type,
                tokens=self.counter.count(parsed.text),
                characters=count_characters(parsed.text),
            )
        except Exception as e:
            logger.error("Failed to process file", file_name=file_name, error=str(e))
            return FileTokenResult(
                file_name=file_name,
                file_type=file_extension(file_name) or "unknown",
                tokens=0,
                characters=0,
                error=str(e) or "Unknown error",
            )

    async def process_all(
        self,
        files: list[tuple[str, bytes]],
        batch_size: int | None = None,
    ) -> TokenCountResponse:
        """
        Count tokens for every file, preserving input order.

        Raises:
            EmptyUploadError: If ``files`` is empty
            ValueError: If ``batch_size`` is below 1
        """
        if not files:
            raise EmptyUploadError()

        size = batch_size if batch_size is not None else self.batch_size
        if size < 1:
            raise ValueError("batch_size must be >= 1")

        slots: list[FileTokenResult | None] = [None] * len(files)

        async def run_slot(index: int) -> None:
            name, data = files[index]
            slots[index] = await self.process_file(name, data)

        batches = 0
        for start in range(0, len(files), size):
            indices = range(start, min(start + size, len(files)))
            await asyncio.gather(*(run_slot(index) for index in indices))
            batches += 1

        results = [result for result in slots if result is not None]
        response = self._aggregate(results)

        logger.info(
            "Processed upload",
            files=response.file_count,
            batches=batches,
            total_tokens=response.total_tokens,
            errors=len(response.errors),
        )
        return response

    def _aggregate(self, results: list[FileTokenResult]) -> TokenCountResponse:
        total_tokens = 0
        total_characters = 0
        errors = []

        for result in results:
            if result.error:
                errors.append(result.error)
                FILES_PROCESSED.labels(status="error").inc()
            else:
                total_tokens += result.tokens
                total_characters += result.characters
                FILES_PROCESSED.labels(status="ok").inc()

        TOKENS_COUNTED.inc(total_tokens)

        return TokenCountResponse(
            total_tokens=total_tokens,
            total_characters=total_characters,
            file_count=len(results),
            files=results,
            errors=errors,
        )
