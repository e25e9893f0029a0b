"""Run summary: tallies job outcomes and reports skips and failures as they happen."""
from mediabatch.utils import LogLevel
from mediabatch.utils import logger, time_util
from .models import BatchSummary, JobOutcome, JobStatus, MediaFile


class BatchReport:
    """Accumulates job outcomes into a BatchSummary."""

    def __init__(self):
        self.summary = BatchSummary()

    def record(self, file: MediaFile, outcome: JobOutcome) -> None:
        summary = self.summary
        summary.processed += 1
        summary.outcomes.append((file, outcome))

        if outcome.status is JobStatus.SUCCESS:
            summary.successful += 1
        elif outcome.status is JobStatus.SKIPPED:
            summary.skipped += 1
            logger.log("job.skip", LogLevel.INFO, file=file.path.name, reason=outcome.reason)
        else:
            summary.failed += 1
            logger.log("job.failed", LogLevel.ERROR,
                       file=file.path.name,
                       reason=outcome.reason,
                       detail=outcome.detail)

    def finish(self, elapsed_seconds: float) -> BatchSummary:
        self.summary.elapsed_seconds = elapsed_seconds
        self.summary.elapsed_time = time_util.format_elapsed(elapsed_seconds)
        return self.summary

    @property
    def success(self) -> bool:
        return self.summary.failed == 0
