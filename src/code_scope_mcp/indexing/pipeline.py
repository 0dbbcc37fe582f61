"""
Concurrent scope indexing pipeline.

Files are analyzed independently on a thread pool. Every worker runs the
tagging tool and the scope builder privately and returns a frozen table; only
the calling thread writes results to the sink, so a table is published after
it is complete. A failure of one file is recorded and never stops the others.
"""

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from ..analyzers.analysis_result import ScopeAnalysisResult
from ..analyzers.analyzer_factory import AnalyzerFactory
from ..analyzers.scope_analyzer import ScopeAnalyzer
from ..constants import DEFAULT_MAX_WORKERS, EXCLUDE_DIRECTORIES
from ..utils.statistics import Statistics
from .document import Document
from .field_adapter import ScopeFieldAdapter
from .scope_store import ScopeStore

logger = logging.getLogger(__name__)


@dataclass
class ScopeIndexingStats:
    """
    Statistics for a scope indexing run.

    Attributes:
        files_processed: Files whose analysis finished (with or without scopes)
        files_with_scopes: Files for which a scope table was produced
        files_degraded: Files whose tagging failed and got only the global scope
        files_failed: Files whose analysis raised an unexpected error
        scopes_built: Total named scope entries across all files
        warnings: Number of skipped tag records
        errors: Error messages, one per failed or degraded file
    """
    files_processed: int = 0
    files_with_scopes: int = 0
    files_degraded: int = 0
    files_failed: int = 0
    scopes_built: int = 0
    warnings: int = 0
    start_time: float = field(default_factory=time.time)
    end_time: Optional[float] = None
    errors: List[str] = field(default_factory=list)

    def finish(self):
        """Mark indexing as finished."""
        self.end_time = time.time()

    @property
    def duration_seconds(self) -> float:
        """Get indexing duration in seconds."""
        if self.end_time is None:
            return time.time() - self.start_time
        return self.end_time - self.start_time

    def to_dict(self) -> Dict[str, Any]:
        """Convert stats to dictionary."""
        return {
            "files_processed": self.files_processed,
            "files_with_scopes": self.files_with_scopes,
            "files_degraded": self.files_degraded,
            "files_failed": self.files_failed,
            "scopes_built": self.scopes_built,
            "warnings": self.warnings,
            "duration_seconds": self.duration_seconds,
            "errors": self.errors,
        }


def iter_source_files(directory: str) -> Iterator[str]:
    """Yield files under a directory whose type produces scope data."""
    for root, dirs, files in os.walk(directory):
        dirs[:] = sorted(d for d in dirs if d not in EXCLUDE_DIRECTORIES and not d.startswith('.'))
        for name in sorted(files):
            if AnalyzerFactory.is_extension_supported(os.path.splitext(name)[1]):
                yield os.path.join(root, name)


class ScopeIndexingPipeline:
    """
    Pipeline that builds and stores scope tables for many files.

    Results go to ``documents`` (path -> Document) and, when a ScopeStore is
    given, to the database as well.
    """

    def __init__(
        self,
        analyzer: ScopeAnalyzer,
        store: Optional[ScopeStore] = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
        field_adapter: Optional[ScopeFieldAdapter] = None,
    ):
        """
        Args:
            analyzer: Per-file scope analyzer (shared by all workers)
            store: Optional persistent store
            max_workers: Size of the worker pool
            field_adapter: Adapter writing the scopes field of documents
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.analyzer = analyzer
        self.store = store
        self.max_workers = max_workers
        self.field_adapter = field_adapter or ScopeFieldAdapter()
        self.documents: Dict[str, Document] = {}
        self.progress_callback: Optional[Callable[[str, Dict[str, Any]], None]] = None

    def set_progress_callback(self, callback: Callable[[str, Dict[str, Any]], None]):
        """
        Set callback for progress updates.

        Args:
            callback: Function to call with (message, stats) on progress
        """
        self.progress_callback = callback

    def _report_progress(self, message: str, stats: Optional[Dict[str, Any]] = None):
        """Report progress via callback and logging."""
        logger.info(message)
        if self.progress_callback:
            self.progress_callback(message, stats or {})

    def index_directory(self, directory: str) -> ScopeIndexingStats:
        """Index every supported file below a directory."""
        if not os.path.isdir(directory):
            raise ValueError(f"Directory does not exist: {directory}")
        return self.index_files(iter_source_files(directory))

    def index_files(self, file_paths: Iterable[str]) -> ScopeIndexingStats:
        """
        Analyze files concurrently and publish their scope tables.

        Args:
            file_paths: Files to index

        Returns:
            ScopeIndexingStats for the run
        """
        stats = ScopeIndexingStats()
        timer = Statistics()
        paths = list(dict.fromkeys(file_paths))
        self._report_progress(f"Indexing scopes of {len(paths)} file(s)", {"total": len(paths)})

        finished: List[ScopeAnalysisResult] = []
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {executor.submit(self.analyzer.analyze, path): path for path in paths}
            for future in as_completed(futures):
                path = futures[future]
                try:
                    result = future.result()
                except Exception as e:
                    stats.files_failed += 1
                    stats.errors.append(f"{path}: {e}")
                    logger.error(f"Scope analysis failed for {path}: {e}")
                    continue

                self._publish(result, stats)
                if result.table is not None:
                    finished.append(result)

        if self.store is not None and finished:
            try:
                self.store.save_many((result.file_path, result.table) for result in finished)
            except Exception as e:
                stats.errors.append(f"scope store: {e}")
                logger.error(f"Failed to persist scopes: {e}")

        stats.finish()
        timer.report(logger, f"Indexed scopes of {stats.files_processed} file(s)")
        self._report_progress("Scope indexing finished", stats.to_dict())
        return stats

    def _publish(self, result: ScopeAnalysisResult, stats: ScopeIndexingStats) -> None:
        stats.files_processed += 1
        stats.warnings += len(result.warnings)
        if result.error:
            stats.files_degraded += 1
            stats.errors.append(f"{result.file_path}: {result.error}")
        if result.table is None:
            return

        stats.files_with_scopes += 1
        stats.scopes_built += result.table.size()
        document = self.documents.setdefault(result.file_path, Document(path=result.file_path))
        self.field_adapter.write(document, result.table)
