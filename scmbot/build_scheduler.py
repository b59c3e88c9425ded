"""
Scheduled rebuilds of the embedding cache (and optionally the relevance index).

Schedule options match the build schedule setting operators already know:
No, Now, Hourly, Twice Daily, Daily, Weekly, Disable, Cancel.
Rebuilds are serialized with a lock; a rebuild requested while another is
running is skipped, not queued.
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

SCHEDULE_INTERVALS = {
    "Hourly": 60 * 60,
    "Twice Daily": 12 * 60 * 60,
    "Daily": 24 * 60 * 60,
    "Weekly": 7 * 24 * 60 * 60,
}
RUN_ONCE = "Now"
INACTIVE_SCHEDULES = ("No", "Disable", "Cancel")
SCHEDULE_OPTIONS = ("No", RUN_ONCE, *SCHEDULE_INTERVALS, "Disable", "Cancel")


def rebuild(model, full_scan_supplier, rebuild_index: bool = False,
            index_job: Optional[Callable[[], Any]] = None) -> Dict[str, Any]:
    """Rebuild the cached matrix for all published content.

    Args:
        model: SententialContextModel whose cache and settings are used.
        full_scan_supplier: Supplier returning all published content.
        rebuild_index: Also rebuild the relevance index.
        index_job: Callable rebuilding the relevance index; defaults to the
                   MySQL-backed rebuild.

    Returns:
        Summary with corpus size and matrix size.
    """
    started = time.time()
    corpus = full_scan_supplier.fetch_relevant_text("")
    matrix = model.rebuild_embeddings(corpus)
    summary = {
        "corpus_chars": len(corpus),
        "words": len(matrix),
        "relevance_index_words": None,
    }

    if rebuild_index:
        if index_job is None:
            from scmbot import database_client
            from scmbot.content.relevance_index import SqlRelevanceIndex, rebuild_relevance_index

            def index_job():
                return rebuild_relevance_index(
                    database_client.fetch_published_content,
                    SqlRelevanceIndex(),
                    model.settings.stop_words,
                )
        index = index_job()
        summary["relevance_index_words"] = len(index)

    summary["seconds"] = round(time.time() - started, 3)
    logger.info(f"[SCHEDULER] Rebuild complete: {summary}")
    return summary


class BuildScheduler:
    """Runs a rebuild job once or periodically on a daemon thread."""

    def __init__(self, job: Callable[[], Any]):
        self._job = job
        self._run_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._status: Dict[str, Any] = {
            "schedule": "No",
            "last_run": None,
            "last_status": "Please select a Build Schedule.",
            "runs": 0,
        }

    def run_now(self) -> bool:
        """Run the job in the calling thread. Returns False if skipped or failed."""
        if not self._run_lock.acquire(blocking=False):
            logger.warning("[SCHEDULER] Rebuild already in progress, skipping")
            return False
        try:
            logger.info("[SCHEDULER] Starting rebuild")
            result = self._job()
            self._record(f"Completed: {result}")
            return True
        except Exception as e:
            logger.exception(f"[SCHEDULER] Rebuild failed: {e}")
            self._record(f"Failed: {e}")
            return False
        finally:
            self._run_lock.release()

    def _record(self, message: str) -> None:
        with self._state_lock:
            self._status["last_run"] = time.strftime("%Y-%m-%d %H:%M:%S")
            self._status["last_status"] = message
            self._status["runs"] += 1

    def _loop(self, interval: Optional[int], stop: threading.Event) -> None:
        self.run_now()
        if interval is None:
            return
        while not stop.wait(interval):
            self.run_now()

    def start(self, schedule: str) -> None:
        """Apply a build schedule, replacing any running one."""
        if schedule not in SCHEDULE_OPTIONS:
            raise ValueError(f"Unknown build schedule: {schedule!r}")

        self.stop()
        with self._state_lock:
            self._status["schedule"] = schedule

        if schedule in INACTIVE_SCHEDULES:
            logger.info(f"[SCHEDULER] Build schedule '{schedule}', nothing scheduled")
            return

        interval = SCHEDULE_INTERVALS.get(schedule)
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._loop, args=(interval, self._stop), daemon=True)
        self._thread.start()
        logger.info(f"[SCHEDULER] Started build schedule '{schedule}'")

    def stop(self, timeout: float = None) -> None:
        """Stop a running schedule; an in-flight rebuild is allowed to finish."""
        self._stop.set()
        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout)
        self._thread = None

    def status(self) -> Dict[str, Any]:
        with self._state_lock:
            status = dict(self._status)
        status["running"] = self._thread is not None and self._thread.is_alive()
        return status
