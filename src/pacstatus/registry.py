import logging
import threading
from typing import Optional

from pacstatus.metric import skipped_check_reuse_counter

logger = logging.getLogger("pacstatus")


class CheckRegistry:
    """Remembers the one skipped check run this provider session took over.

    Several skipped commits of one push would otherwise each get their own
    "Skipped" check run. The first reconciliation that finds such a check run
    claims it, every later claim is rejected, and the slot is never reset.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._skipped_check_run_id: Optional[int] = None

    @property
    def skipped_check_run_id(self) -> Optional[int]:
        return self._skipped_check_run_id

    def try_claim_skip_slot(self, check_run_id: int) -> bool:
        with self._lock:
            if self._skipped_check_run_id is None:
                self._skipped_check_run_id = check_run_id
                claimed = True
            else:
                claimed = False

        skipped_check_reuse_counter.labels(
            result="claimed" if claimed else "rejected"
        ).inc()
        logger.debug(
            "Skipped check run %d claim %s", check_run_id, "won" if claimed else "lost"
        )
        return claimed
