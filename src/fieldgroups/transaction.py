"""Preview runs: execute against the live repository, then roll everything back."""

from collections.abc import Callable

from fieldgroups.core_types import CommitResult, PreviewResult
from fieldgroups.interfaces import GroupRepository
from fieldgroups.utils.logging import log_debug, log_error


class PreviewTransaction:
    """Snapshot, run, restore.

    The restore runs in a ``finally`` block, so the repository is back to its
    snapshot whether the action returns or raises.  Results returned from a
    successful action still describe the proposed groups.
    """

    def __init__(self, repository: GroupRepository):
        self.repository = repository

    def run(self, action: Callable[[], CommitResult]) -> PreviewResult:
        snapshot = self.repository.snapshot()
        try:
            result = action()
        except Exception as exc:
            log_error(f"Previewing groups failed: {exc}")
            return PreviewResult(success=False, error=str(exc))
        finally:
            self.repository.restore(snapshot)
            log_debug("Repository restored from preview snapshot", __name__)

        return PreviewResult(
            success=True,
            created_groups=result.created_groups,
            statistics=result.statistics,
        )
