"""Sequential candidate probing bookkeeping.

One ``CandidateProbe`` tracks a single probe: the ordered candidates, the
failures recorded so far, and the terminal error when none succeeded. The
sync and async invokers drive it with their own I/O, so the ordering and
history rules live in one place.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..errors import AllCandidatesFailedError, InvalidConfigError, ProbeCancelledError
from ..http import join_url
from ..telemetry import SDKLogger
from .errors import ErrorFactory

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from ..errors import GrantSDKError
    from ..models import CandidateFailure


class CandidateProbe:
    """State of one ordered, sequential probe across candidate base paths."""

    def __init__(
        self,
        method: str,
        path: str,
        candidates: Sequence[str],
        *,
        logger: Any | None = None,
    ) -> None:
        if isinstance(candidates, str):
            msg = "candidates must be a sequence of base paths, not a string"
            raise InvalidConfigError(msg, field="candidates")
        if not candidates:
            raise InvalidConfigError("At least one candidate base path is required", field="candidates")
        self.method = method
        self.path = path
        self.candidates = list(candidates)
        self._history: list[CandidateFailure] = []
        self._logger = SDKLogger.wrap(logger).bind(method=method, path=path)

    @property
    def history(self) -> list[CandidateFailure]:
        """Failures recorded so far, in attempt order."""
        return list(self._history)

    def attempts(self) -> Iterator[tuple[str, str]]:
        """Yield ``(candidate, url)`` pairs in the given order."""
        total = len(self.candidates)
        for index, candidate in enumerate(self.candidates, start=1):
            url = join_url(candidate, self.path)
            self._logger.debug("Trying candidate", candidate=candidate, attempt=index, of=total)
            yield candidate, url

    def record_failure(self, candidate: str, url: str, error: GrantSDKError) -> None:
        """Record a failed attempt; iteration continues with the next candidate."""
        failure = ErrorFactory.candidate_failure(candidate, url, error)
        self._history.append(failure)
        self._logger.info(
            "Candidate failed",
            candidate=candidate,
            kind=failure.kind.value,
            status_code=failure.status_code,
        )

    def record_success(self, candidate: str, status_code: int) -> None:
        """Log the winning candidate so the authoritative path can be configured."""
        log = self._logger.warning if self._history else self._logger.info
        log(
            "Candidate succeeded",
            candidate=candidate,
            status_code=status_code,
            prior_failures=[failure.candidate for failure in self._history],
        )

    def exhausted(self) -> AllCandidatesFailedError:
        """Terminal error once every candidate has failed."""
        error = AllCandidatesFailedError(self._history)
        self._logger.error(
            "All candidates failed",
            attempts=len(self._history),
            history=[failure.describe() for failure in self._history],
        )
        return error

    def cancelled(self) -> ProbeCancelledError:
        """Terminal error for a probe cancelled before any candidate succeeded."""
        self._logger.warning("Probe cancelled", attempts=len(self._history))
        return ProbeCancelledError(self._history)
