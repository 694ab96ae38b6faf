"""
Bounded-concurrency request dispatcher.

A fixed pool of worker threads drains one shared FIFO of ``(index, request)``
jobs and posts ``Outcome`` records to a single result queue. The collector reads
exactly one outcome per request and places it by index, so the returned list
always follows enqueue order regardless of completion order. Worker threads are
joined before any outcome is inspected.
"""

import logging
import queue
import sys
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, TextIO

from .request import Request
from .runtime.errors import ConfigurationError, DispatchCancelledError, DispatchError


logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


@dataclass
class Outcome:
    """Result of one request slot."""
    index: int
    body: Optional[bytes] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ProgressBar:
    """
    Text progress bar usable as a progress callback.

    Renders ``[#####--------------------] 20.00% completed`` on each call.
    """

    def __init__(self, stream: Optional[TextIO] = None, step: float = 4.0):
        self.stream = stream
        self.step = step

    def render(self, completed: int, total: int) -> str:
        progress = completed / total * 100.0 if total else 100.0
        cells = []
        pct = 0.0
        while pct <= 100.0:
            cells.append("#" if pct <= progress else "-")
            pct += self.step
        return f"[{''.join(cells)}] {progress:.2f}% completed"

    def __call__(self, completed: int, total: int) -> None:
        stream = self.stream or sys.stderr
        stream.write(self.render(completed, total) + "\n")
        stream.flush()


class Dispatcher:
    """
    Runs a list of requests against a connection with at most
    ``max_workers`` in flight.

    Example:
        ```python
        dispatcher = Dispatcher(connection, max_workers=8)
        outcomes = dispatcher.run(requests)
        bodies = Dispatcher.collect(outcomes, strict=False)
        ```
    """

    # seconds between worker liveness checks while waiting for outcomes
    POLL_INTERVAL = 0.1

    def __init__(self, connection, max_workers: int):
        """
        Initialize the dispatcher.

        Args:
            connection: Initialized Connection the requests are sent through
            max_workers: Number of worker threads started per pass

        Raises:
            ConfigurationError: If max_workers is less than one
        """
        if not isinstance(max_workers, int) or max_workers < 1:
            raise ConfigurationError(f"max_workers must be at least 1, got {max_workers!r}")
        self.connection = connection
        self.max_workers = max_workers

    def run(
        self,
        requests: Sequence[Request],
        progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[Outcome]:
        """
        Execute every request and return one outcome per request, in order.

        Args:
            requests: Requests to execute
            progress: Called with (completed, total) after each outcome arrives
            cancel_event: Once set, workers stop sending; requests not yet
                started get a DispatchCancelledError outcome

        Returns:
            Outcomes positioned like the input requests
        """
        total = len(requests)
        if total == 0:
            return []

        jobs = queue.Queue()
        for index, request in enumerate(requests):
            jobs.put((index, request))
        results = queue.Queue()

        workers = [
            threading.Thread(
                target=self._worker,
                args=(f"worker-{i}", jobs, results, cancel_event),
                name=f"woo-dispatch-{i}",
                daemon=True,
            )
            for i in range(self.max_workers)
        ]
        for worker in workers:
            worker.start()
        logger.info(f"{total} scheduled on {self.max_workers} workers")

        outcomes: List[Optional[Outcome]] = [None] * total
        completed = 0
        while completed < total:
            try:
                outcome = results.get(timeout=self.POLL_INTERVAL)
            except queue.Empty:
                if any(worker.is_alive() for worker in workers) or not results.empty():
                    continue
                break
            outcomes[outcome.index] = outcome
            completed += 1
            self._report(progress, completed, total)

        for worker in workers:
            worker.join()

        for index, outcome in enumerate(outcomes):
            if outcome is None:
                logger.error(f"Request #{index} was never run: all workers exited")
                outcomes[index] = Outcome(index, error=DispatchCancelledError(
                    "All dispatch workers exited", endpoint=requests[index].endpoint))
        return outcomes

    def _worker(self, worker_id: str, jobs: queue.Queue, results: queue.Queue,
                cancel_event: Optional[threading.Event]) -> None:
        """Drain the job queue until it is empty."""
        logger.debug(f"Dispatch worker {worker_id} started")

        while True:
            try:
                index, request = jobs.get_nowait()
            except queue.Empty:
                break

            if cancel_event is not None and cancel_event.is_set():
                results.put(Outcome(index, error=DispatchCancelledError(endpoint=request.endpoint)))
                continue

            # every dequeued job posts exactly one outcome, or the collector blocks
            outcome = Outcome(index, error=DispatchCancelledError(
                f"Worker {worker_id} aborted", endpoint=request.endpoint))
            try:
                outcome = Outcome(index, body=request.send(self.connection, cancel_event))
            except Exception as e:
                outcome = Outcome(index, error=e)
            finally:
                results.put(outcome)

        logger.debug(f"Dispatch worker {worker_id} stopped")

    @staticmethod
    def _report(progress: Optional[ProgressCallback], completed: int, total: int) -> None:
        if progress is None:
            return
        try:
            progress(completed, total)
        except Exception as e:
            logger.warning(f"Progress callback raised: {e}")

    @staticmethod
    def collect(outcomes: Sequence[Outcome], strict: bool = True) -> List[Optional[bytes]]:
        """
        Reduce outcomes to raw bodies.

        Failed slots hold ``None``. In strict mode any failure raises
        DispatchError carrying the partial bodies and the per-slot errors;
        otherwise failures are logged and skipped.

        Raises:
            DispatchError: strict mode and at least one slot failed
        """
        bodies: List[Optional[bytes]] = [outcome.body for outcome in outcomes]
        errors: Dict[int, Exception] = {
            outcome.index: outcome.error for outcome in outcomes if not outcome.ok
        }

        for index, error in sorted(errors.items()):
            logger.error(f"Request #{index} failed: {error}")

        if errors and strict:
            raise DispatchError(errors, bodies)
        return bodies
