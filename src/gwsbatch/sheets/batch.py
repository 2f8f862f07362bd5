import logging
import time
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from .requests import GoogleSheetsUpdateRequestBase, GoogleSheetsUpdateRequestResponse
from .retry import RetryPolicy, execute_with_retry
from .transport import Transport

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class NotBatching():
    """Requests go out as soon as they are submitted"""
    pass

@dataclass
class Batching():
    """Requests pile up in queue, in submission order, until a flush"""
    queue: list = field(default_factory=list)

class BatchExecutor():
    """
    Sends batchUpdate requests for one spreadsheet target, either one at a time
    or accumulated into a single batchUpdate.  The batchUpdate endpoint takes a
    list of requests and applies them as one transaction, and it is far kinder
    to the rate limits to send 50 requests in one call than 50 calls of one.

    Usage is either explicit:

        executor.start_batch()
        executor.submit(request1)
        executor.submit(request2)
        response = executor.flush()

    or with the context manager, which flushes on the way out:

        with executor.batch():
            executor.submit(request1)
            executor.submit(request2)

    Every remote call made here goes through execute_with_retry() so rate
    limited calls back off and go again.

    An executor belongs to one owner (typically a GoogleSheet) and there is no
    locking, driving the same executor from two threads is not supported.
    """
    def __init__(self, spreadsheet_id: str,
                 transport: Transport,
                 policy: RetryPolicy|None = None,
                 sleep: Callable[[float], Any] = time.sleep) -> None:
        if not spreadsheet_id:
            raise ValueError("A spreadsheet ID is required")
        self._spreadsheet_id = spreadsheet_id
        self._transport = transport
        self._policy = policy if policy is not None else RetryPolicy()
        self._sleep = sleep
        self._state: NotBatching|Batching = NotBatching()

    def __repr__(self) -> str:
        return f"{self.__class__}:{self._spreadsheet_id}:{self._state}"

    @property
    def spreadsheet_id(self) -> str:
        return self._spreadsheet_id

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    @property
    def sleep(self) -> Callable[[float], Any]:
        return self._sleep

    @property
    def batching(self) -> bool:
        return isinstance(self._state, Batching)

    @property
    def pending(self) -> tuple:
        """Requests queued and not yet sent, empty when not batching"""
        return tuple(self._state.queue) if isinstance(self._state, Batching) else ()

    def start_batch(self) -> None:
        """
        Start queueing requests instead of sending them.
        Calling this while already batching does nothing, queued work is kept.
        """
        if not isinstance(self._state, Batching):
            self._state = Batching()

    def clear_batch(self) -> None:
        """Throw away anything queued and go back to sending immediately"""
        if isinstance(self._state, Batching) and self._state.queue:
            logger.debug("Discarding %d queued requests for %s", len(self._state.queue), self._spreadsheet_id)
        self._state = NotBatching()

    def submit(self, request: GoogleSheetsUpdateRequestBase|dict) -> GoogleSheetsUpdateRequestResponse|None:
        """
        Queue the request if batching and return None, otherwise send it
        on its own as a single request transaction and return the response.
        """
        if isinstance(self._state, Batching):
            self._state.queue.append(request)
            return None
        return self.execute([request])

    def flush(self) -> GoogleSheetsUpdateRequestResponse|None:
        """
        Send everything queued as one batchUpdate, in the order queued.
        Nothing queued (or not batching) means no call and None back.
        The batch is over afterwards whether the call worked or not.  If it
        failed there is no telling from here what the service applied, so
        treat every queued request as being in an unknown state.
        """
        if not isinstance(self._state, Batching) or not self._state.queue:
            return None
        requests = self._state.queue
        try:
            return self.execute(requests)
        finally:
            self._state = NotBatching()

    def execute(self, requests: Sequence[GoogleSheetsUpdateRequestBase|dict]) -> GoogleSheetsUpdateRequestResponse:
        """
        Send requests as one batchUpdate transaction right now, bypassing any batch.
        """
        ops = list(requests)
        logger.debug("Sending batchUpdate of %d requests to %s", len(ops), self._spreadsheet_id)
        return self.run(lambda: self._transport.batch_update(self._spreadsheet_id, ops),
                        f"batchUpdate on {self._spreadsheet_id}")

    def run(self, call: Callable[[], Any], description: str = "") -> Any:
        """
        Make any other remote call (fetches, values calls) under the same retry policy.
        """
        return execute_with_retry(call, self._policy, self._sleep, description)

    @contextmanager
    def batch(self) -> Iterator["BatchExecutor"]:
        """
        Batch everything submitted inside the with block and flush on exit.
        If the block raises the queue is discarded unsent.  Either way the
        executor is back to sending immediately afterwards, even when nothing
        was queued.  Entering while already batching joins the outer batch
        and leaves the flush to it.
        """
        if isinstance(self._state, Batching):
            yield self
            return
        self.start_batch()
        try:
            yield self
        except BaseException:
            self.clear_batch()
            raise
        try:
            self.flush()
        finally:
            self.clear_batch()
