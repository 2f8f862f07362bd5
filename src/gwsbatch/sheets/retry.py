"""
Rate limit handling for calls to the Sheets API.

Google answers 429 when we push too hard and the documented cure is
exponential back off.  Only that one status is retried, everything else
(other error responses, connection failures) is handed straight back to
the caller, retrying those risks applying non-idempotent mutations twice.

RetryPolicy is the pure part: given the attempt number and what kind of
failure happened it says how long to sleep or that we are done.
execute_with_retry() is the loop that drives a remote call with it.
"""
import enum
import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Self

import google.auth.exceptions
import httplib2
from googleapiclient.errors import HttpError

from ..errors import RemoteError, RateLimitExceededError, TransportError
from . import (GoogleSheetsRateLimitStatus,
               GoogleSheetsMaxRateLimitRetries,
               GoogleSheetsMaxRetrySleepMs)

logger = logging.getLogger(__name__)

# failures below the HTTP layer, there is no response to classify
TRANSPORT_EXCEPTIONS = (OSError,
                        httplib2.HttpLib2Error,
                        google.auth.exceptions.TransportError)

class FailureKind(enum.Enum):
    RATE_LIMITED = "rate_limited"
    REMOTE = "remote"
    TRANSPORT = "transport"

@dataclass(frozen=True)
class Retry():
    """Sleep this long then try again"""
    sleep_ms: int

@dataclass(frozen=True)
class Abort():
    """
    Stop and report.  exhausted is True when it was the retry
    ceiling that stopped us rather than the failure itself.
    """
    reason: str
    kind: FailureKind
    exhausted: bool = False

@dataclass
class RetryState():
    """Failed round trips so far for one top level call"""
    attempts: int = 0

    def failed(self) -> int:
        self.attempts += 1
        return self.attempts

@dataclass
class RetryPolicy():
    """
    max_retries:        Rate limited failures we will sleep through, one more
                        failure of any kind after that aborts.
    max_sleep_ms:       Cap on any single back off.
    rate_limit_status:  HTTP status that means 'slow down'.
    rng:                Source of the jitter, swap in a seeded one for tests.
    """
    max_retries: int = field(default=GoogleSheetsMaxRateLimitRetries)
    max_sleep_ms: int = field(default=GoogleSheetsMaxRetrySleepMs)
    rate_limit_status: int = field(default=GoogleSheetsRateLimitStatus)
    rng: random.Random = field(default_factory=random.Random, repr=False, compare=False)

    _CONFIG_KEYS = ('max_retries', 'max_sleep_ms', 'rate_limit_status')

    @property
    def config(self) -> dict:
        """
        Get all configuration state as a dict.
        Convenience for getting it all at once for pushing into a json, toml, ini, etc, file.
        """
        return {k: getattr(self, k) for k in self._CONFIG_KEYS}

    @config.setter
    def config(self, config: dict) -> None:
        """
        Set configuration state from a dict, keys not present are left alone.
        """
        for k in self._CONFIG_KEYS:
            v = config.get(k, None)
            if v is not None:
                setattr(self, k, int(v))

    @classmethod
    def from_config(cls, config: dict) -> Self:
        policy = cls()
        policy.config = config
        return policy

    def classify(self, error: BaseException) -> FailureKind:
        """
        Sort a failed call into one of the FailureKind buckets.
        Only an HttpError carries a status we can trust.
        """
        if isinstance(error, HttpError):
            if error.resp is not None and error.resp.status == self.rate_limit_status:
                return FailureKind.RATE_LIMITED
            return FailureKind.REMOTE
        return FailureKind.TRANSPORT

    def next_delay(self, attempt: int, failure: FailureKind, reason: str = "") -> Retry|Abort:
        """
        Decide what to do about failure number attempt (1 for the first failure).
        The ceiling is checked first so it applies whatever the failure was.
        The back off is (2^attempt + jitter) seconds where jitter is uniform
        in [0, 1), capped at max_sleep_ms.
        """
        if attempt > self.max_retries:
            return Abort("retry ceiling exceeded", failure, exhausted=True)
        if failure == FailureKind.RATE_LIMITED:
            sleep = min(self.max_sleep_ms, (2 ** attempt + self.rng.random()) * 1000)
            return Retry(int(sleep))
        return Abort(reason or failure.value, failure)

def _raise_abort(outcome: Abort, error: BaseException, attempts: int, description: str):
    status = error.resp.status if isinstance(error, HttpError) and error.resp is not None else None
    detail = f"{description}: " if description else ""
    if outcome.exhausted and outcome.kind == FailureKind.RATE_LIMITED:
        raise RateLimitExceededError(f"{detail}Rate limit retry attempts exceeded", attempts, status) from error
    # past the ceiling on some other failure, report that failure for what it is
    reason = _reason(error) if outcome.exhausted else outcome.reason
    if outcome.kind == FailureKind.TRANSPORT:
        raise TransportError(f"{detail}Request failed through a network error - {reason}") from error
    raise RemoteError(f"{detail}Cannot run Google API request - {reason}", status) from error

def _reason(error: BaseException) -> str:
    if isinstance(error, HttpError):
        return getattr(error, "reason", None) or str(error)
    return str(error) or error.__class__.__name__

def execute_with_retry(call: Callable[[], Any],
                       policy: RetryPolicy|None = None,
                       sleep: Callable[[float], Any] = time.sleep,
                       description: str = "") -> Any:
    """
    Run call() until it succeeds or the policy gives up.
    Rate limited failures sleep and go round again, anything else the
    policy aborts on is raised as RemoteError, TransportError or, when a
    rate limited failure hits the ceiling, RateLimitExceededError.  A
    different failure landing on the ceiling is raised as its own kind.
    The original exception is chained on as __cause__.  Exceptions that
    aren't API or network failures are not ours to judge and go straight
    up untouched.

    call:           Zero argument callable making the remote request.
    policy:         Retry settings, defaults to RetryPolicy().
    sleep:          Called with seconds to back off, time.sleep by default.
    description:    What the call is, for log and error messages.
    """
    policy = policy if policy is not None else RetryPolicy()
    state = RetryState()
    while True:
        try:
            return call()
        except (HttpError,) + TRANSPORT_EXCEPTIONS as e:
            attempt = state.failed()
            outcome = policy.next_delay(attempt, policy.classify(e), _reason(e))
            if isinstance(outcome, Abort):
                _raise_abort(outcome, e, attempt, description)
            logger.warning("Retrying API request after a rate limit error [%d of %d], sleeping %dms",
                           attempt, policy.max_retries, outcome.sleep_ms)
            sleep(outcome.sleep_ms / 1000)
