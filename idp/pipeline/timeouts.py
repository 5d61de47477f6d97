from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import TypeVar

T = TypeVar("T")


class CallTimeoutError(Exception):
    """Raised when a bounded call does not return in time."""


def call_with_timeout(fn: Callable[[], T], timeout_seconds: float, label: str) -> T:
    """Run fn on a helper thread and wait at most timeout_seconds for it.

    For blocking library calls with no timeout of their own. On timeout the
    helper thread is abandoned, not killed; its result is discarded.
    """
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="idp-bounded")
    future = executor.submit(fn)
    try:
        return future.result(timeout=timeout_seconds)
    except FutureTimeoutError as exc:
        raise CallTimeoutError(f"{label} timed out after {timeout_seconds}s") from exc
    finally:
        executor.shutdown(wait=False, cancel_futures=True)
