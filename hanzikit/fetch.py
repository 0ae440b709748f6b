"""Background HTTP fetching with a fixed pool of reusable request slots."""

from __future__ import annotations

import threading
import urllib.error
import urllib.request
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

MAX_HANDLE = 100
MAX_BUFFER_SIZE = 2048
REQUEST_TIMEOUT = 10

Opener = Callable[[str, str, float], "tuple[int, bytes]"]
SlotCallback = Callable[[str, str], None]


def _urllib_opener(url: str, proxy: str, timeout: float) -> tuple[int, bytes]:
    """Fetch url, returning the HTTP status and at most one byte over the limit."""
    handlers = []
    if proxy:
        handlers.append(urllib.request.ProxyHandler({"http": proxy, "https": proxy}))
    else:
        handlers.append(urllib.request.ProxyHandler({}))
    opener = urllib.request.build_opener(*handlers)
    try:
        with opener.open(url, timeout=timeout) as response:
            return response.status, response.read(MAX_BUFFER_SIZE + 1)
    except urllib.error.HTTPError as exc:
        with exc:
            return exc.code, exc.read(MAX_BUFFER_SIZE + 1)


class RequestSlot:
    """One reusable request: its target, its callback and the response."""

    def __init__(self) -> None:
        self.busy = False
        self.url = ""
        self.proxy = ""
        self.pinyin = ""
        self.callback: Optional[SlotCallback] = None
        self.data = bytearray()
        self.http_code = 0

    def write(self, data: bytes) -> int:
        """Append response bytes; return how many were taken.

        Data that would grow the buffer past the limit is refused whole.
        """
        if len(self.data) + len(data) > MAX_BUFFER_SIZE:
            return 0
        self.data.extend(data)
        return len(data)

    def finish(self, http_code: int) -> None:
        self.http_code = http_code

    def release(self) -> None:
        """Make the slot free for reuse."""
        self.busy = False
        self.url = ""
        self.proxy = ""
        self.pinyin = ""
        self.callback = None
        self.data.clear()
        self.http_code = 0


class FetchThread:
    """Runs requests off the calling thread and queues the finished ones.

    ``on_finished`` is called from a worker thread each time a request ends;
    the finished slots are then taken with :meth:`pop_finished`.
    """

    def __init__(
        self,
        on_finished: Callable[[], None],
        opener: Optional[Opener] = None,
        max_handles: int = MAX_HANDLE,
    ) -> None:
        if max_handles < 1:
            raise ValueError("max_handles must be at least 1")
        self._on_finished = on_finished
        self._opener = opener or _urllib_opener
        self._slots = [RequestSlot() for _ in range(max_handles)]
        self._finished: deque[RequestSlot] = deque()
        self._lock = threading.Lock()
        self._closed = False
        self._executor = ThreadPoolExecutor(
            max_workers=min(max_handles, 8), thread_name_prefix="fetch")

    def add_request(self, setup: Callable[[RequestSlot], None]) -> bool:
        """Claim a free slot, let setup fill it and start it.

        Returns False when every slot is busy or the fetcher is closed.
        """
        if self._closed:
            return False
        slot = next((s for s in self._slots if not s.busy), None)
        if slot is None:
            return False
        setup(slot)
        slot.busy = True
        self._executor.submit(self._perform, slot)
        return True

    def _perform(self, slot: RequestSlot) -> None:
        try:
            status, body = self._opener(slot.url, slot.proxy, REQUEST_TIMEOUT)
        except Exception:
            status, body = 0, b""
        slot.write(body)
        slot.finish(status)
        with self._lock:
            self._finished.append(slot)
        self._on_finished()

    def pop_finished(self) -> Optional[RequestSlot]:
        """Return the oldest finished slot, or None."""
        with self._lock:
            return self._finished.popleft() if self._finished else None

    def close(self) -> None:
        """Stop the workers and free every slot."""
        self._closed = True
        self._executor.shutdown(wait=True, cancel_futures=True)
        with self._lock:
            self._finished.clear()
        for slot in self._slots:
            slot.release()

    def __enter__(self) -> "FetchThread":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()