"""Cloud pinyin: ask web services for the best sentence for a pinyin string."""

from __future__ import annotations

import enum
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import quote

from .fetch import FetchThread, RequestSlot
from .lrucache import LRUCache

logger = logging.getLogger(__name__)

MAX_ERROR = 10
RESET_ERROR_SECONDS = 5 * 60
CACHE_SIZE = 2048

GOOGLE_URL = "https://www.google.com/inputtools/request?ime=pinyin&text="
GOOGLE_CN_URL = "https://www.google.cn/inputtools/request?ime=pinyin&text="
BAIDU_URL = "https://olime.baidu.com/py?rn=0&pn=1&ol=1&py="

Callback = Callable[[str, str], None]


class CloudPinyinBackend(enum.Enum):
    GOOGLE = "Google"
    GOOGLE_CN = "GoogleCN"
    BAIDU = "Baidu"


@dataclass
class CloudPinyinConfig:
    toggle_key: str = "Control+Alt+Shift+C"
    minimum_length: int = 4
    backend: CloudPinyinBackend = CloudPinyinBackend.GOOGLE_CN
    proxy: str = ""


def _between(data: bytes, start_marker: bytes, end_marker: bytes) -> str:
    start = data.find(start_marker)
    if start < 0:
        return ""
    start += len(start_marker)
    end = data.find(end_marker, start)
    if end <= start:
        return ""
    return data[start:end].decode("utf-8", errors="replace")


class _Backend(ABC):
    @abstractmethod
    def request_url(self, pinyin: str) -> str:
        ...

    @abstractmethod
    def parse_result(self, data: bytes) -> str:
        ...


class GoogleBackend(_Backend):
    def __init__(self, url: str) -> None:
        self.url = url

    def request_url(self, pinyin: str) -> str:
        return self.url + quote(pinyin, safe="")

    def parse_result(self, data: bytes) -> str:
        return _between(bytes(data), b'",["', b'"')


class BaiduBackend(_Backend):
    def request_url(self, pinyin: str) -> str:
        return BAIDU_URL + quote(pinyin, safe="")

    def parse_result(self, data: bytes) -> str:
        return _between(bytes(data), b'[["', b'",')


class CloudPinyin:
    """Caches cloud results and stops asking after repeated failures.

    Callbacks run in :meth:`process_finished`. Without an explicit fetcher,
    one is created that calls it from its worker thread.
    """

    def __init__(
        self,
        config: Optional[CloudPinyinConfig] = None,
        fetcher: Optional[FetchThread] = None,
    ) -> None:
        self.config = config or CloudPinyinConfig()
        self.backends: dict[CloudPinyinBackend, _Backend] = {
            CloudPinyinBackend.GOOGLE: GoogleBackend(GOOGLE_URL),
            CloudPinyinBackend.GOOGLE_CN: GoogleBackend(GOOGLE_CN_URL),
            CloudPinyinBackend.BAIDU: BaiduBackend(),
        }
        self._cache: LRUCache[str, str] = LRUCache(CACHE_SIZE)
        self._error_count = 0
        self._reset_timer: Optional[threading.Timer] = None
        self._lock = threading.RLock()
        self._fetcher = fetcher or FetchThread(self.process_finished)

    @property
    def error_count(self) -> int:
        return self._error_count

    def request(self, pinyin: str, callback: Callback) -> None:
        """Look pinyin up; callback gets (pinyin, hanzi), hanzi empty on failure."""
        if len(pinyin.encode("utf-8")) < self.config.minimum_length:
            callback(pinyin, "")
            return
        with self._lock:
            cached = self._cache.find(pinyin)
            error_count = self._error_count
        if cached is not None:
            callback(pinyin, cached)
            return
        backend = self.backends.get(self.config.backend)
        if backend is None or error_count >= MAX_ERROR:
            callback(pinyin, "")
            return

        url = backend.request_url(pinyin)
        proxy = self.config.proxy

        def setup(slot: RequestSlot) -> None:
            slot.url = url
            slot.proxy = proxy
            slot.pinyin = pinyin
            slot.callback = callback

        if not self._fetcher.add_request(setup):
            callback(pinyin, "")

    def process_finished(self) -> None:
        """Deliver the results of every finished request."""
        backend = self.backends.get(self.config.backend)
        with self._lock:
            while (slot := self._fetcher.pop_finished()) is not None:
                if slot.http_code != 200:
                    self._error_count += 1
                    if self._error_count == MAX_ERROR:
                        logger.error("Cloud pinyin reaches max error. Retry in 5 minutes.")
                        self._start_reset_timer()
                hanzi = backend.parse_result(slot.data) if backend else ""
                if slot.callback is not None:
                    slot.callback(slot.pinyin, hanzi)
                if hanzi:
                    self._cache.insert(slot.pinyin, hanzi)
                slot.release()

    def _start_reset_timer(self) -> None:
        self._cancel_timer()
        timer = threading.Timer(RESET_ERROR_SECONDS, self.reset_error)
        timer.daemon = True
        self._reset_timer = timer
        timer.start()

    def _cancel_timer(self) -> None:
        if self._reset_timer is not None:
            self._reset_timer.cancel()
            self._reset_timer = None

    def reset_error(self) -> None:
        with self._lock:
            self._error_count = 0
            self._cancel_timer()

    def close(self) -> None:
        self._cancel_timer()
        self._fetcher.close()

    def __enter__(self) -> "CloudPinyin":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()