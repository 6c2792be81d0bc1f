# podpicker/transcripts/http.py
"""
HTTP fetch abstraction shared by every strategy.

Single responsibility: send one request with a browser-like signature, the
configured proxy and timeout, and translate transport or status problems into
ExtractionError. Callers may pass a threading.Event to abandon in-flight
downloads.
"""

from __future__ import annotations

import json
import threading
import time
from typing import Any, Dict, Mapping, Optional, Tuple

import requests

from podpicker.transcripts.config import PipelineConfig
from podpicker.transcripts.errors import ExtractionCancelled, ExtractionError
from podpicker.transcripts.schema import FailureKind


CHUNK_SIZE = 64 * 1024

BROWSER_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Referer": "https://www.youtube.com/",
}

_STATUS_KINDS = {
    403: FailureKind.RATE_LIMITED,
    404: FailureKind.NOT_FOUND,
    410: FailureKind.NOT_FOUND,
    429: FailureKind.RATE_LIMITED,
}


class HttpClient:
    """
    Thin wrapper over requests.Session.

    Usage:
        client = HttpClient(PipelineConfig())
        html = client.get_text("https://www.youtube.com/watch", params={"v": video_id})
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        cancel_event: Optional[threading.Event] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config or PipelineConfig()
        self.cancel_event = cancel_event
        self.session = session or requests.Session()
        self._parent_cancel_events: Tuple[threading.Event, ...] = ()

    def fork(self, cancel_event: Optional[threading.Event] = None) -> "HttpClient":
        """
        Return a client with the same config and its own session.

        requests.Session is not thread-safe, so work running on another
        thread gets a fork. The fork is cancelled by its own cancel_event or
        by any event this client honours.
        """
        child = HttpClient(self.config, cancel_event=cancel_event)
        child._parent_cancel_events = self._cancel_events()
        return child

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def get_text(
        self,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> str:
        return self._request("GET", url, params=params, headers=headers)

    def get_json(
        self,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        body = self._request("GET", url, params=params, headers=headers)
        return _decode_json(body, url)

    def post_json(
        self,
        url: str,
        payload: Any,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        merged = {"Content-Type": "application/json", "Accept": "application/json"}
        merged.update(headers or {})
        body = self._request("POST", url, data=json.dumps(payload), headers=merged)
        return _decode_json(body, url)

    def raise_if_cancelled(self) -> None:
        if any(event.is_set() for event in self._cancel_events()):
            raise ExtractionCancelled("Request abandoned by caller")

    def _cancel_events(self) -> Tuple[threading.Event, ...]:
        own = (self.cancel_event,) if self.cancel_event is not None else ()
        return own + self._parent_cancel_events

    def _headers(self, extra: Optional[Mapping[str, str]]) -> Dict[str, str]:
        headers = {"User-Agent": self.config.user_agent, **BROWSER_HEADERS}
        headers.update(extra or {})
        return headers

    def _request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        data: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> str:
        self.raise_if_cancelled()
        # requests applies timeout per socket read; this bounds the whole download
        deadline = time.monotonic() + self.config.timeout_seconds
        proxies = self.config.proxy.as_requests_proxies() if self.config.proxy else None

        try:
            with self.session.request(
                method,
                url,
                params=params,
                data=data,
                headers=self._headers(headers),
                proxies=proxies,
                timeout=self.config.timeout_seconds,
                stream=True,
            ) as response:
                kind = _status_kind(response.status_code)
                if kind is not None:
                    raise ExtractionError(kind, f"{method} {_strip_query(url)} returned HTTP {response.status_code}")

                chunks = []
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    self.raise_if_cancelled()
                    if time.monotonic() > deadline:
                        raise ExtractionError(
                            FailureKind.NETWORK_ERROR,
                            f"{method} {_strip_query(url)} took longer than {self.config.timeout_seconds}s",
                        )
                    if chunk:
                        chunks.append(chunk)
                encoding = _declared_encoding(response)
        except requests.Timeout as exc:
            raise ExtractionError(
                FailureKind.NETWORK_ERROR,
                f"{method} {_strip_query(url)} timed out after {self.config.timeout_seconds}s",
            ) from exc
        except requests.RequestException as exc:
            raise ExtractionError(
                FailureKind.NETWORK_ERROR,
                f"{method} {_strip_query(url)} failed: {type(exc).__name__}",
            ) from exc

        try:
            return b"".join(chunks).decode(encoding, errors="replace")
        except LookupError:
            return b"".join(chunks).decode("utf-8", errors="replace")


def _status_kind(status_code: int) -> Optional[FailureKind]:
    if status_code < 400:
        return None
    return _STATUS_KINDS.get(status_code, FailureKind.NETWORK_ERROR)


def _declared_encoding(response: requests.Response) -> str:
    # requests assumes ISO-8859-1 for text/* without a charset; YouTube payloads are UTF-8
    content_type = (response.headers.get("Content-Type") or "").lower()
    if "charset=" in content_type and response.encoding:
        return response.encoding
    return "utf-8"


def _strip_query(url: str) -> str:
    # Query strings may carry API keys or signed caption parameters
    return url.split("?", 1)[0]


def _decode_json(body: str, url: str) -> Any:
    try:
        return json.loads(body)
    except json.JSONDecodeError as exc:
        raise ExtractionError(
            FailureKind.PARSE_ERROR,
            f"Response from {_strip_query(url)} is not valid JSON: {exc.msg}",
        ) from exc
