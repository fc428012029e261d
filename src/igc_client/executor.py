"""
Request executor.

Sends one logical request against IGC. A client-error response (4xx) is
taken to mean the session has expired: the session is invalidated and the
*identical* request is re-sent once with a forced login. If that forced
attempt fails as well the failure is terminal, so a misconfigured endpoint
can never cause a re-authentication loop.

Create and update requests are not idempotent; they are only ever re-sent
through this single bounded retry.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from igc_client.errors import AuthenticationError, TransportError
from igc_client.session import SessionStore

logger = logging.getLogger(__name__)


def _is_client_error(status: int) -> bool:
    return 400 <= status < 500


class RequestExecutor:
    def __init__(self, session: SessionStore, http: Any = None, timeout: Optional[float] = None) -> None:
        self.session = session
        # Anything exposing requests' request(method, url, **kwargs)
        self.http = http if http is not None else requests
        self.timeout = timeout

    def execute(
        self,
        url: str,
        method: str,
        content_type: Optional[str] = None,
        payload: Optional[str] = None,
        force_login: bool = False,
    ) -> requests.Response:
        if payload is not None:
            logger.debug("%s to %s with: %s", method, url, payload)
            body: Dict[str, Any] = {"data": payload.encode("utf-8")}
            extra_headers = {"Content-Type": content_type} if content_type else {}
        else:
            logger.debug("%s to %s", method, url)
            body = {}
            extra_headers = {}
        return self._exchange(method, url, body, extra_headers, force_login, describe=payload)

    def upload(
        self,
        url: str,
        method: str,
        file_name: str,
        content: bytes,
        force_login: bool = False,
    ) -> requests.Response:
        # requests sets the multipart Content-Type (with boundary) itself
        body = {"files": {"file": (file_name, content)}}
        logger.debug("Uploading %s via %s to %s", file_name, method, url)
        return self._exchange(method, url, body, {}, force_login, describe=file_name)

    def _exchange(
        self,
        method: str,
        url: str,
        body: Dict[str, Any],
        extra_headers: Dict[str, str],
        force_login: bool,
        describe: Optional[str] = None,
    ) -> requests.Response:
        headers = self.session.headers_for(force_login)
        headers.update(extra_headers)
        try:
            response = self.http.request(method, url, headers=headers, timeout=self.timeout, **body)
        except requests.RequestException as e:
            logger.error("Request failed -- check IGC environment connectivity and authentication details: %s", e)
            raise TransportError(f"{method} {url} failed: {e}", method=method, url=url) from e

        status = response.status_code
        if _is_client_error(status):
            if force_login:
                logger.error(
                    "Opening a new session already attempted without success -- giving up on %s to %s with %s",
                    method,
                    url,
                    describe,
                )
                raise AuthenticationError(
                    f"{method} {url} rejected with status {status} after opening a new session",
                    method=method,
                    url=url,
                    status_code=status,
                )
            logger.warning("Request failed with status %s -- session may have expired, retrying...", status)
            self.session.invalidate()
            return self._exchange(method, url, body, extra_headers, True, describe=describe)

        if status >= 500:
            logger.error("Request failed with status %s -- check IGC environment connectivity and authentication details.", status)
            raise TransportError(f"{method} {url} failed with status {status}", method=method, url=url, status_code=status)

        self.session.record_tokens(response)
        return response
