"""
Session store: the basic-auth credential and the session cookies issued by IGC.

The credential never changes for the life of a client. Cookies are replaced
wholesale by every successful response that carries them, and are only
cleared by ``invalidate()`` (which forces the next request to log in again).
"""

from __future__ import annotations

import base64
import logging
import threading
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

SUCCESS_STATUSES = (200, 201)


def encode_basic_auth(user: str, password: str) -> str:
    return base64.b64encode(f"{user}:{password}".encode("utf-8")).decode("ascii")


class SessionStore:
    def __init__(self, credential: str) -> None:
        self._credential = credential
        self._tokens: List[str] = []
        self._lock = threading.Lock()

    @property
    def credential(self) -> str:
        return self._credential

    @property
    def tokens(self) -> List[str]:
        with self._lock:
            return list(self._tokens)

    @property
    def has_session(self) -> bool:
        with self._lock:
            return bool(self._tokens)

    def headers_for(self, force_login: bool = False) -> Dict[str, str]:
        """
        Headers for the next request: reuse the session cookies unless a login is
        being forced (or there is no session yet), in which case send basic auth.
        """
        headers = {"Cache-Control": "no-cache"}
        with self._lock:
            tokens = list(self._tokens)
        if tokens and not force_login:
            headers["Cookie"] = "; ".join(tokens)
        else:
            headers["Authorization"] = f"Basic {self._credential}"
        return headers

    def record_tokens(self, response: Any) -> None:
        status = getattr(response, "status_code", None)
        if status not in SUCCESS_STATUSES:
            if isinstance(status, int) and status < 400:
                logger.debug("Session tokens left unchanged for status %s", status)
            else:
                logger.error("Unable to make request or unexpected status: %s", status)
            return
        cookies = getattr(response, "cookies", None)
        if not cookies:
            return
        tokens = [f"{name}={value}" for name, value in cookies.items()]
        if tokens:
            with self._lock:
                self._tokens = tokens

    def invalidate(self) -> None:
        with self._lock:
            self._tokens = []
