"""HTTP client for the remote key/message directory.

The directory stores one public key document and one message document per email address:

    PUT/GET {server}/Key/{email}
    PUT/GET {server}/Message/{email}
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging
import os
from urllib.parse import quote

import requests

from rsamessenger.errors import DirectoryError

logger = logging.getLogger(__name__)

DEFAULT_SERVER = os.environ.get("RSAMESSENGER_SERVER", "http://localhost:5000")


class DirectoryClient:
    """Thin wrapper around a `requests.Session` speaking to the directory.

    Attributes:
        server: Base URL of the directory.
        timeout: Seconds to wait for each request.
        session: The underlying HTTP session.
    """

    def __init__(self,
                 server: str = DEFAULT_SERVER,
                 timeout: float = 10.0,
                 session: requests.Session | None = None) -> None:
        self.server = server.rstrip("/")
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()

    def _url(self, kind: str, email: str) -> str:
        return f"{self.server}/{kind}/{quote(email, safe='@')}"

    def _request(self, method: str, kind: str, email: str, document: dict | None = None) -> requests.Response:
        url = self._url(kind, email)
        try:
            response = self.session.request(method, url, json=document, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise DirectoryError(f"{method} {url} failed: {exc}") from exc
        logger.debug("%s %s -> %s", method, url, response.status_code)
        return response

    def _get_document(self, kind: str, email: str) -> dict:
        response = self._request("GET", kind, email)
        try:
            document = response.json()
        except ValueError as exc:
            raise DirectoryError(f"Directory returned invalid JSON for {kind} {email}.") from exc
        if not isinstance(document, dict):
            raise DirectoryError(f"Directory returned no {kind} document for {email}.")
        return document

    def put_key(self, email: str, document: dict) -> None:
        self._request("PUT", "Key", email, document)

    def get_key(self, email: str) -> dict:
        return self._get_document("Key", email)

    def put_message(self, email: str, document: dict) -> None:
        self._request("PUT", "Message", email, document)

    def get_message(self, email: str) -> dict:
        return self._get_document("Message", email)
