"""keyscore REST API client."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import requests

from cliscore.models import (
    CountRequest,
    CreditsResponse,
    DetailedCountResponse,
    PaginationParams,
    Payload,
    SearchRequest,
    SearchResponse,
    parse_machine_info,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.keysco.re"
USER_AGENT = "cliscore/1.0"


class KeyscoreError(Exception):
    """Raised for keyscore API errors."""


class AuthenticationError(KeyscoreError):
    """Raised when the API rejects the API key."""


class KeyscoreClient:
    """Client for the keyscore search API. One request per call, no retries."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        api_key: str | None = None,
        timeout: float = 30,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers["Content-Type"] = "application/json"
        self.session.headers["User-Agent"] = USER_AGENT
        if api_key:
            self.session.headers["Authorization"] = f"Bearer {api_key}"

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict | None = None,
        headers: dict | None = None,
        stream: bool = False,
    ) -> requests.Response:
        url = f"{self.base_url}{path}"
        logger.debug("%s %s params=%s", method, url, params)
        try:
            resp = self.session.request(
                method,
                url,
                json=json,
                params=params,
                headers=headers,
                timeout=self.timeout,
                stream=stream,
            )
        except requests.RequestException as exc:
            raise KeyscoreError(f"error making request: {exc}") from exc

        logger.debug("%s %s -> %d", method, url, resp.status_code)
        if resp.status_code >= 400:
            message = f"HTTP {resp.status_code}: {resp.text}"
            if resp.status_code == 401:
                raise AuthenticationError(message)
            raise KeyscoreError(message)
        return resp

    def _api_json(self, method: str, path: str, **kwargs: Any) -> Any:
        resp = self._request(method, path, **kwargs)
        try:
            return resp.json()
        except ValueError as exc:
            raise KeyscoreError(f"error parsing response: {exc}") from exc

    def search(
        self,
        request: SearchRequest,
        pagination: PaginationParams | None = None,
    ) -> SearchResponse:
        body = request.to_json()
        if pagination is not None:
            body.update(pagination.to_json())
        data = self._api_json("POST", "/search", json=body)
        return SearchResponse.from_json(data or {})

    def count(self, request: CountRequest) -> DetailedCountResponse:
        data = self._api_json("POST", "/count/detailed", json=request.to_json())
        return DetailedCountResponse.from_json(data or {})

    def validate_api_key(self, api_key: str) -> None:
        """Check *api_key* against the API. Returns None when it is valid."""
        url = f"{self.base_url}/validate"
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else None
        try:
            resp = self.session.post(
                url,
                json={"apiKey": api_key},
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise KeyscoreError(f"error making request: {exc}") from exc

        if resp.status_code == 200:
            return
        if resp.status_code == 401:
            raise AuthenticationError("invalid API key")
        if resp.status_code == 400:
            raise KeyscoreError(f"invalid request: {resp.text}")
        raise KeyscoreError(f"HTTP {resp.status_code}: {resp.text}")

    def get_machine_info(self, uuid: str) -> Payload:
        data = self._api_json("GET", "/machineinfo", params={"uuid": uuid}) or {}
        if data.get("error"):
            raise KeyscoreError(str(data["error"]))
        return parse_machine_info(data.get("data"))

    def download_file(
        self,
        uuid: str,
        file_path: str | None = None,
        output_path: str | Path | None = None,
    ) -> Path:
        """Download a log archive, or a single file from it, to disk.

        Without *output_path* the file lands in the working directory, named
        after *file_path* or ``<uuid>.zip``.
        """
        params = {"uuid": uuid}
        if file_path:
            params["file"] = file_path

        if output_path:
            target = Path(output_path)
        elif file_path:
            target = Path(Path(file_path).name)
        else:
            target = Path(f"{uuid}.zip")

        with self._request("GET", "/download", params=params, stream=True) as resp:
            try:
                with open(target, "wb") as fh:
                    for chunk in resp.iter_content(chunk_size=64 * 1024):
                        fh.write(chunk)
            except OSError as exc:
                raise KeyscoreError(f"error writing file: {exc}") from exc
        logger.info("Downloaded %s", target)
        return target

    def get_credits(self, api_key: str) -> CreditsResponse:
        # The key travels in the body; this endpoint takes no bearer header.
        data = self._api_json(
            "POST",
            "/credits",
            json={"apiKey": api_key},
            headers={"Authorization": None},
        )
        return CreditsResponse.from_json(data or {})
