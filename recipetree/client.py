"""HTTP client for the external recipe search backend."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from recipetree.constants import DEFAULT_BACKEND_TIMEOUT, DEFAULT_BACKEND_URL, SEARCH_MODES
from recipetree.exceptions import SearchBackendError, StepFormatError
from recipetree.steps import SearchResult, parse_search_response

logger = logging.getLogger(__name__)


class SearchBackendClient:
    """
    Thin wrapper around ``GET /search`` of the search backend.

    Not-found answers come back either as ``404`` or as ``200`` with
    ``{"found": false}`` depending on the deployment; both decode to a
    ``SearchResult`` with ``found=False``. Every other failure raises
    ``SearchBackendError``.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BACKEND_URL,
        timeout: float = DEFAULT_BACKEND_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def search(
        self, target: str, mode: str = "bfs", max_recipes: Optional[int] = None
    ) -> SearchResult:
        target = (target or "").strip()
        if not target:
            raise ValueError("Target element is required")
        mode = (mode or "bfs").strip().lower()
        if mode not in SEARCH_MODES:
            raise ValueError(
                f"Unknown search mode '{mode}'. Expected one of: {', '.join(SEARCH_MODES)}"
            )

        params: Dict[str, Any] = {"element": target, "mode": mode}
        if max_recipes is not None:
            if max_recipes < 1:
                raise ValueError("max_recipes must be a positive integer")
            params["maxRecipes"] = int(max_recipes)

        url = f"{self.base_url}/search"
        logger.info(f"Searching '{target}' with mode={mode} at {url}")
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise SearchBackendError(f"Search backend unreachable: {e}") from e

        if response.status_code == 404:
            payload = self._json_or_none(response)
            logger.info(f"'{target}' not found (404)")
            if isinstance(payload, dict):
                payload = {**payload, "found": False}
            else:
                payload = {"found": False}
            return parse_search_response(payload)

        if not response.ok:
            raise SearchBackendError(
                f"HTTP error! status: {response.status_code}",
                status_code=response.status_code,
            )

        payload = self._json_or_none(response)
        if not isinstance(payload, dict):
            raise SearchBackendError(
                "Search backend returned malformed JSON",
                status_code=response.status_code,
            )
        try:
            result = parse_search_response(payload)
        except StepFormatError as e:
            raise SearchBackendError(
                f"Search backend returned an invalid recipe: {e}",
                status_code=response.status_code,
            ) from e

        logger.info(
            f"Search for '{target}' finished: found={result.found}, "
            f"{len(result.paths)} path(s), visited {result.steps_visited} nodes"
        )
        return result

    @staticmethod
    def _json_or_none(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return None
