"""Upload the level being edited to the API so the game can load it for testing."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from config import TEST_LEVEL_ID, TEST_LEVEL_NAME
from engine.export import build_level_export
from models.editor import EditorState
from models.level import Difficulty

logger = logging.getLogger(__name__)


class TestLevelUploadError(Exception):
    """Raised when the API rejects or fails to receive a test level."""
    __test__ = False

    def __init__(self, message: str, details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class UploadInProgressError(RuntimeError):
    """Raised when an upload is requested while another is still running."""


class TestLevelClient:
    """Posts test levels to ``/api/test-level`` and reports where to play them.

    ``busy`` is True only while an upload is in flight; it is cleared whether
    the upload succeeds or fails.
    """
    __test__ = False

    def __init__(
        self,
        api_url: str,
        game_url: str,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.game_url = game_url
        self._client = client
        self.busy = False

    @property
    def endpoint(self) -> str:
        return f"{self.api_url}/api/test-level"

    async def upload(self, state: EditorState) -> str:
        """Export ``state`` with the fixed test id and upload it.

        Returns:
            The game URL that opens the uploaded level.

        Raises:
            UploadInProgressError: If called while a previous upload runs.
            TestLevelUploadError: If the request fails or is rejected.
        """
        if self.busy:
            raise UploadInProgressError("A test level upload is already in progress")

        payload = build_level_export(
            state,
            level_id=TEST_LEVEL_ID,
            name=state.name or TEST_LEVEL_NAME,
            difficulty=Difficulty.MEDIUM,
        ).to_wire()

        self.busy = True
        client = self._client or httpx.AsyncClient(timeout=10.0)
        try:
            try:
                resp = await client.post(self.endpoint, json=payload)
            except httpx.HTTPError as e:
                raise TestLevelUploadError(f"Could not reach {self.endpoint}: {e}") from e
        finally:
            if self._client is None:
                await client.aclose()
            self.busy = False

        if not resp.is_success:
            try:
                body = resp.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            error = body.get("error", f"{resp.status_code} {resp.reason_phrase}")
            logger.warning("Test level upload rejected: %s", error)
            raise TestLevelUploadError(error, body.get("details"))

        return f"{self.game_url}?test=true"
