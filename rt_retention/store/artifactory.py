"""Artifactory REST client implementing the artifact store interface."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Sequence
from urllib.parse import quote

import httpx
from pydantic import ValidationError
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..core.errors import ConfigurationError, StoreCommunicationError
from ..core.models import DeleteDescriptor, ResultItem
from ..settings import Settings
from .aql import build_query

logger = logging.getLogger(__name__)

SEARCH_ENDPOINT = "api/search/aql"
_RETRYABLE_STATUS = {429, 500, 502, 503, 504}


class TransientStoreError(StoreCommunicationError):
    """Raised for failures worth retrying (transport errors, 429, 5xx)."""


def _describe_response(response: httpx.Response) -> str:
    body = response.text.strip()
    if len(body) > 200:
        body = body[:200] + "..."
    return f"HTTP {response.status_code} from {response.request.method} {response.request.url}: {body}"


class ArtifactoryClient:
    """Searches with AQL and deletes items over the Artifactory REST API."""

    def __init__(
        self,
        base_url: str,
        *,
        access_token: str | None = None,
        user: str | None = None,
        password: str | None = None,
        timeout: float = 60.0,
        retries: int = 3,
        retry_wait: float = 5.0,
        verify_ssl: bool = True,
    ) -> None:
        headers = {"Accept": "application/json"}
        auth: tuple[str, str] | None = None
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        elif user:
            auth = (user, password or "")

        # Trailing slash so relative request paths append to any context path.
        self.base_url = base_url.rstrip("/") + "/"
        self._client = httpx.Client(
            base_url=self.base_url,
            headers=headers,
            auth=auth,
            timeout=timeout,
            verify=verify_ssl,
        )
        self._retrying = Retrying(
            reraise=True,
            retry=retry_if_exception_type(TransientStoreError),
            stop=stop_after_attempt(retries + 1),
            wait=wait_exponential(multiplier=retry_wait, max=retry_wait * 8),
            before_sleep=before_sleep_log(logger, logging.WARNING),
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> ArtifactoryClient:
        if not settings.url:
            raise ConfigurationError(
                "No Artifactory URL configured; set RT_RETENTION_URL (and credentials)."
            )
        return cls(
            settings.url,
            access_token=(
                settings.access_token.get_secret_value() if settings.access_token else None
            ),
            user=settings.user,
            password=settings.password.get_secret_value() if settings.password else None,
            timeout=settings.timeout,
            retries=settings.retries,
            retry_wait=settings.retry_wait,
            verify_ssl=settings.verify_ssl,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> ArtifactoryClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _send(self, request: httpx.Request, *, stream: bool = False) -> httpx.Response:
        try:
            response = self._client.send(request, stream=stream)
        except httpx.TransportError as exc:
            raise TransientStoreError(
                f"{request.method} {request.url} failed: {exc!r}"
            ) from exc

        if response.is_success or (request.method == "DELETE" and response.status_code == 404):
            return response

        if stream:
            response.read()
            response.close()
        message = _describe_response(response)
        if response.status_code in _RETRYABLE_STATUS:
            raise TransientStoreError(message)
        raise StoreCommunicationError(message)

    def _iter_results(self, response: httpx.Response) -> Iterator[ResultItem]:
        try:
            response.read()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise StoreCommunicationError(f"Unreadable AQL response: {exc}") from exc
        if not isinstance(data, dict) or not isinstance(data.get("results", []), list):
            raise StoreCommunicationError(f"Unexpected AQL response shape: {data!r:.200}")

        for raw in data.get("results", []):
            try:
                yield ResultItem.model_validate(raw)
            except ValidationError as exc:
                raise StoreCommunicationError(f"Unexpected AQL result {raw!r}: {exc}") from exc

    @contextmanager
    def search(self, descriptor: DeleteDescriptor) -> Iterator[Iterator[ResultItem]]:
        """Run an AQL search and yield its items lazily.

        Args:
            descriptor: Clause to translate into AQL

        Yields:
            Iterator over matched items
        """
        query = build_query(descriptor)
        logger.debug(f"AQL: {query}")
        request = self._client.build_request(
            "POST", SEARCH_ENDPOINT, content=query, headers={"Content-Type": "text/plain"}
        )
        response = self._retrying(self._send, request, stream=True)
        try:
            yield self._iter_results(response)
        finally:
            response.close()

    def _delete_item(self, item: ResultItem) -> bool:
        request = self._client.build_request(
            "DELETE", f"{quote(item.repo)}/{quote(item.relative_path)}"
        )
        response = self._retrying(self._send, request)
        if response.status_code == 404:
            logger.debug(f"Already gone: {item.repo}/{item.relative_path}")
            return False
        logger.debug(f"Deleted: {item.repo}/{item.relative_path}")
        return True

    def delete(self, items: Sequence[ResultItem]) -> int:
        """Delete every item, continuing past individual failures.

        Args:
            items: Items returned by a search

        Returns:
            Number of items removed (items already gone are not counted)
        """
        deleted = 0
        errors: list[str] = []
        for item in items:
            try:
                if self._delete_item(item):
                    deleted += 1
            except StoreCommunicationError as exc:
                errors.append(str(exc))

        if errors:
            raise StoreCommunicationError(
                f"Deleted {deleted} of {len(items)} item(s); {len(errors)} failed: {errors[0]}"
            )
        return deleted
