"""IndexTank API client — Synchronous HTTP transport for the hosted search service.

Speaks the IndexTank v1 REST API using ``httpx``. The private API URL
carries the credentials as userinfo::

    api = ApiClient("http://:secret@abcd.api.indextank.com")
    index = api.get_index("people")
    if not index.exists():
        index.create_index()
    index.add_document("Person 1", {"name": "Ada", "__type": "Person", "__id": 1})
    index.search("__any:(ada) __type:(Person)", {"start": 0, "len": 10})
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, cast

import httpx

from searchtank.core.exceptions import IndexNotFoundError, IndexServiceError, ServiceConnectionError

if TYPE_CHECKING:
    from searchtank.config.settings import ServiceSettings

logger = logging.getLogger(__name__)


def _raise_for_status(resp: httpx.Response, what: str) -> None:
    if resp.status_code == 404:
        raise IndexNotFoundError(f"{what}: not found ({resp.text.strip() or 'no body'})")
    if resp.is_error:
        raise IndexServiceError(f"{what} failed with HTTP {resp.status_code}: {resp.text.strip()}")


def _stringify_keys(mapping: dict[Any, Any]) -> dict[str, Any]:
    return {str(k): v for k, v in mapping.items()}


class IndexClient:
    """Operations on one named index.

    Args:
        http: Shared ``httpx.Client`` rooted at the API URL.
        name: Index name.
    """

    def __init__(self, http: httpx.Client, name: str) -> None:
        self._http = http
        self.name = name
        self._path = f"/v1/indexes/{name}"

    def _request(self, method: str, path: str, what: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = self._http.request(method, self._path + path, **kwargs)
        except httpx.HTTPError as e:
            raise ServiceConnectionError(f"{what} on index '{self.name}' failed: {e}") from e
        _raise_for_status(resp, f"{what} on index '{self.name}'")
        return resp

    # ── Lifecycle ────────────────────────────────────────────────────────

    def metadata(self) -> dict[str, Any]:
        resp = self._request("GET", "", "Metadata")
        return cast(dict[str, Any], resp.json())

    def exists(self) -> bool:
        try:
            self.metadata()
        except IndexNotFoundError:
            return False
        return True

    def running(self) -> bool:
        """Whether the index has started and accepts requests."""
        return bool(self.metadata().get("started", False))

    def create_index(self) -> None:
        resp = self._request("PUT", "", "Create")
        if resp.status_code == 204:
            logger.info("Index %s already existed", self.name)

    def delete_index(self) -> None:
        self._request("DELETE", "", "Delete")

    # ── Documents ────────────────────────────────────────────────────────

    def add_document(
        self,
        docid: str,
        fields: dict[str, Any],
        variables: dict[int, float] | None = None,
        categories: dict[str, str] | None = None,
    ) -> None:
        payload: dict[str, Any] = {"docid": docid, "fields": fields}
        if variables is not None:
            payload["variables"] = _stringify_keys(variables)
        if categories is not None:
            payload["categories"] = categories
        self._request("PUT", "/docs", "Add document", json=payload)

    def add_documents(self, documents: list[dict[str, Any]]) -> None:
        payload = []
        for doc in documents:
            entry = dict(doc)
            if "variables" in entry:
                entry["variables"] = _stringify_keys(entry["variables"])
            payload.append(entry)
        self._request("PUT", "/docs", "Add documents", json=payload)

    def delete_document(self, docid: str) -> None:
        self._request("DELETE", "/docs", "Delete document", params={"docid": docid})

    def add_function(self, number: int, definition: str) -> None:
        self._request("PUT", f"/functions/{number}", "Define function", json={"definition": definition})

    # ── Search ───────────────────────────────────────────────────────────

    def search(self, query: str, options: dict[str, Any] | None = None) -> dict[str, Any]:
        params: dict[str, Any] = {"q": query}
        params.update(options or {})
        resp = self._request("GET", "/search", "Search", params=params)
        return cast(dict[str, Any], resp.json())


class ApiClient:
    """Entry point to the hosted search service.

    Args:
        url: Private API URL, optionally with ``user:password@`` userinfo.
        timeout: Request timeout in seconds.
        **httpx_kwargs: Additional keyword arguments passed to ``httpx.Client``.
    """

    def __init__(self, url: str, *, timeout: float = 30.0, **httpx_kwargs: Any) -> None:
        parsed = httpx.URL(url)
        auth = None
        if parsed.username or parsed.password:
            auth = httpx.BasicAuth(parsed.username, parsed.password)
            parsed = parsed.copy_with(username=None, password=None)

        self.base_url = str(parsed).rstrip("/")
        self._http = httpx.Client(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            auth=auth,
            **httpx_kwargs,
        )

    @classmethod
    def from_settings(cls, service: ServiceSettings, **httpx_kwargs: Any) -> ApiClient:
        """Build a client from the ``service`` section of the loaded settings."""
        return cls(service.api_url, timeout=service.timeout, **httpx_kwargs)

    def __enter__(self) -> ApiClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._http.close()

    def get_index(self, name: str) -> IndexClient:
        return IndexClient(self._http, name)

    def list_indexes(self) -> dict[str, dict[str, Any]]:
        """All indexes on the account, keyed by name."""
        try:
            resp = self._http.get("/v1/indexes")
        except httpx.HTTPError as e:
            raise ServiceConnectionError(f"Listing indexes failed: {e}") from e
        _raise_for_status(resp, "Listing indexes")
        return cast(dict[str, dict[str, Any]], resp.json())
