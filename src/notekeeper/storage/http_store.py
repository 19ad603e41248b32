"""REST clients for the remote document store and blob storage."""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from notekeeper.exceptions import ErrorCode, ImageUploadError, StoreError
from notekeeper.storage.base import BlobStore, DocumentStore, Record

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def _error_message(response: requests.Response) -> str:
    """Pull a readable message out of an error response."""
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        for key in ("message", "error", "detail"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
            if isinstance(value, dict) and isinstance(value.get("message"), str):
                return value["message"]
    body = (response.text or "").strip()
    return body[:200] or response.reason or f"HTTP {response.status_code}"


def _unexpected_body(
    response: requests.Response, operation: str, code: ErrorCode
) -> StoreError:
    return StoreError(
        f"Unexpected response body for {operation}",
        operation=operation,
        status_code=response.status_code,
        code=code,
    )


def _json_or_empty(response: requests.Response) -> Any:
    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError as e:
        raise StoreError(
            f"Invalid JSON response: {e}",
            status_code=response.status_code,
            code=ErrorCode.STORE_READ_FAILED,
            original_error=e,
        ) from e


class _HttpClient:
    """Shared session handling for the REST backends."""

    def __init__(
        self,
        base_url: str,
        auth_token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()
        if auth_token:
            self.session.headers["Authorization"] = f"Bearer {auth_token}"

    def _url(self, *parts: str) -> str:
        return "/".join([self.base_url, *(quote(p, safe="/") for p in parts)])

    def _request(
        self, method: str, url: str, operation: str, **kwargs: Any
    ) -> requests.Response:
        try:
            return self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning(f"{operation} request to {url} failed: {e}")
            raise StoreError(
                str(e) or f"{operation} request failed",
                operation=operation,
                code=ErrorCode.STORE_CONNECTION_FAILED,
                original_error=e,
            ) from e

    def close(self) -> None:
        if self._owns_session:
            self.session.close()


class HttpDocumentStore(_HttpClient, DocumentStore):
    """Document store speaking a small REST dialect.

    ``GET {base}/{collection}`` lists, ``POST`` creates, ``PUT .../{id}``
    overwrites, ``DELETE .../{id}`` removes and ``GET .../{id}`` reads one
    record. A 404 on read or delete means the record is absent.
    """

    supports_point_reads = True

    def list(self, collection: str) -> List[Record]:
        response = self._request("GET", self._url(collection), "list")
        self._raise_for_status(response, "list", ErrorCode.STORE_READ_FAILED)
        payload = _json_or_empty(response)
        if isinstance(payload, dict):
            payload = payload.get("documents", [])
        if not isinstance(payload, list) or not all(isinstance(i, dict) for i in payload):
            raise _unexpected_body(response, "list", ErrorCode.STORE_READ_FAILED)
        records: List[Record] = []
        for item in payload:
            fields = dict(item)
            record_id = fields.pop("id", None)
            if not record_id:
                logger.warning(f"Skipping {collection} record without id")
                continue
            records.append((str(record_id), fields))
        return records

    def get(self, collection: str, record_id: str) -> Optional[Dict[str, Any]]:
        response = self._request("GET", self._url(collection, record_id), "get")
        if response.status_code == 404:
            return None
        self._raise_for_status(
            response, "get", ErrorCode.STORE_READ_FAILED, record_id=record_id
        )
        payload = _json_or_empty(response)
        if not isinstance(payload, dict):
            raise _unexpected_body(response, "get", ErrorCode.STORE_READ_FAILED)
        fields = dict(payload)
        fields.pop("id", None)
        return fields

    def upsert(
        self, collection: str, record_id: Optional[str], fields: Dict[str, Any]
    ) -> str:
        if record_id:
            response = self._request(
                "PUT", self._url(collection, record_id), "upsert", json=fields
            )
        else:
            response = self._request("POST", self._url(collection), "upsert", json=fields)
        self._raise_for_status(
            response, "upsert", ErrorCode.STORE_WRITE_FAILED, record_id=record_id
        )
        if record_id:
            return record_id
        payload = _json_or_empty(response)
        if not isinstance(payload, dict):
            raise _unexpected_body(response, "upsert", ErrorCode.STORE_WRITE_FAILED)
        new_id = payload.get("id")
        if not new_id:
            raise StoreError(
                "Store did not return an id for the new record",
                operation="upsert",
                status_code=response.status_code,
                code=ErrorCode.STORE_WRITE_FAILED,
            )
        return str(new_id)

    def delete(self, collection: str, record_id: str) -> bool:
        response = self._request("DELETE", self._url(collection, record_id), "delete")
        if response.status_code == 404:
            return False
        self._raise_for_status(
            response, "delete", ErrorCode.STORE_DELETE_FAILED, record_id=record_id
        )
        return True

    @staticmethod
    def _raise_for_status(
        response: requests.Response,
        operation: str,
        code: ErrorCode,
        record_id: Optional[str] = None,
    ) -> None:
        if response.status_code < 400:
            return
        raise StoreError(
            _error_message(response),
            operation=operation,
            record_id=record_id,
            status_code=response.status_code,
            code=code,
        )


class HttpBlobStore(_HttpClient, BlobStore):
    """Object storage client: ``PUT {base}/{name}`` with the raw bytes.

    The response's ``url`` (or ``downloadUrl``) is returned. When the
    service answers without one, the URL is built from ``public_url``
    (falling back to the upload base URL).
    """

    def __init__(self, base_url: str, public_url: Optional[str] = None, **kwargs: Any):
        super().__init__(base_url, **kwargs)
        self.public_url = public_url.rstrip("/") if public_url else None

    def upload_blob(self, data: bytes, content_type: str, name: str) -> str:
        url = self._url(name)
        try:
            response = self._request(
                "PUT", url, "upload_image",
                data=data, headers={"Content-Type": content_type},
            )
        except StoreError as e:
            raise ImageUploadError(e.message, name=name, original_error=e.original_error) from e

        if response.status_code >= 400:
            raise ImageUploadError(
                _error_message(response), name=name, status_code=response.status_code
            )
        try:
            payload = response.json() if response.content else {}
        except ValueError:
            payload = {}
        if isinstance(payload, dict):
            for key in ("url", "downloadUrl"):
                if payload.get(key):
                    return str(payload[key])
        return f"{self.public_url or self.base_url}/{quote(name, safe='/')}"
