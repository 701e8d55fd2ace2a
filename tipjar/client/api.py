"""
HTTP client for the TipJar REST API.

Every call goes through ``TipJarApiClient._request`` which prefixes the base
URL, attaches ``Authorization: Bearer <token>`` when the token store holds a
session token, and turns any non-2xx answer into ``ApiError``.
"""

import logging
from typing import Any, BinaryIO, Dict, Optional

import requests

from tipjar.client.token_store import TokenStore

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:5000/api"


class ApiError(Exception):
    """Non-2xx answer from the API; ``message`` is the server's ``error`` field."""

    def __init__(self, status_code: int, message: str, payload: Optional[Dict[str, Any]] = None):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.payload = payload or {}


class TipJarApiClient:
    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        session: Optional[Any] = None,
        token_store: Optional[TokenStore] = None,
        timeout: float = 30,
    ):
        self.base_url = base_url.rstrip("/")
        # anything with a requests-style request(method, url, **kwargs)
        self.session = session if session is not None else requests.Session()
        self.token_store = token_store if token_store is not None else TokenStore()
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        token = self.token_store.load()
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        headers = self._headers()
        headers.update(kwargs.pop("headers", {}) or {})
        kwargs.setdefault("timeout", self.timeout)
        response = self.session.request(method, f"{self.base_url}{path}", headers=headers, **kwargs)

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if response.status_code >= 400:
            message = payload.get("error") if isinstance(payload, dict) else None
            if not message:
                # requests exposes .reason, httpx .reason_phrase
                message = getattr(response, "reason", None) or getattr(response, "reason_phrase", "") or "Request failed"
            raise ApiError(response.status_code, message, payload)
        return payload

    # ============================================
    # Auth
    # ============================================

    def get_nonce(self, address: str) -> Dict[str, Any]:
        return self._request("POST", "/auth/nonce", json={"address": address})

    def verify(self, address: str, signature: str) -> Dict[str, Any]:
        return self._request("POST", "/auth/verify", json={"address": address, "signature": signature})

    # ============================================
    # Content
    # ============================================

    def upload_content(
        self,
        category: str,
        title: str,
        media_url: str,
        description: Optional[str] = None,
        thumbnail_url: Optional[str] = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"category": category, "title": title, "mediaUrl": media_url}
        if description is not None:
            body["description"] = description
        if thumbnail_url is not None:
            body["thumbnailUrl"] = thumbnail_url
        return self._request("POST", "/content/upload", json=body)

    def list_content(self, **params: Any) -> Dict[str, Any]:
        params = {k: v for k, v in params.items() if v is not None}
        return self._request("GET", "/content", params=params)

    def get_content(self, content_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/content/{content_id}")

    def get_content_by_creator(self, address: str, **params: Any) -> Dict[str, Any]:
        return self._request("GET", f"/content/creator/{address}", params=params)

    # ============================================
    # Media
    # ============================================

    def upload_media(self, filename: str, stream: BinaryIO, mimetype: str) -> Dict[str, Any]:
        return self._request("POST", "/media/upload", files={"file": (filename, stream, mimetype)})

    def upload_thumbnail(self, filename: str, stream: BinaryIO, mimetype: str) -> Dict[str, Any]:
        return self._request("POST", "/media/thumbnail", files={"file": (filename, stream, mimetype)})

    # ============================================
    # Likes & comments
    # ============================================

    def toggle_like(self, content_id: str) -> Dict[str, Any]:
        return self._request("POST", "/likes/toggle", json={"contentId": content_id})

    def get_like_count(self, content_id: str) -> int:
        return int(self._request("GET", f"/likes/count/{content_id}").get("count", 0))

    def check_liked(self, content_id: str) -> bool:
        return bool(self._request("GET", f"/likes/me/{content_id}").get("liked", False))

    def get_comments(self, content_id: str, **params: Any) -> Dict[str, Any]:
        return self._request("GET", f"/comments/{content_id}", params=params)

    def post_comment(self, content_id: str, text: str) -> Dict[str, Any]:
        return self._request("POST", "/comments", json={"contentId": content_id, "text": text})

    def update_comment(self, comment_id: str, text: str) -> Dict[str, Any]:
        return self._request("PUT", f"/comments/{comment_id}", json={"text": text})

    def delete_comment(self, comment_id: str) -> Dict[str, Any]:
        return self._request("DELETE", f"/comments/{comment_id}")

    # ============================================
    # Tip jars (read-only)
    # ============================================

    def get_tip_jar(self, creator: str) -> Dict[str, Any]:
        return self._request("GET", f"/tipjar/{creator}")

    def get_recent_tips(self, creator: str) -> Dict[str, Any]:
        return self._request("GET", f"/tipjar/{creator}/tips")
