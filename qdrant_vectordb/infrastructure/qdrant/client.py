from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Union

import requests

from ...domain.models import ScoredPoint, SparseVector
from ..config import qdrant_api_key, qdrant_url
from ..timeouts import http_timeout_seconds

SPARSE_VECTOR_NAME = "text"

PointId = Union[int, str]


class QdrantApiError(RuntimeError):
    """HTTP or transport failure talking to Qdrant.

    ``status_code`` is None when the request never got a response.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _error_message(resp: requests.Response) -> str:
    try:
        data = resp.json() or {}
    except ValueError:
        return resp.text or resp.reason or f"HTTP {resp.status_code}"
    status = data.get("status") if isinstance(data, dict) else None
    if isinstance(status, dict) and status.get("error"):
        return str(status["error"])
    return resp.text or f"HTTP {resp.status_code}"


class QdrantRestClient:
    """Thin client for the Qdrant REST API.

    Every method maps to one endpoint and returns the ``result`` member of
    the response body. Failures raise ``QdrantApiError``.
    """

    def __init__(self, url: Optional[str] = None, api_key: Optional[str] = None, timeout: Optional[float] = None) -> None:
        self.base_url = (url or qdrant_url()).rstrip("/")
        self.api_key = api_key if api_key is not None else qdrant_api_key()
        self.timeout = float(timeout) if timeout else http_timeout_seconds()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["api-key"] = self.api_key
        return headers

    def _request(self, method: str, path: str, body: Optional[dict] = None, params: Optional[dict] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            r = requests.request(
                method,
                url,
                json=body,
                params=params,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as ex:
            raise QdrantApiError(f"{type(ex).__name__}: {ex}") from ex
        if not r.ok:
            raise QdrantApiError(_error_message(r), status_code=r.status_code)
        data = r.json() if r.content else {}
        return (data or {}).get("result")

    # --- collections ---
    def get_collections(self) -> List[str]:
        result = self._request("GET", "/collections") or {}
        names: List[str] = []
        for it in (result.get("collections") or []):
            name = str(it.get("name", "")).strip()
            if name:
                names.append(name)
        return names

    def create_collection(self, name: str, dim: int, distance: str = "Cosine", sparse: bool = False) -> Any:
        body: Dict[str, Any] = {"vectors": {"size": int(dim), "distance": distance}}
        if sparse:
            body["sparse_vectors"] = {SPARSE_VECTOR_NAME: {}}
        return self._request("PUT", f"/collections/{name}", body)

    def delete_collection(self, name: str) -> Any:
        return self._request("DELETE", f"/collections/{name}")

    # --- points ---
    def upsert(self, name: str, points: Sequence[dict]) -> Any:
        return self._request("PUT", f"/collections/{name}/points", {"points": list(points)}, params={"wait": "true"})

    def search(
        self,
        name: str,
        vector: Sequence[float],
        limit: int,
        score_threshold: Optional[float] = None,
        with_payload: bool = True,
    ) -> List[ScoredPoint]:
        body: Dict[str, Any] = {
            "vector": list(vector),
            "limit": int(limit),
            "with_payload": with_payload,
            "with_vector": False,
        }
        if score_threshold is not None:
            body["score_threshold"] = float(score_threshold)
        return self._search(name, body)

    def search_sparse(self, name: str, vector: SparseVector, limit: int, with_payload: bool = True) -> List[ScoredPoint]:
        body = {
            "vector": {"name": SPARSE_VECTOR_NAME, "vector": vector.to_dict()},
            "limit": int(limit),
            "with_payload": with_payload,
            "with_vector": False,
        }
        return self._search(name, body)

    def _search(self, name: str, body: dict) -> List[ScoredPoint]:
        result = self._request("POST", f"/collections/{name}/points/search", body) or []
        return [
            ScoredPoint(
                id=it.get("id"),
                score=float(it.get("score") or 0.0),
                payload=it.get("payload") or {},
            )
            for it in result
        ]

    def delete_points(self, name: str, ids: Sequence[PointId]) -> Any:
        return self._request("POST", f"/collections/{name}/points/delete", {"points": list(ids)}, params={"wait": "true"})

    def scroll(self, name: str, limit: int, with_payload: bool = True) -> List[dict]:
        body = {"limit": int(limit), "with_payload": with_payload, "with_vector": False}
        result = self._request("POST", f"/collections/{name}/points/scroll", body) or {}
        return list(result.get("points") or [])
