import logging
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """백엔드 호출 실패 (연결 오류 또는 2xx 가 아닌 응답)"""


class MemberApi:
    """회원 REST API 를 호출하는 얇은 requests 래퍼"""

    def __init__(self, base_url: str, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            res = self.session.request(method, url, **kwargs)
            res.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise ApiError(str(e)) from e
        return res.json()

    def list_members(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/members") or []

    def create_member(self, fields: Dict[str, Any]) -> int:
        return self._request("POST", "/members", json=fields)["id"]

    def update_member(self, member_id: int, fields: Dict[str, Any]) -> int:
        return self._request("PUT", f"/members/{member_id}", json=fields)["changes"]

    def delete_member(self, member_id: int) -> int:
        return self._request("DELETE", f"/members/{member_id}")["changes"]
