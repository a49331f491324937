"""
HTTP client for the Prospera API

Thin request functions over ``httpx``. Each call either returns the decoded
JSON body or raises ``ApiError``; there is no retry, backoff or cancellation.
"""
import logging
import os
import re
from typing import Any, Dict, Mapping, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:5000/api"
TOKEN_KEY = "userToken"
PROFILE_KEY = "userProfile"


class ApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None, detail: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class MemoryStorage:
    """Key-value storage standing in for the device store."""

    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()


def resolve_base_url(env: Optional[Mapping[str, str]] = None) -> str:
    env = os.environ if env is None else env
    raw = env.get("PROSPERA_API_URL") or env.get("API_URL")
    if not raw:
        return DEFAULT_BASE_URL
    cleaned = re.sub(r"\s", "", raw)
    if cleaned != raw:
        logger.info("sanitized API url (whitespace removed)")
    cleaned = cleaned.rstrip("/")
    return cleaned if cleaned.endswith("/api") else f"{cleaned}/api"


class ApiClient:
    def __init__(self, base_url: Optional[str] = None, storage=None, http: Optional[httpx.Client] = None,
                 timeout: float = 10.0):
        self.base_url = (base_url or resolve_base_url()).rstrip("/")
        self.storage = storage if storage is not None else MemoryStorage()
        self.http = http if http is not None else httpx.Client(timeout=timeout)
        logger.debug("baseURL %s", self.base_url)

    def _request(self, method: str, path: str, *, json: Any = None, params: Optional[dict] = None,
                 auth: bool = True) -> Any:
        url = f"{self.base_url}{path}"
        headers = {}
        if auth:
            headers["Authorization"] = f"Bearer {self.get_or_create_user_token()}"
        logger.debug("[api:req] %s %s", method, url)
        try:
            response = self.http.request(method, url, json=json, params=params, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            detail = _error_detail(e.response)
            logger.warning("[api:err] %s %s -> %s %s", method, url, e.response.status_code, detail)
            raise ApiError(str(e), status_code=e.response.status_code, detail=detail) from e
        except httpx.HTTPError as e:
            logger.warning("[api:err] %s %s -> %s", method, url, e)
            raise ApiError(str(e)) from e
        return response.json() if response.content else None

    def ping_health(self) -> Optional[dict]:
        try:
            return self._request("GET", "/health", auth=False)
        except ApiError as e:
            logger.info("[api] health error %s", e)
            return None

    def get_or_create_user_token(self) -> str:
        token = self.storage.get_item(TOKEN_KEY)
        if not token:
            data = self._request("POST", "/users/token", auth=False) or {}
            token = data.get("userToken")
            if not token:
                raise ApiError("token endpoint returned no userToken")
            self.storage.set_item(TOKEN_KEY, token)
        return token

    # Expenses
    def fetch_expenses(self):
        return self._request("GET", "/expenses")

    def fetch_expense_summary(self, timeframe: str = "month"):
        return self._request("GET", "/expenses/summary", params={"timeframe": timeframe})

    def create_expense(self, expense: dict):
        return self._request("POST", "/expenses", json=expense)

    def update_expense(self, expense_id: str, update: dict):
        return self._request("PUT", f"/expenses/{expense_id}", json=update)

    def delete_expense(self, expense_id: str):
        return self._request("DELETE", f"/expenses/{expense_id}")

    # Income
    def fetch_income(self):
        return self._request("GET", "/income")

    def create_income(self, income: dict):
        return self._request("POST", "/income", json=income)

    def update_income(self, income_id: str, update: dict):
        return self._request("PUT", f"/income/{income_id}", json=update)

    # Savings goals
    def fetch_savings_goals(self):
        return self._request("GET", "/savings-goals")

    def create_savings_goal(self, goal: dict):
        return self._request("POST", "/savings-goals", json=goal)

    def update_savings_goal(self, goal_id: str, update: dict):
        return self._request("PUT", f"/savings-goals/{goal_id}", json=update)

    def update_savings_goal_progress(self, goal_id: str, current_amount: float):
        return self._request("PATCH", f"/savings-goals/{goal_id}/progress", json={"current_amount": current_amount})

    def delete_savings_goal(self, goal_id: str):
        return self._request("DELETE", f"/savings-goals/{goal_id}")

    # Profile
    def fetch_profile(self):
        return self._request("GET", "/users/profile")

    def update_profile(self, profile: dict):
        return self._request("PUT", "/users/profile", json=profile)


def _error_detail(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        detail = body.get("detail") or body.get("error")
        return detail if isinstance(detail, str) else None
    return None
