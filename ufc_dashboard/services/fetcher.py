"""
Remote collection fetcher.

Every request re-checks the session, attaches the bearer token and retries
transient failures a fixed number of times before giving up with an
explicit error.
"""
import time
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Generic, Optional, TypeVar

import requests
from pydantic import BaseModel, TypeAdapter, ValidationError

from ..config import Settings, get_settings
from ..errors import ApiError, AuthInvalid, DashboardError, TransientNetworkError
from ..logging_config import get_logger
from ..notices import NoticeBoard
from ..schemas import InventoryItem, Page, SaleRecord, SortOrder
from ..session import EXPIRED_MESSAGE, Session

logger = get_logger("fetcher")

T = TypeVar("T")

# connection dropped before or while the body was read
TRANSIENT_ERRORS = (
    requests.ConnectionError,
    requests.Timeout,
    requests.exceptions.ChunkedEncodingError,
)


@dataclass(frozen=True)
class Resource:
    path: str
    model: type[BaseModel]
    sort_fields: tuple[str, ...]


RESOURCES: dict[str, Resource] = {
    "sales": Resource(
        path="/api/sales",
        model=SaleRecord,
        sort_fields=("date", "product", "quantity", "sellingPrice", "buyingPrice"),
    ),
    "inventory": Resource(
        path="/api/inventory",
        model=InventoryItem,
        sort_fields=("product", "stock", "buyingPrice", "lowStockThreshold"),
    ),
}


def _iso(value: date | datetime) -> str:
    return value.isoformat()


@dataclass(frozen=True)
class ListQuery:
    page: int = 1
    page_size: int = 10
    sort_field: Optional[str] = None
    sort_order: SortOrder = "asc"
    search_term: str = ""
    date_range: Optional[tuple[date | datetime, date | datetime]] = None

    def __post_init__(self):
        if self.page < 1:
            raise ValueError("page must be >= 1")
        if self.page_size <= 0:
            raise ValueError("page_size must be positive")
        if self.sort_order not in ("asc", "desc"):
            raise ValueError(f"Invalid sort order: {self.sort_order}")

    def to_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {"page": self.page, "limit": self.page_size}
        if self.sort_field:
            params["sortBy"] = self.sort_field
            params["sortOrder"] = self.sort_order
        if self.search_term.strip():
            params["search"] = self.search_term.strip()
        if self.date_range:
            start, end = self.date_range
            params["startDate"] = _iso(start)
            params["endDate"] = _iso(end)
        return params


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    """Tagged fetch outcome so a failed zero can be told apart from a real one."""

    value: T
    error: Optional[DashboardError] = field(default=None)

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "FetchResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: DashboardError, default: T) -> "FetchResult[T]":
        return cls(value=default, error=error)


def _server_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            if body.get(key):
                return str(body[key])
    return f"Request failed with status {response.status_code}"


class ApiClient:
    """requests-based client bound to one Session."""

    def __init__(
        self,
        session: Session,
        settings: Optional[Settings] = None,
        http: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.session = session
        self.settings = settings or get_settings()
        self.http = http or requests.Session()
        self._sleep = sleep

    @property
    def notices(self) -> NoticeBoard:
        return self.session.notices

    def url(self, path: str) -> str:
        return f"{self.settings.api_base_url.rstrip('/')}{path}"

    def request(
        self,
        method: str,
        path: str,
        *,
        resource: str,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
        authenticated: bool = True,
        retry: bool = True,
    ) -> Any:
        attempts = 1 + (self.settings.fetch_retries if retry else 0)
        last_error = None

        for attempt in range(1, attempts + 1):
            # validity can lapse between attempts
            headers = self.session.auth_headers() if authenticated else {}
            try:
                response = self.http.request(
                    method,
                    self.url(path),
                    params=params,
                    json=json,
                    headers=headers,
                    timeout=self.settings.request_timeout,
                )
            except TRANSIENT_ERRORS as e:
                last_error = str(e) or type(e).__name__
            except requests.RequestException as e:
                logger.error(f"{method} {path} failed: {e!r}")
                raise DashboardError(
                    str(e) or type(e).__name__,
                    details={"resource": resource, "original_error": type(e).__name__}
                ) from e
            else:
                status = response.status_code
                if authenticated and status in (401, 403):
                    logger.warning(f"{method} {path} rejected the credential ({status})")
                    self.session.logout(EXPIRED_MESSAGE)
                    raise AuthInvalid(EXPIRED_MESSAGE, reason="rejected")
                if status >= 500:
                    last_error = _server_message(response)
                elif status >= 400:
                    raise ApiError(_server_message(response), status_code=status, resource=resource)
                else:
                    if not response.content:
                        return None
                    try:
                        return response.json()
                    except ValueError as e:
                        raise DashboardError(
                            f"Unexpected {resource} response",
                            details={"original_error": str(e)}
                        ) from e

            if attempt < attempts:
                logger.warning(
                    f"{method} {path} failed (attempt {attempt}/{attempts}): {last_error}; "
                    f"retrying in {self.settings.fetch_retry_delay}s"
                )
                self._sleep(self.settings.fetch_retry_delay)

        logger.error(f"{method} {path} failed after {attempts} attempts: {last_error}")
        raise TransientNetworkError(resource, attempts, last_error)

    def get(self, path: str, *, resource: str, params: Optional[dict] = None, authenticated: bool = True) -> Any:
        return self.request("GET", path, resource=resource, params=params, authenticated=authenticated)

    def post(self, path: str, *, resource: str, json: dict, authenticated: bool = True) -> Any:
        # writes are not idempotent, never replay them
        return self.request("POST", path, resource=resource, json=json, authenticated=authenticated, retry=False)

    def fetch(self, resource: str, query: ListQuery) -> Page:
        """Fetch one page of a named collection."""
        try:
            spec = RESOURCES[resource]
        except KeyError:
            raise ValueError(f"Unknown resource: {resource}") from None
        if query.sort_field and query.sort_field not in spec.sort_fields:
            raise ValueError(f"Cannot sort {resource} by {query.sort_field}")

        data = self.get(spec.path, resource=resource, params=query.to_params())
        if isinstance(data, list):
            rows, total = data, len(data)
        elif isinstance(data, dict):
            rows = data.get("data") or []
            total = data.get("total", len(rows))
        else:
            rows, total = [], 0

        items = parse_as(list[spec.model], rows, resource)
        return Page(items=items, total=int(total or 0))

    def fetch_result(self, resource: str, query: ListQuery) -> FetchResult[Page]:
        return isolate(lambda: self.fetch(resource, query), Page(), label=resource, notices=self.notices)


def parse_as(model: Any, data: Any, resource: str) -> Any:
    """Validate a response body, turning schema mismatches into DashboardError."""
    try:
        return TypeAdapter(model).validate_python(data)
    except ValidationError as e:
        logger.error(f"Malformed {resource} response: {e}")
        raise DashboardError(
            f"Unexpected {resource} response",
            details={"resource": resource, "errors": e.errors(include_url=False)}
        ) from e


def isolate(
    fetch: Callable[[], T],
    default: T,
    *,
    label: str,
    notices: Optional[NoticeBoard] = None,
) -> FetchResult[T]:
    """
    Run one fetch of a composite view in its own failure scope.

    AuthInvalid is session-wide and propagates; every other client error
    becomes a failed result carrying ``default``.
    """
    try:
        return FetchResult.success(fetch())
    except AuthInvalid:
        raise
    except DashboardError as e:
        logger.error(f"Failed to fetch {label}: {e.message}")
        if notices is not None:
            notices.error(f"Failed to fetch {label}: {e.message}")
        return FetchResult.failure(e, default)
