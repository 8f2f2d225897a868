"""HTTP client for the freee accounting API."""

import logging
from datetime import date
from typing import Any, Callable, Optional, TypeVar, Union

import httpx

from freee_beancount.client.payloads import deal_from_payload, journal_from_payload
from freee_beancount.client.retry import RetryConfig, call_with_retry
from freee_beancount.domain.entities import Deal, Journal
from freee_beancount.domain.errors import RemoteAPIError, api_error_message

logger = logging.getLogger(__name__)

PAGE_SIZE = 100
API_PREFIX = "/api/1"
TOKEN_PATH = "/oauth/token"

T = TypeVar("T")
DateLike = Union[date, str]


def _date_param(value: DateLike) -> str:
    return value.isoformat() if isinstance(value, date) else value


def error_from_response(response: httpx.Response, offset: Optional[int] = None) -> RemoteAPIError:
    """Build a RemoteAPIError from a failed response's ``{error, error_description}`` body."""
    error = None
    description = None
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error = body.get("error")
        description = body.get("error_description")
    return RemoteAPIError(
        api_error_message(response.status_code, error, description),
        status_code=response.status_code,
        error=error,
        error_description=description,
        offset=offset,
    )


class FreeeClient:
    """
    Synchronous client for the deals, journals and wallet_txns collections.

    Every request carries the bearer token set at construction time or
    obtained through ``get_access_token``.
    """

    def __init__(
        self,
        base_url: str,
        access_token: Optional[str] = None,
        company_id: Optional[int] = None,
        timeout: float = 30.0,
        retry: Optional[RetryConfig] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: API root, e.g. "https://api.freee.co.jp" or the emulator URL
            access_token: Bearer token for /api/1 requests
            company_id: Company whose transactions are listed
            timeout: Per-request timeout in seconds
            retry: Retry policy for each request; None means fail fast
            http_client: Preconfigured httpx client (tests pass a mock transport here)
        """
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self.company_id = company_id
        self.retry = retry
        self._owns_client = http_client is None
        self.client = http_client or httpx.Client(base_url=self.base_url, timeout=timeout)

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "FreeeClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def set_access_token(self, token: str) -> None:
        self.access_token = token

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    def _request(
        self, method: str, path: str, offset: Optional[int] = None, **kwargs: Any
    ) -> dict[str, Any]:
        """
        Send one request and decode its JSON body.

        Raises:
            RemoteAPIError: On a non-2xx answer or a transport failure
        """

        def _do_request() -> httpx.Response:
            logger.debug(f"{method} {path} {kwargs.get('params') or ''}")
            response = self.client.request(method, path, headers=self._headers(), **kwargs)
            if not response.is_success:
                raise error_from_response(response, offset=offset)
            return response

        try:
            if self.retry is not None:
                response = call_with_retry(_do_request, self.retry)
            else:
                response = _do_request()
        except httpx.HTTPError as e:
            raise RemoteAPIError(f"freee API request failed: {e}", offset=offset) from e

        if response.status_code == 204 or not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise RemoteAPIError(
                f"freee API returned invalid JSON: {e}",
                status_code=response.status_code,
                offset=offset,
            ) from e

    def _list_params(
        self, date_from: Optional[DateLike], date_to: Optional[DateLike], limit: int, offset: int
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"limit": limit, "offset": offset}
        if self.company_id:
            params["company_id"] = self.company_id
        if date_from is not None:
            params["issue_date_from"] = _date_param(date_from)
        if date_to is not None:
            params["issue_date_to"] = _date_param(date_to)
        return params

    # Deals
    def list_deals(
        self,
        date_from: Optional[DateLike] = None,
        date_to: Optional[DateLike] = None,
        limit: int = PAGE_SIZE,
        offset: int = 0,
    ) -> list[Deal]:
        """Fetch one page of deals."""
        body = self._request(
            "GET",
            f"{API_PREFIX}/deals",
            offset=offset,
            params=self._list_params(date_from, date_to, limit, offset),
        )
        return [deal_from_payload(item) for item in body.get("deals") or []]

    def get_deal(self, deal_id: int) -> Deal:
        body = self._request("GET", f"{API_PREFIX}/deals/{deal_id}", params=self._company_param())
        return deal_from_payload(body["deal"])

    def fetch_all_deals(self, date_from: DateLike, date_to: DateLike) -> list[Deal]:
        """Fetch every deal issued in the inclusive date range, page by page."""
        return self._fetch_all(
            lambda limit, offset: self.list_deals(date_from, date_to, limit, offset), "deals"
        )

    # Journals
    def list_journals(
        self,
        date_from: Optional[DateLike] = None,
        date_to: Optional[DateLike] = None,
        limit: int = PAGE_SIZE,
        offset: int = 0,
    ) -> list[Journal]:
        """Fetch one page of journals."""
        body = self._request(
            "GET",
            f"{API_PREFIX}/journals",
            offset=offset,
            params=self._list_params(date_from, date_to, limit, offset),
        )
        return [journal_from_payload(item) for item in body.get("journals") or []]

    def get_journal(self, journal_id: int) -> Journal:
        body = self._request(
            "GET", f"{API_PREFIX}/journals/{journal_id}", params=self._company_param()
        )
        return journal_from_payload(body["journal"])

    def fetch_all_journals(self, date_from: DateLike, date_to: DateLike) -> list[Journal]:
        """Fetch every journal issued in the inclusive date range, page by page."""
        return self._fetch_all(
            lambda limit, offset: self.list_journals(date_from, date_to, limit, offset), "journals"
        )

    # Wallet transactions
    def list_wallet_txns(self, status: Optional[str] = None) -> list[dict[str, Any]]:
        params = self._company_param()
        if status is not None:
            params["status"] = status
        body = self._request("GET", f"{API_PREFIX}/wallet_txns", params=params)
        return list(body.get("wallet_txns") or [])

    def get_wallet_txn(self, wallet_txn_id: int) -> dict[str, Any]:
        body = self._request(
            "GET", f"{API_PREFIX}/wallet_txns/{wallet_txn_id}", params=self._company_param()
        )
        return body["wallet_txn"]

    # OAuth
    def get_access_token(self, client_id: str, client_secret: str) -> str:
        """Exchange client credentials for an access token and store it on the client."""
        body = self._request(
            "POST",
            TOKEN_PATH,
            data={
                "grant_type": "client_credentials",
                "client_id": client_id,
                "client_secret": client_secret,
            },
        )
        token = body.get("access_token")
        if not token:
            raise RemoteAPIError("freee API error: token response has no access_token")
        self.set_access_token(token)
        return token

    def _company_param(self) -> dict[str, Any]:
        return {"company_id": self.company_id} if self.company_id else {}

    def _fetch_all(self, fetch_page: Callable[[int, int], list[T]], resource: str) -> list[T]:
        items: list[T] = []
        offset = 0
        while True:
            try:
                page = fetch_page(PAGE_SIZE, offset)
            except RemoteAPIError as e:
                raise RemoteAPIError(
                    f"Failed to fetch {resource} at offset {offset}: {e}",
                    status_code=e.status_code,
                    error=e.error,
                    error_description=e.error_description,
                    offset=offset,
                ) from e
            items.extend(page)
            if len(page) < PAGE_SIZE:
                break
            offset += PAGE_SIZE
        logger.debug(f"Fetched {len(items)} {resource}")
        return items
