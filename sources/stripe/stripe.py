import json
import logging
from typing import Any, Callable, Dict, Iterator, List, NamedTuple, Optional, Tuple

import requests
from pydantic import BaseModel, ConfigDict, Field, SecretStr

from libs.utils import build_row_batch


logger = logging.getLogger(__name__)

BASE_URL = "https://api.stripe.com/v1"
# Responses are shaped by this API release regardless of the account default.
API_VERSION = "2023-10-16"
# First page only; Stripe caps list endpoints at 100 objects per page.
PAGE_SIZE = 100
REQUEST_TIMEOUT = 30

OPTIONS = {
    "apiKey": {
        "title": "Stripe API Key",
        "description": "Your Stripe secret API key",
        "type": "string",
        "required": True,
        "secret": True,
    }
}

# Published table name -> Stripe list endpoint, in emission order.
RESOURCE_ENDPOINTS = {
    "customers": "customers",
    "charges": "charges",
    "invoices": "invoices",
    "subscriptions": "subscriptions",
    "products": "products",
    "prices": "prices",
    "paymentIntents": "payment_intents",
    "payouts": "payouts",
    "refunds": "refunds",
    "balanceTransactions": "balance_transactions",
    "events": "events",
    "disputes": "disputes",
}


class StripeOptions(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    api_key: SecretStr = Field(alias="apiKey")


class StripeAPIError(Exception):
    """Raised when Stripe answers with a non-200 status or a malformed list body."""

    def __init__(self, endpoint: str, status_code: int, body: str):
        super().__init__(f"Stripe API error for {endpoint}: {status_code} {body}")
        self.endpoint = endpoint
        self.status_code = status_code
        self.body = body


class StripeClient:
    def __init__(self, api_key: str, api_version: str = API_VERSION) -> None:
        """
        Initialize an authenticated Stripe REST client.

        Args:
            api_key: Stripe secret API key (sk_test_* or sk_live_*)
            api_version: Stripe API release pinned on every request
        """
        self.base_url = BASE_URL
        self.session = requests.Session()
        self.session.auth = (api_key, "")  # API key as username, empty password
        self.session.headers.update({"Stripe-Version": api_version})

    def __enter__(self) -> "StripeClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def list(self, endpoint: str, limit: int = PAGE_SIZE) -> List[Dict[str, Any]]:
        """
        Fetch the first page of a Stripe list endpoint.

        Args:
            endpoint: Path under /v1, e.g. "payment_intents"
            limit: Maximum number of objects to return

        Returns:
            The objects of the page, in the order Stripe returned them

        Raises:
            StripeAPIError: On a non-200 status, or a 200 whose body is not a
                list object with a "data" list of objects
        """
        url = f"{self.base_url}/{endpoint}"
        response = self.session.get(
            url, params={"limit": limit}, timeout=REQUEST_TIMEOUT
        )

        if response.status_code != 200:
            raise StripeAPIError(endpoint, response.status_code, response.text)

        payload = response.json()
        records = payload.get("data", []) if isinstance(payload, dict) else None
        if not isinstance(records, list) or not all(
            isinstance(record, dict) for record in records
        ):
            raise StripeAPIError(
                endpoint,
                response.status_code,
                f"malformed list response: {response.text[:200]}",
            )
        return records


class ResourceDescriptor(NamedTuple):
    name: str
    fetch: Callable[[], List[Dict[str, Any]]]


class FetchResult(NamedTuple):
    name: str
    records: Optional[List[Dict[str, Any]]] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def build_resources(client: StripeClient) -> Tuple[ResourceDescriptor, ...]:
    """Bind every published table name to a first-page fetch of its endpoint."""

    def list_endpoint(endpoint: str) -> Callable[[], List[Dict[str, Any]]]:
        return lambda: client.list(endpoint, limit=PAGE_SIZE)

    return tuple(
        ResourceDescriptor(name, list_endpoint(endpoint))
        for name, endpoint in RESOURCE_ENDPOINTS.items()
    )


def fetch_resources(resources) -> Iterator[FetchResult]:
    """
    Fetch each resource in turn, one request at a time.

    A failing fetch is logged and reported as a FetchResult carrying the error;
    the remaining resources are still fetched.
    """
    for resource in resources:
        try:
            records = resource.fetch()
        except Exception as e:
            logger.error("Error fetching %s: %s", resource.name, e, exc_info=True)
            yield FetchResult(resource.name, error=e)
            continue
        yield FetchResult(resource.name, records=records)


def cache_content(resource_name: str, api_key: str) -> str:
    # Identifies the batch for the host's cache without exposing the full key.
    return json.dumps(
        {"resource": resource_name, "apiKey": api_key[:5] + "..."},
        separators=(",", ":"),
    )


def process_source(
    options: Dict[str, Any], source_files=None, util_funcs=None, resources=None
) -> Iterator[Dict[str, Any]]:
    """
    Yield one row batch per non-empty Stripe table, in RESOURCE_ENDPOINTS order.

    Args:
        options: Connection options, containing:
            - apiKey: Stripe secret API key
        source_files: Unused, accepted for host compatibility
        util_funcs: Unused, accepted for host compatibility
        resources: Descriptors to fetch instead of the Stripe defaults

    Returns:
        An iterator of row batches. Failed and empty tables are skipped.
    """
    api_key = StripeOptions(**options).api_key.get_secret_value()
    if resources is not None:
        yield from _emit_batches(resources, api_key)
        return

    with StripeClient(api_key) as client:
        yield from _emit_batches(build_resources(client), api_key)


def _emit_batches(resources, api_key: str) -> Iterator[Dict[str, Any]]:
    for result in fetch_resources(resources):
        if not result.ok:
            continue

        batch = build_row_batch(
            result.name, result.records, cache_content(result.name, api_key)
        )
        if batch is None:
            logger.debug("No %s returned, skipping", result.name)
            continue

        logger.info(
            "Fetched %d %s (%d columns)",
            batch["expectedRowCount"],
            result.name,
            len(batch["columnTypes"]),
        )
        yield batch


def test_connection(options: Dict[str, Any]) -> bool:
    """
    Test the connection to Stripe API by listing a single customer.

    Returns:
        True when the request succeeds, False on any failure
    """
    try:
        api_key = StripeOptions(**options).api_key.get_secret_value()
        with StripeClient(api_key) as client:
            client.list("customers", limit=1)
        return True
    except Exception as e:
        logger.error("Stripe connection test failed: %s", e)
        return False
