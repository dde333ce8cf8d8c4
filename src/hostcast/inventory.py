"""Inventory client for the Collins-style asset API.

One operation matters to hostcast: ``find(selector)``, returning the
matching assets in the order the service lists them. Reserved selector
fields are sent as query parameters; every other field becomes an
``attribute=KEY;VALUE`` filter.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping

import httpx

from .errors import InventoryError
from .logging import get_logger
from .selector import RESERVED_FIELDS

logger = get_logger(__name__)

FIND_PATH = "/api/assets"

_RESERVED_NAMES = set(RESERVED_FIELDS.values())


@dataclass
class Asset:
    """A managed host as reported by the inventory.

    Attributes:
        tag: Unique asset tag
        hostname: HOSTNAME attribute, empty if the asset has none
        status: Asset status (allocated, maintenance, ...)
        attributes: Remaining attributes, uppercase keys
    """

    tag: str
    hostname: str = ""
    status: str | None = None
    attributes: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Asset":
        """Build from one entry of the API's ``data.Data`` list.

        Accepts both the detailed shape (``{"ASSET": {...}, "ATTRIBS":
        {"0": {...}}}``) and the flat summary shape.
        """
        asset = record.get("ASSET", record)
        attribs: dict[str, Any] = {}
        for group in (record.get("ATTRIBS") or {}).values():
            attribs.update(group)

        hostname = attribs.pop("HOSTNAME", None) or asset.get("HOSTNAME") or ""
        return cls(
            tag=str(asset.get("TAG", "")),
            hostname=str(hostname),
            status=asset.get("STATUS"),
            attributes=attribs,
        )


def build_params(selector: Mapping[str, Any]) -> list[tuple[str, str]]:
    """Encode a normalized selector as asset API query parameters.

    Example:
        >>> build_params({"status": "allocated", "pool": "web", "operation": "and"})
        [('status', 'allocated'), ('attribute', 'pool;web'), ('operation', 'and'), ('details', 'true')]
    """
    params: list[tuple[str, str]] = []
    for key, value in selector.items():
        if key == "details":
            continue
        if key in _RESERVED_NAMES:
            params.append((key, _encode(value)))
        else:
            params.append(("attribute", f"{key};{_encode(value)}"))
    params.append(("details", "true"))
    return params


def _encode(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


class InventoryClient:
    """Synchronous client for the asset API.

    Construct once per run and pass it to the resolver. Usable as a context
    manager to close the underlying HTTP connection pool.

    Example:
        >>> with InventoryClient("https://collins:9000", auth=("blake", "secret")) as client:
        ...     assets = client.find({"status": "allocated", "operation": "and"})
    """

    def __init__(
        self,
        base_url: str,
        auth: tuple[str, str] | None = None,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            auth=auth,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    def __enter__(self) -> "InventoryClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def find(self, selector: Mapping[str, Any]) -> list[Asset]:
        """Query assets matching a normalized selector.

        Raises:
            InventoryError: On connection failures, non-2xx responses or
                a payload without a ``data.Data`` list
        """
        params = build_params(selector)
        logger.debug("Querying inventory", url=self.base_url, params=params)

        try:
            response = self._client.get(FIND_PATH, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise InventoryError(
                f"Inventory query failed: HTTP {e.response.status_code} from {self.base_url}"
            ) from e
        except httpx.HTTPError as e:
            raise InventoryError(f"Inventory query failed: {e}") from e
        except ValueError as e:
            raise InventoryError(f"Inventory returned invalid JSON: {e}") from e

        try:
            records = payload["data"]["Data"]
        except (KeyError, TypeError) as e:
            raise InventoryError("Inventory response has no data.Data list") from e
        if not isinstance(records, list):
            raise InventoryError("Inventory response has no data.Data list")

        assets = [Asset.from_record(record) for record in records]
        logger.info("Inventory query returned assets", count=len(assets))
        return assets
