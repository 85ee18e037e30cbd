"""RateSource: Raw vault figures consumed by the price engine.

The engine never caches these readings; every operation asks again.

Two implementations are provided:
    - ContractRateSource reads an EVM vault contract through web3
    - HttpRateSource reads a JSON snapshot endpoint through httpx

.. code-block:: python

    >>> source = ContractRateSource.from_address(w3, "0x5FbDB2315678afecb367f032d93F642f64180aa3")
    >>> source.total_assets()
    1052300000000000000000
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

import httpx
from web3 import Web3
from web3.exceptions import Web3Exception

from .errors import RateSourceError

if TYPE_CHECKING:
    from web3.contract import Contract

logger = logging.getLogger(__name__)

# Minimal ABI covering the view functions the engine reads.
RATE_SOURCE_ABI: list[dict[str, Any]] = [
    {
        "inputs": [],
        "name": "totalAssets",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "totalSupply",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "bool", "name": "includeFee", "type": "bool"}],
        "name": "getAum",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
]


class RateSource(ABC):
    """Abstract provider of vault totals.

    All figures are raw unsigned integers as reported upstream.
    """

    @abstractmethod
    def total_assets(self) -> int:
        """Return the total assets held by the wrapped-asset vault."""
        pass

    @abstractmethod
    def total_supply(self) -> int:
        """Return the total share supply."""
        pass

    @abstractmethod
    def total_aum(self, include_fee: bool) -> int:
        """Return the assets under management.

        :param include_fee: Whether pending fees are counted.
        """
        pass

    def asset_totals(self) -> tuple[int, int]:
        """Return ``(total_assets, total_supply)`` for one exchange-rate read."""
        return self.total_assets(), self.total_supply()

    def aum_totals(self, include_fee: bool) -> tuple[int, int]:
        """Return ``(total_aum, total_supply)`` for one underlying-price read.

        :param include_fee: Whether pending fees are counted.
        """
        return self.total_aum(include_fee), self.total_supply()

    def close(self) -> None:
        """Release any connection held by the source."""
        pass


class ContractRateSource(RateSource):
    """Reads vault totals from an on-chain contract.

    :ivar contract: Web3 contract exposing totalAssets, totalSupply and getAum.
    """

    def __init__(self, contract: Contract) -> None:
        """Initialize the source.

        :param contract: Web3 contract instance.
        """
        self.contract = contract

    @classmethod
    def from_address(cls, w3: Web3, address: str) -> ContractRateSource:
        """Bind the rate source ABI to an address.

        :param w3: Connected Web3 instance.
        :param address: Contract address, any casing.
        :returns: New ContractRateSource.
        """
        contract = w3.eth.contract(
            address=Web3.to_checksum_address(address), abi=RATE_SOURCE_ABI
        )
        return cls(contract)

    def _call(self, name: str, *args: Any) -> int:
        """Call a view function on the contract.

        :raises RateSourceError: If the RPC call or the contract fails.
        """
        try:
            value = int(getattr(self.contract.functions, name)(*args).call())
        except (Web3Exception, OSError) as e:
            # requests and socket errors are both OSError subclasses
            raise RateSourceError(
                f"{self.contract.address}: {name}() call failed: {e}"
            ) from e
        logger.debug(f"{self.contract.address}: {name}{args}={value}")
        return value

    def total_assets(self) -> int:
        return self._call("totalAssets")

    def total_supply(self) -> int:
        return self._call("totalSupply")

    def total_aum(self, include_fee: bool) -> int:
        return self._call("getAum", include_fee)

    def __repr__(self) -> str:
        return f"ContractRateSource({self.contract.address!r})"


class HttpRateSource(RateSource):
    """Reads vault totals from a JSON snapshot endpoint.

    The endpoint answers ``GET <url>?includeFee=<true|false>`` with an object
    holding ``totalAssets``, ``totalSupply`` and ``totalAum``. Values must be
    JSON integers or decimal integer strings. One snapshot backs each
    paired reading.

    :cvar DEFAULT_TIMEOUT: Default HTTP request timeout in seconds.
    :ivar url: Snapshot endpoint URL.
    :ivar timeout: Request timeout in seconds.
    """

    DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        url: str,
        client: httpx.Client | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the source.

        :param url: Snapshot endpoint URL.
        :param client: Optional preconfigured httpx client.
        :param timeout: Request timeout in seconds (default: 10).
        """
        self.url = url
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self.client = client or httpx.Client(follow_redirects=True)

    def _snapshot(self, include_fee: bool = False) -> dict[str, Any]:
        """Fetch one snapshot from the endpoint.

        :param include_fee: Value of the includeFee query parameter.
        :returns: Decoded JSON object.
        :raises RateSourceError: On transport errors, non-2xx responses or
            a malformed body.
        """
        params = {"includeFee": "true" if include_fee else "false"}
        try:
            response = self.client.get(self.url, params=params, timeout=self.timeout)
        except httpx.TimeoutException as e:
            raise RateSourceError(f"Request timeout: {e}") from e
        except httpx.RequestError as e:
            raise RateSourceError(f"Request failed: {e}") from e

        if not response.is_success:
            logger.debug(
                "HTTP GET %s failed with status %s: %s",
                self.url,
                response.status_code,
                response.text[:200],
            )
            raise RateSourceError(
                f"HTTP {response.status_code}: {response.text[:200]}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise RateSourceError(f"Invalid JSON from {self.url}: {e}") from e
        if not isinstance(data, dict):
            raise RateSourceError(f"Expected JSON object from {self.url}")
        return data

    def _field(self, data: dict[str, Any], field: str) -> int:
        """Extract a non-negative integer field from a snapshot.

        Only JSON integers and decimal integer strings are accepted.
        """
        if field not in data:
            raise RateSourceError(f"Missing '{field}' in response from {self.url}")
        raw = data[field]
        if isinstance(raw, bool) or not isinstance(raw, (int, str)):
            raise RateSourceError(f"Invalid '{field}' value: {raw!r}")
        try:
            value = int(raw)
        except ValueError as e:
            raise RateSourceError(f"Invalid '{field}' value: {raw!r}") from e
        if value < 0:
            raise RateSourceError(f"Negative '{field}' value: {value}")
        logger.debug(f"{self.url}: {field}={value}")
        return value

    def _read(self, *fields: str, include_fee: bool = False) -> tuple[int, ...]:
        data = self._snapshot(include_fee)
        return tuple(self._field(data, field) for field in fields)

    def total_assets(self) -> int:
        return self._read("totalAssets")[0]

    def total_supply(self) -> int:
        return self._read("totalSupply")[0]

    def total_aum(self, include_fee: bool) -> int:
        return self._read("totalAum", include_fee=include_fee)[0]

    def asset_totals(self) -> tuple[int, int]:
        assets, supply = self._read("totalAssets", "totalSupply")
        return assets, supply

    def aum_totals(self, include_fee: bool) -> tuple[int, int]:
        aum, supply = self._read("totalAum", "totalSupply", include_fee=include_fee)
        return aum, supply

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self.client.close()

    def __repr__(self) -> str:
        return f"HttpRateSource({self.url!r})"
