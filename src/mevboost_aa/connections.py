"""Connection helpers for the MEV-Boost account builder."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Sequence
from typing import Any

import requests
from web3 import HTTPProvider, Web3
from web3.contract import Contract

from .abi import (
    EntryPoint_abi,
    MEVBoostAccount_abi,
    MEVBoostAccountFactory_abi,
    MEVBoostPaymaster_abi,
)
from .config import AccountConfig
from .exceptions import BundlerError, NetworkError, ValidationError

logger = logging.getLogger(__name__)


class BundlerRpc:
    """JSON-RPC client for the bundler ``eth_*UserOperation`` namespace."""

    def __init__(self, url: str, session: requests.Session, *, timeout: float) -> None:
        self.url = url
        self._session = session
        self._timeout = timeout
        self._ids = itertools.count(1)

    def request(self, method: str, params: Sequence[Any]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": list(params),
            "id": next(self._ids),
        }
        logger.debug("Bundler request %s -> %s", method, self.url)

        try:
            response = self._session.post(
                self.url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise NetworkError(
                f"Bundler request {method} failed",
                endpoint=self.url,
                details={"error": str(exc)},
            ) from exc

        if not (200 <= response.status_code < 300):
            raise NetworkError(
                f"Bundler returned HTTP {response.status_code} for {method}",
                endpoint=self.url,
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise NetworkError(
                f"Bundler returned malformed JSON for {method}",
                endpoint=self.url,
                status_code=response.status_code,
                details={"error": str(exc)},
            ) from exc

        if not isinstance(body, dict):
            raise NetworkError(
                f"Bundler returned unexpected payload for {method}",
                endpoint=self.url,
                details={"body": body},
            )

        error = body.get("error")
        if error is not None:
            if not isinstance(error, dict):
                error = {"message": str(error)}
            raise BundlerError(
                error.get("message", "Unknown bundler error"),
                code=error.get("code"),
                endpoint=self.url,
                details={"method": method, "data": error.get("data")},
            )

        return body.get("result")


class AccountConnections:
    """Manage the web3 provider, bundler transport and contract handles."""

    def __init__(
        self,
        config: AccountConfig,
        rpc_url: str,
        *,
        web3: Web3 | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config
        self.rpc_url = rpc_url
        self._injected_web3 = web3
        self._session = session
        self._web3: Web3 | None = None
        self._bundler: BundlerRpc | None = None
        self._entry_point: Contract | None = None
        self._factory: Contract | None = None
        self._paymaster: Contract | None = None
        self._chain_id: int | None = None
        self._connected = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def connect(self) -> None:
        """Initialise the provider, bundler transport and contract handles."""

        if self._injected_web3 is not None:
            web3 = self._injected_web3
        else:
            web3 = self._build_web3(self.rpc_url)
        self._web3 = web3

        self._entry_point = self._bind(web3, self.config.entry_point, EntryPoint_abi, "entry_point")
        self._factory = self._bind(
            web3, self.config.factory, MEVBoostAccountFactory_abi, "factory"
        )
        self._paymaster = self._bind(
            web3, self.config.paymaster, MEVBoostPaymaster_abi, "paymaster"
        )

        try:
            self._chain_id = web3.eth.chain_id
        except Exception as exc:
            raise NetworkError(
                "Unable to read chain id", endpoint=self.rpc_url, details={"error": str(exc)}
            ) from exc

        if self._session is None:
            self._session = requests.Session()
        bundler_url = self.config.override_bundler_rpc or self.rpc_url
        self._bundler = BundlerRpc(bundler_url, self._session, timeout=self.config.request_timeout)

        self._connected = True
        logger.info("Connected to RPC at %s (chain_id=%s)", self.rpc_url, self._chain_id)
        if self.config.override_bundler_rpc:
            logger.info("Routing bundler requests to %s", bundler_url)

    def disconnect(self) -> None:
        self._web3 = None
        self._bundler = None
        self._entry_point = None
        self._factory = None
        self._paymaster = None
        self._chain_id = None
        self._connected = False

    def is_connected(self) -> bool:
        return self._connected and self._web3 is not None and self._entry_point is not None

    def ensure_connected(self) -> None:
        if not self.is_connected():
            raise NetworkError("Account connector is not connected", endpoint=self.rpc_url)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def web3(self) -> Web3:
        if self._web3 is None:
            raise NetworkError("RPC provider not connected", endpoint=self.rpc_url)
        return self._web3

    @property
    def bundler(self) -> BundlerRpc:
        if self._bundler is None:
            raise NetworkError("Bundler transport not connected", endpoint=self.rpc_url)
        return self._bundler

    @property
    def chain_id(self) -> int:
        if self._chain_id is None:
            raise NetworkError("Chain id unknown; call connect() first", endpoint=self.rpc_url)
        return self._chain_id

    @property
    def entry_point(self) -> Contract:
        if self._entry_point is None:
            raise NetworkError(
                "EntryPoint contract not available; call connect() first",
                endpoint=self.rpc_url,
            )
        return self._entry_point

    @property
    def factory(self) -> Contract:
        if self._factory is None:
            raise NetworkError(
                "Account factory not available; call connect() first",
                endpoint=self.rpc_url,
            )
        return self._factory

    @property
    def paymaster(self) -> Contract:
        if self._paymaster is None:
            raise NetworkError(
                "MEV-Boost paymaster not available; call connect() first",
                endpoint=self.rpc_url,
            )
        return self._paymaster

    def account_contract(self, address: str) -> Contract:
        """Bind the MEVBoostAccount ABI to ``address``."""

        return self._bind(self.web3, address, MEVBoostAccount_abi, "account")

    # ------------------------------------------------------------------
    # Internal wiring
    # ------------------------------------------------------------------
    def _build_web3(self, rpc_url: str) -> Web3:
        provider = HTTPProvider(rpc_url, request_kwargs={"timeout": self.config.request_timeout})
        web3 = Web3(provider)
        if not web3.is_connected():
            raise NetworkError("Unable to connect to RPC", endpoint=rpc_url)
        return web3

    @staticmethod
    def _bind(web3: Web3, address: str, abi: list[dict[str, Any]], name: str) -> Contract:
        try:
            checksum = Web3.to_checksum_address(address)
        except (TypeError, ValueError) as exc:
            raise ValidationError(
                f"Invalid {name} address", field=name, value=address
            ) from exc
        return web3.eth.contract(address=checksum, abi=abi)
