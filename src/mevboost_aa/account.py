"""MEV-Boost smart account user operation builder."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from eth_account.messages import encode_defunct
from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from web3 import Web3
from web3.contract import Contract

from .builder import UserOperationBuilder
from .config import DEFAULT_SETTLEMENT_POLL_INTERVAL, AccountConfig
from .connections import AccountConnections
from .constants import ACCOUNT_SALT, DUMMY_SIGNATURE_MESSAGE, NONCE_KEY
from .exceptions import ValidationError
from .middleware import (
    MessageSigner,
    eoa_signature,
    estimate_user_operation_gas,
    get_gas_price,
)
from .resolver import resolve_account
from .settlement import SettlementWaiter
from .types import MEVConfig, MEVConfigLike, MiddlewareContext, UserOperation
from .utils import to_bytes, to_quantity

logger = logging.getLogger(__name__)


class MEVBoostAccount(UserOperationBuilder):
    """Build user operations for a MEVBoostAccount owned by ``signer``.

    Use :meth:`create`; it resolves the counterfactual account address and
    registers the middleware stack before handing the builder back.
    """

    def __init__(self, signer: MessageSigner, connections: AccountConnections) -> None:
        super().__init__()
        self._signer = signer
        self._connections = connections
        self._init_code = HexBytes(b"")
        self._proxy: Contract | None = None

    @classmethod
    def create(
        cls,
        signer: MessageSigner,
        rpc_url: str,
        config: AccountConfig,
        *,
        connections: AccountConnections | None = None,
    ) -> MEVBoostAccount:
        if connections is None:
            connections = AccountConnections(config, rpc_url)
        elif connections.config != config:
            raise ValidationError(
                "Injected connections were built from a different AccountConfig",
                field="config",
                details={"connections": repr(connections.config), "config": repr(config)},
            )
        elif connections.rpc_url != rpc_url:
            raise ValidationError(
                "Injected connections target a different RPC URL",
                field="rpc_url",
                value=rpc_url,
                details={"connections": connections.rpc_url},
            )
        if not connections.is_connected():
            connections.connect()

        instance = cls(signer, connections)

        resolved = resolve_account(connections, signer.address, salt=ACCOUNT_SALT)
        instance._init_code = resolved.init_code
        instance._proxy = connections.account_contract(resolved.sender)

        dummy = signer.sign_message(
            encode_defunct(primitive=bytes(Web3.keccak(hexstr=DUMMY_SIGNATURE_MESSAGE)))
        )
        instance.use_defaults(sender=resolved.sender, signature=bytes(dummy.signature))

        instance.use_middleware(instance._resolve_account, name="resolve_account")
        instance.use_middleware(get_gas_price(connections.web3), name="get_gas_price")
        if config.paymaster_middleware is not None:
            instance.use_middleware(config.paymaster_middleware, name="paymaster_middleware")
        else:
            instance.use_middleware(
                estimate_user_operation_gas(connections.bundler),
                name="estimate_user_operation_gas",
            )
        instance.use_middleware(eoa_signature(signer), name="eoa_signature")

        logger.debug("Middleware stack: %s", ", ".join(instance.middleware_names))
        return instance

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def signer(self) -> MessageSigner:
        return self._signer

    @property
    def connections(self) -> AccountConnections:
        return self._connections

    @property
    def proxy(self) -> Contract:
        if self._proxy is None:
            raise ValidationError("Account address not resolved; use create()", field="proxy")
        return self._proxy

    @property
    def proxy_address(self) -> ChecksumAddress:
        return self.proxy.address

    @property
    def init_code(self) -> HexBytes:
        return self._init_code

    # ------------------------------------------------------------------
    # Middleware
    # ------------------------------------------------------------------
    def _resolve_account(self, ctx: MiddlewareContext) -> UserOperation:
        nonce = self._connections.entry_point.functions.getNonce(ctx.op.sender, NONCE_KEY).call()
        nonce = to_quantity(nonce)
        init_code = self._init_code if nonce == 0 else b""
        logger.debug("Account %s nonce=%s deploy=%s", ctx.op.sender, nonce, nonce == 0)
        return ctx.op.evolve(nonce=nonce, init_code=init_code)

    # ------------------------------------------------------------------
    # Call data
    # ------------------------------------------------------------------
    def execute(self, to: str, value: int, data: bytes | str) -> MEVBoostAccount:
        call_data = self.proxy.encode_abi(
            "execute", args=[_address(to), to_quantity(value), to_bytes(data)]
        )
        self.set_call_data(call_data)
        return self

    def execute_batch(
        self, to: Sequence[str], value: Sequence[int], data: Sequence[bytes | str]
    ) -> MEVBoostAccount:
        targets, values, payloads = _batch(to, value, data)
        call_data = self.proxy.encode_abi("executeBatch", args=[targets, values, payloads])
        self.set_call_data(call_data)
        return self

    def boost_execute(
        self, config: MEVConfigLike, to: str, value: int, data: bytes | str
    ) -> MEVBoostAccount:
        call_data = self.proxy.encode_abi(
            "boostExecute",
            args=[_mev_config(config), _address(to), to_quantity(value), to_bytes(data)],
        )
        self.set_call_data(call_data)
        return self

    def boost_execute_batch(
        self,
        config: MEVConfigLike,
        to: Sequence[str],
        value: Sequence[int],
        data: Sequence[bytes | str],
    ) -> MEVBoostAccount:
        targets, values, payloads = _batch(to, value, data)
        call_data = self.proxy.encode_abi(
            "boostExecuteBatch", args=[_mev_config(config), targets, values, payloads]
        )
        self.set_call_data(call_data)
        return self

    # ------------------------------------------------------------------
    # Finalisation
    # ------------------------------------------------------------------
    def build(self) -> UserOperation:
        """Run the middleware stack against the connected EntryPoint."""

        return self.build_op(self._connections.entry_point.address, self._connections.chain_id)

    def boost_wait(
        self,
        user_op_hash: str | bytes,
        deadline: float | None = None,
        poll_interval: float = DEFAULT_SETTLEMENT_POLL_INTERVAL,
    ) -> Any | None:
        """Wait for the paymaster to settle ``user_op_hash``; ``None`` on timeout."""

        waiter = SettlementWaiter(self._connections.web3, self._connections.paymaster)
        return waiter.wait(user_op_hash, deadline=deadline, poll_interval=poll_interval)


def _address(value: str) -> ChecksumAddress:
    try:
        return Web3.to_checksum_address(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError("Invalid target address", field="to", value=value) from exc


def _batch(
    to: Sequence[str], value: Sequence[int], data: Sequence[bytes | str]
) -> tuple[list[ChecksumAddress], list[int], list[bytes]]:
    if not (len(to) == len(value) == len(data)):
        raise ValidationError(
            "Batch arrays must have equal length",
            field="batch",
            value={"to": len(to), "value": len(value), "data": len(data)},
        )
    return (
        [_address(item) for item in to],
        [to_quantity(item) for item in value],
        [to_bytes(item) for item in data],
    )


def _mev_config(config: MEVConfigLike) -> tuple[int, int]:
    if isinstance(config, MEVConfig):
        return config.as_tuple()
    if isinstance(config, Mapping):
        min_amount = config.get("minAmount", config.get("min_amount"))
        self_sponsored_after = config.get(
            "selfSponsoredAfter", config.get("self_sponsored_after")
        )
        if min_amount is None or self_sponsored_after is None:
            raise ValidationError("Incomplete MEV config", field="config", value=dict(config))
        return (to_quantity(min_amount), to_quantity(self_sponsored_after))
    if isinstance(config, Sequence) and not isinstance(config, str | bytes) and len(config) == 2:
        return (to_quantity(config[0]), to_quantity(config[1]))
    raise ValidationError("Unsupported MEV config", field="config", value=config)
