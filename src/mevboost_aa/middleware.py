"""Default user operation middleware."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

from eth_account.messages import SignableMessage, encode_defunct
from web3 import Web3

from .connections import BundlerRpc
from .constants import GAS_PRICE_BUFFER_PERCENT
from .exceptions import NetworkError
from .types import Middleware, MiddlewareContext, UserOperation
from .utils import to_quantity

logger = logging.getLogger(__name__)


class MessageSigner(Protocol):
    """Anything that can sign an EIP-191 message, e.g. ``LocalAccount``."""

    address: str

    def sign_message(self, signable_message: SignableMessage) -> Any: ...


def _with_buffer(value: int) -> int:
    return value + value * GAS_PRICE_BUFFER_PERCENT // 100


def get_gas_price(web3: Web3) -> Middleware:
    """Fill fee fields from the node, preferring EIP-1559 pricing."""

    def gas_price(ctx: MiddlewareContext) -> UserOperation:
        try:
            tip = _with_buffer(int(web3.eth.max_priority_fee))
            block = web3.eth.get_block("latest")
            base_fee = block.get("baseFeePerGas")
            max_fee = tip if base_fee is None else int(base_fee) * 2 + tip
            logger.debug("EIP-1559 gas price: max_fee=%s tip=%s", max_fee, tip)
            return ctx.op.evolve(max_fee_per_gas=max_fee, max_priority_fee_per_gas=tip)
        except Exception as exc:
            logger.warning("EIP-1559 gas price unavailable, using legacy gas price: %s", exc)

        legacy = _with_buffer(int(web3.eth.gas_price))
        return ctx.op.evolve(max_fee_per_gas=legacy, max_priority_fee_per_gas=legacy)

    return gas_price


def estimate_user_operation_gas(bundler: BundlerRpc) -> Middleware:
    """Fill gas limits from ``eth_estimateUserOperationGas``."""

    def estimate_gas(ctx: MiddlewareContext) -> UserOperation:
        estimate = bundler.request(
            "eth_estimateUserOperationGas", [ctx.op.to_rpc_dict(), ctx.entry_point]
        )
        if not isinstance(estimate, Mapping):
            raise NetworkError(
                "Bundler returned no gas estimate",
                endpoint=bundler.url,
                details={"result": estimate},
            )

        verification = estimate.get("verificationGasLimit", estimate.get("verificationGas"))
        logger.debug("Gas estimate: %s", dict(estimate))
        return ctx.op.evolve(
            pre_verification_gas=to_quantity(estimate["preVerificationGas"]),
            verification_gas_limit=to_quantity(verification),
            call_gas_limit=to_quantity(estimate["callGasLimit"]),
        )

    return estimate_gas


def eoa_signature(signer: MessageSigner) -> Middleware:
    """Sign the user operation hash with an externally owned account."""

    def signature(ctx: MiddlewareContext) -> UserOperation:
        user_op_hash = ctx.user_op_hash()
        signed = signer.sign_message(encode_defunct(primitive=bytes(user_op_hash)))
        return ctx.op.evolve(signature=bytes(signed.signature))

    return signature


def verifying_paymaster(bundler: BundlerRpc, context: Mapping[str, Any]) -> Middleware:
    """Request sponsorship through ``pm_sponsorUserOperation``.

    Suitable as ``AccountConfig.paymaster_middleware``: the paymaster service
    returns ``paymasterAndData`` together with gas limits that account for it.
    """

    def sponsor(ctx: MiddlewareContext) -> UserOperation:
        op = ctx.op.evolve(
            verification_gas_limit=ctx.op.verification_gas_limit * 3,
        )
        result = bundler.request(
            "pm_sponsorUserOperation", [op.to_rpc_dict(), ctx.entry_point, dict(context)]
        )
        if not isinstance(result, Mapping) or "paymasterAndData" not in result:
            raise NetworkError(
                "Paymaster did not return paymasterAndData",
                endpoint=bundler.url,
                details={"result": result},
            )

        changes: dict[str, Any] = {"paymaster_and_data": result["paymasterAndData"]}
        for rpc_name, name in (
            ("preVerificationGas", "pre_verification_gas"),
            ("verificationGasLimit", "verification_gas_limit"),
            ("callGasLimit", "call_gas_limit"),
        ):
            if result.get(rpc_name) is not None:
                changes[name] = to_quantity(result[rpc_name])
        return op.evolve(**changes)

    return sponsor
