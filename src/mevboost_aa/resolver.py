"""Counterfactual address resolution for MEV-Boost accounts.

The EntryPoint's ``getSenderAddress`` never returns: it always reverts with
``SenderAddressResult(address sender)``. The address is therefore recovered
from the revert data of a static call, and a call that *succeeds* means the
result cannot be trusted.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from eth_abi import decode as abi_decode
from eth_abi.exceptions import DecodingError
from hexbytes import HexBytes
from web3 import Web3
from web3.contract import Contract
from web3.exceptions import ContractLogicError

from .constants import ACCOUNT_SALT, SENDER_ADDRESS_RESULT_SELECTOR
from .exceptions import AddressResolutionError, ValidationError
from .types import ProtocolViolation, Resolved, ResolutionResult
from .utils import hex_concat, to_bytes

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .connections import AccountConnections

logger = logging.getLogger(__name__)


def build_init_code(
    factory: Contract, owner: str, paymaster: str, salt: int = ACCOUNT_SALT
) -> HexBytes:
    """Return ``factory ++ createAccount(owner, paymaster, salt)``."""

    call_data = factory.encode_abi(
        "createAccount",
        args=[Web3.to_checksum_address(owner), Web3.to_checksum_address(paymaster), salt],
    )
    return hex_concat(factory.address, call_data)


def resolve_or_fail(entry_point: Contract, init_code: bytes) -> ResolutionResult:
    """Simulate ``getSenderAddress`` and decode the sender from its revert.

    Reverts that do not carry a usable ``SenderAddressResult`` are re-raised
    unchanged, as are transport errors.
    """

    try:
        entry_point.functions.getSenderAddress(bytes(init_code)).call()
    except ContractLogicError as exc:
        sender = _sender_from_revert(exc)
        if sender is None:
            raise
        return Resolved(sender=sender, init_code=HexBytes(init_code))

    return ProtocolViolation(init_code=HexBytes(init_code))


def resolve_account(
    connections: AccountConnections, owner: str, *, salt: int = ACCOUNT_SALT
) -> Resolved:
    """Build the init code for ``owner`` and resolve the account address."""

    init_code = build_init_code(connections.factory, owner, connections.paymaster.address, salt)
    result = resolve_or_fail(connections.entry_point, init_code)

    if isinstance(result, ProtocolViolation):
        raise AddressResolutionError(
            "getSenderAddress: unexpected result",
            init_code=result.init_code.to_0x_hex(),
            details={"owner": owner, "entry_point": connections.entry_point.address},
        )

    logger.info("Resolved MEV-Boost account %s for signer %s", result.sender, owner)
    return result


def _sender_from_revert(exc: ContractLogicError) -> str | None:
    raw = _revert_data(exc)
    if len(raw) < 4 + 32 or raw[:4] != SENDER_ADDRESS_RESULT_SELECTOR:
        return None

    try:
        (sender,) = abi_decode(["address"], raw[4:])
    except DecodingError:
        return None

    if int(sender, 16) == 0:
        return None
    return Web3.to_checksum_address(sender)


def _revert_data(exc: ContractLogicError) -> bytes:
    candidates: list[Any] = [getattr(exc, "data", None)]
    candidates.extend(exc.args)
    for candidate in candidates:
        if isinstance(candidate, dict):
            candidate = candidate.get("data")
        if isinstance(candidate, bytes | bytearray):
            return bytes(candidate)
        if isinstance(candidate, str) and candidate.lower().startswith("0x"):
            try:
                return to_bytes(candidate)
            except ValidationError:
                continue
    return b""
