"""Type definitions and data models for the MEV-Boost account SDK."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field, fields, replace
from typing import Any, Union

from eth_abi import encode as abi_encode
from hexbytes import HexBytes
from web3 import Web3

from .constants import ZERO_ADDRESS
from .exceptions import ValidationError
from .utils import to_0x_hex, to_bytes, to_quantity

_BYTES_FIELDS = ("init_code", "call_data", "paymaster_and_data", "signature")
_QUANTITY_FIELDS = (
    "nonce",
    "call_gas_limit",
    "verification_gas_limit",
    "pre_verification_gas",
    "max_fee_per_gas",
    "max_priority_fee_per_gas",
)

_RPC_NAMES = {
    "sender": "sender",
    "nonce": "nonce",
    "init_code": "initCode",
    "call_data": "callData",
    "call_gas_limit": "callGasLimit",
    "verification_gas_limit": "verificationGasLimit",
    "pre_verification_gas": "preVerificationGas",
    "max_fee_per_gas": "maxFeePerGas",
    "max_priority_fee_per_gas": "maxPriorityFeePerGas",
    "paymaster_and_data": "paymasterAndData",
    "signature": "signature",
}


@dataclass(frozen=True)
class UserOperation:
    """ERC-4337 v0.6 user operation.

    Byte fields accept hex strings or bytes and quantity fields accept ints
    or hex quantities; both are normalised on construction.
    """

    sender: str = ZERO_ADDRESS
    nonce: int = 0
    init_code: bytes = b""
    call_data: bytes = b""
    call_gas_limit: int = 35000
    verification_gas_limit: int = 70000
    pre_verification_gas: int = 21000
    max_fee_per_gas: int = 0
    max_priority_fee_per_gas: int = 0
    paymaster_and_data: bytes = b""
    signature: bytes = b""

    def __post_init__(self) -> None:
        try:
            sender = Web3.to_checksum_address(self.sender)
        except (TypeError, ValueError) as exc:
            raise ValidationError("Invalid sender address", field="sender", value=self.sender) from exc
        object.__setattr__(self, "sender", sender)
        for name in _BYTES_FIELDS:
            object.__setattr__(self, name, to_bytes(getattr(self, name)))
        for name in _QUANTITY_FIELDS:
            object.__setattr__(self, name, to_quantity(getattr(self, name)))

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def evolve(self, **changes: Any) -> UserOperation:
        """Return a copy with the given fields replaced."""

        unknown = set(changes) - set(self.field_names())
        if unknown:
            name = sorted(unknown)[0]
            raise ValidationError(f"Unknown user operation field: {name}", field=name)
        return replace(self, **changes)

    def pack(self) -> bytes:
        """ABI-encode the operation without its signature, hashing dynamic fields."""

        return abi_encode(
            [
                "address",
                "uint256",
                "bytes32",
                "bytes32",
                "uint256",
                "uint256",
                "uint256",
                "uint256",
                "uint256",
                "bytes32",
            ],
            [
                self.sender,
                self.nonce,
                Web3.keccak(self.init_code),
                Web3.keccak(self.call_data),
                self.call_gas_limit,
                self.verification_gas_limit,
                self.pre_verification_gas,
                self.max_fee_per_gas,
                self.max_priority_fee_per_gas,
                Web3.keccak(self.paymaster_and_data),
            ],
        )

    def hash(self, entry_point: str, chain_id: int) -> HexBytes:
        """Return the EntryPoint ``getUserOpHash`` value for this operation."""

        encoded = abi_encode(
            ["bytes32", "address", "uint256"],
            [Web3.keccak(self.pack()), Web3.to_checksum_address(entry_point), chain_id],
        )
        return HexBytes(Web3.keccak(encoded))

    def to_rpc_dict(self) -> dict[str, str]:
        """Return the camelCase hex representation used by bundlers."""

        payload: dict[str, str] = {}
        for name, rpc_name in _RPC_NAMES.items():
            value = getattr(self, name)
            if name in _BYTES_FIELDS:
                payload[rpc_name] = to_0x_hex(value)
            elif name in _QUANTITY_FIELDS:
                payload[rpc_name] = hex(value)
            else:
                payload[rpc_name] = value
        return payload

    @classmethod
    def from_rpc_dict(cls, data: Mapping[str, Any]) -> UserOperation:
        values = {name: data[rpc_name] for name, rpc_name in _RPC_NAMES.items() if rpc_name in data}
        return cls(**values)


@dataclass(frozen=True)
class MEVConfig:
    """IMEVBoostAccount.MEVConfig passed through to boostExecute calls."""

    min_amount: int
    self_sponsored_after: int

    def as_tuple(self) -> tuple[int, int]:
        return (self.min_amount, self.self_sponsored_after)


MEVConfigLike = Union[MEVConfig, Sequence[int], Mapping[str, int]]


@dataclass(frozen=True)
class MiddlewareContext:
    """Operation in progress plus the chain context it will be hashed against."""

    op: UserOperation
    entry_point: str
    chain_id: int

    def user_op_hash(self) -> HexBytes:
        return self.op.hash(self.entry_point, self.chain_id)


Middleware = Callable[[MiddlewareContext], UserOperation]


@dataclass(frozen=True)
class Resolved:
    """getSenderAddress reverted with a usable sender address."""

    sender: str
    init_code: HexBytes


@dataclass(frozen=True)
class ProtocolViolation:
    """getSenderAddress returned normally, so no address can be trusted."""

    init_code: HexBytes


ResolutionResult = Union[Resolved, ProtocolViolation]


@dataclass
class SendUserOperationResponse:
    """Result of handing a signed operation to the bundler."""

    user_op_hash: str
    user_operation: UserOperation
    raw_response: Any | None = None
    details: dict[str, Any] = field(default_factory=dict)
