"""MEV-Boost account abstraction SDK.

Builds, signs and tracks ERC-4337 user operations for MEV-Boost smart
accounts, including priority-fee sharing ``boostExecute`` calls settled by
the MEV-Boost paymaster.
"""

from .account import MEVBoostAccount
from .builder import UserOperationBuilder
from .client import UserOperationClient
from .config import AccountConfig
from .connections import AccountConnections, BundlerRpc
from .constants import ERC4337
from .exceptions import (
    AddressResolutionError,
    BundlerError,
    MEVBoostAAError,
    MiddlewareError,
    NetworkError,
    ValidationError,
)
from .middleware import (
    eoa_signature,
    estimate_user_operation_gas,
    get_gas_price,
    verifying_paymaster,
)
from .resolver import build_init_code, resolve_account, resolve_or_fail
from .settlement import SettlementWaiter
from .types import (
    MEVConfig,
    MiddlewareContext,
    ProtocolViolation,
    Resolved,
    SendUserOperationResponse,
    UserOperation,
)

__version__ = "0.1.0"

__all__ = [
    # Builders
    "MEVBoostAccount",
    "UserOperationBuilder",
    "UserOperationClient",
    # Configuration and connections
    "AccountConfig",
    "AccountConnections",
    "BundlerRpc",
    "ERC4337",
    # Types
    "UserOperation",
    "MEVConfig",
    "MiddlewareContext",
    "Resolved",
    "ProtocolViolation",
    "SendUserOperationResponse",
    # Exceptions
    "MEVBoostAAError",
    "NetworkError",
    "BundlerError",
    "ValidationError",
    "AddressResolutionError",
    "MiddlewareError",
    # Middleware
    "get_gas_price",
    "estimate_user_operation_gas",
    "eoa_signature",
    "verifying_paymaster",
    # Resolution and settlement
    "build_init_code",
    "resolve_or_fail",
    "resolve_account",
    "SettlementWaiter",
]
