"""Configuration containers for the MEV-Boost account builder."""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from .constants import ERC4337
from .exceptions import ValidationError

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .types import MiddlewareContext, UserOperation

DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_SETTLEMENT_TIMEOUT = 30.0
DEFAULT_SETTLEMENT_POLL_INTERVAL = 5.0


@dataclass(frozen=True)
class AccountConfig:
    """Addresses and overrides used to assemble a MEV-Boost account."""

    factory: str
    paymaster: str
    entry_point: str = ERC4337.ENTRY_POINT.value
    override_bundler_rpc: str | None = None
    paymaster_middleware: Callable[[MiddlewareContext], UserOperation] | None = None
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def with_overrides(self, **changes: Any) -> AccountConfig:
        """Return a copy with the given fields replaced."""

        return replace(self, **changes)

    @classmethod
    def from_env(cls, **overrides: Any) -> AccountConfig:
        """Build a configuration from ``MEVBOOST_*`` environment variables."""

        factory = overrides.pop("factory", None) or os.getenv("MEVBOOST_FACTORY")
        if not factory:
            raise ValidationError("MEVBOOST_FACTORY is not set", field="factory")
        paymaster = overrides.pop("paymaster", None) or os.getenv("MEVBOOST_PAYMASTER")
        if not paymaster:
            raise ValidationError("MEVBOOST_PAYMASTER is not set", field="paymaster")

        values: dict[str, Any] = {"factory": factory, "paymaster": paymaster}
        entry_point = os.getenv("ENTRY_POINT")
        if entry_point:
            values["entry_point"] = entry_point
        bundler_rpc = os.getenv("BUNDLER_RPC")
        if bundler_rpc:
            values["override_bundler_rpc"] = bundler_rpc
        timeout = os.getenv("REQUEST_TIMEOUT")
        if timeout:
            try:
                values["request_timeout"] = float(timeout)
            except ValueError as exc:
                raise ValidationError(
                    "REQUEST_TIMEOUT must be a number", field="request_timeout", value=timeout
                ) from exc
        values.update(overrides)
        return cls(**values)
