"""Generic user operation builder with an ordered middleware stack."""

from __future__ import annotations

import logging
from typing import Any

from .exceptions import MiddlewareError, ValidationError
from .types import Middleware, MiddlewareContext, UserOperation

logger = logging.getLogger(__name__)


class UserOperationBuilder:
    """Hold an operation in progress and the middleware that completes it.

    Middleware runs in registration order. Each step receives the operation
    produced by the previous one and returns the next; the first failure
    aborts the build and leaves the current operation untouched.
    """

    def __init__(self) -> None:
        self._default_op = UserOperation()
        self._current_op = self._default_op
        self._middleware: list[tuple[str, Middleware]] = []

    # ------------------------------------------------------------------
    # Operation state
    # ------------------------------------------------------------------
    def get_op(self) -> UserOperation:
        return self._current_op

    def set_partial(self, **fields: Any) -> UserOperationBuilder:
        self._current_op = self._current_op.evolve(**fields)
        return self

    def set_sender(self, sender: str) -> UserOperationBuilder:
        return self.set_partial(sender=sender)

    def set_nonce(self, nonce: int) -> UserOperationBuilder:
        return self.set_partial(nonce=nonce)

    def set_init_code(self, init_code: bytes | str) -> UserOperationBuilder:
        return self.set_partial(init_code=init_code)

    def set_call_data(self, call_data: bytes | str) -> UserOperationBuilder:
        return self.set_partial(call_data=call_data)

    def set_call_gas_limit(self, gas: int) -> UserOperationBuilder:
        return self.set_partial(call_gas_limit=gas)

    def set_verification_gas_limit(self, gas: int) -> UserOperationBuilder:
        return self.set_partial(verification_gas_limit=gas)

    def set_pre_verification_gas(self, gas: int) -> UserOperationBuilder:
        return self.set_partial(pre_verification_gas=gas)

    def set_max_fee_per_gas(self, fee: int) -> UserOperationBuilder:
        return self.set_partial(max_fee_per_gas=fee)

    def set_max_priority_fee_per_gas(self, fee: int) -> UserOperationBuilder:
        return self.set_partial(max_priority_fee_per_gas=fee)

    def set_paymaster_and_data(self, data: bytes | str) -> UserOperationBuilder:
        return self.set_partial(paymaster_and_data=data)

    def set_signature(self, signature: bytes | str) -> UserOperationBuilder:
        return self.set_partial(signature=signature)

    def use_defaults(self, **fields: Any) -> UserOperationBuilder:
        """Set fields on both the default and the current operation."""

        self._default_op = self._default_op.evolve(**fields)
        self._current_op = self._current_op.evolve(**fields)
        return self

    def reset_defaults(self) -> UserOperationBuilder:
        self._default_op = UserOperation()
        return self

    def reset_op(self) -> UserOperationBuilder:
        """Discard the current operation and start again from the defaults."""

        self._current_op = self._default_op
        return self

    # ------------------------------------------------------------------
    # Middleware
    # ------------------------------------------------------------------
    @property
    def middleware_names(self) -> list[str]:
        return [name for name, _ in self._middleware]

    def use_middleware(self, fn: Middleware, name: str | None = None) -> UserOperationBuilder:
        if not callable(fn):
            raise ValidationError("Middleware must be callable", field="middleware", value=fn)
        label = name or getattr(fn, "__name__", None) or type(fn).__name__
        self._middleware.append((label, fn))
        return self

    def reset_middleware(self) -> UserOperationBuilder:
        self._middleware = []
        return self

    def build_op(self, entry_point: str, chain_id: int) -> UserOperation:
        """Run the middleware stack over the current operation."""

        op = self._current_op
        for name, fn in self._middleware:
            logger.debug("Running middleware %s", name)
            ctx = MiddlewareContext(op=op, entry_point=entry_point, chain_id=chain_id)
            try:
                result = fn(ctx)
            except Exception as exc:
                raise MiddlewareError(
                    f"Middleware {name} failed: {exc}",
                    middleware=name,
                    details={"error": str(exc)},
                ) from exc

            if not isinstance(result, UserOperation):
                raise MiddlewareError(
                    f"Middleware {name} returned {type(result).__name__}, expected UserOperation",
                    middleware=name,
                )
            op = result

        self._current_op = op
        return op
