"""Submit built user operations to a bundler."""

from __future__ import annotations

import logging
from typing import Any

from .builder import UserOperationBuilder
from .connections import AccountConnections
from .exceptions import NetworkError
from .types import SendUserOperationResponse, UserOperation

logger = logging.getLogger(__name__)


class UserOperationClient:
    """Build operations against the connected EntryPoint and hand them to a bundler."""

    def __init__(self, connections: AccountConnections) -> None:
        self._connections = connections

    def build_user_operation(self, builder: UserOperationBuilder) -> UserOperation:
        self._connections.ensure_connected()
        return builder.build_op(self._connections.entry_point.address, self._connections.chain_id)

    def send_user_operation(
        self, builder: UserOperationBuilder, *, dry_run: bool = False
    ) -> SendUserOperationResponse:
        """Build, sign and submit the builder's operation.

        With ``dry_run`` the hash is computed locally and nothing is sent.
        The builder is reset to its defaults once the operation is handed off.
        """

        op = self.build_user_operation(builder)
        entry_point = self._connections.entry_point.address

        if dry_run:
            user_op_hash = op.hash(entry_point, self._connections.chain_id).to_0x_hex()
            logger.info("Dry run user operation %s from %s", user_op_hash, op.sender)
            builder.reset_op()
            return SendUserOperationResponse(
                user_op_hash=user_op_hash, user_operation=op, details={"dry_run": True}
            )

        bundler = self._connections.bundler
        result = bundler.request("eth_sendUserOperation", [op.to_rpc_dict(), entry_point])
        if not isinstance(result, str):
            raise NetworkError(
                "Bundler did not return a user operation hash",
                endpoint=bundler.url,
                details={"result": result},
            )

        logger.info("User operation %s sent from %s", result, op.sender)
        builder.reset_op()
        return SendUserOperationResponse(
            user_op_hash=result, user_operation=op, raw_response=result
        )

    def get_user_operation_receipt(self, user_op_hash: str) -> dict[str, Any] | None:
        """Return the bundler receipt, or ``None`` while the operation is pending."""

        return self._connections.bundler.request("eth_getUserOperationReceipt", [user_op_hash])
