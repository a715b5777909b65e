"""Bounded polling for MEV-Boost paymaster settlement events."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from hexbytes import HexBytes
from web3 import Web3
from web3.contract import Contract

from .config import DEFAULT_SETTLEMENT_POLL_INTERVAL, DEFAULT_SETTLEMENT_TIMEOUT
from .constants import SETTLEMENT_LOOKBACK_BLOCKS
from .exceptions import ValidationError
from .utils import serialise_event, to_bytes

logger = logging.getLogger(__name__)


class SettlementWaiter:
    """Wait for ``SettleUserOp`` to be emitted for a user operation hash."""

    def __init__(
        self,
        web3: Web3,
        paymaster: Contract,
        *,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Any] = time.sleep,
    ) -> None:
        self._web3 = web3
        self._paymaster = paymaster
        self._clock = clock
        self._sleep = sleep

    def wait(
        self,
        user_op_hash: str | bytes,
        deadline: float | None = None,
        poll_interval: float = DEFAULT_SETTLEMENT_POLL_INTERVAL,
    ) -> Any | None:
        """Return the first matching settlement event, or ``None`` at ``deadline``.

        ``deadline`` is an absolute epoch timestamp in seconds and defaults to
        thirty seconds from now. Transport errors propagate.
        """

        op_hash = HexBytes(to_bytes(user_op_hash))
        if len(op_hash) != 32:
            raise ValidationError(
                "User operation hash must be 32 bytes", field="user_op_hash", value=user_op_hash
            )
        if poll_interval <= 0:
            raise ValidationError(
                "Poll interval must be positive", field="poll_interval", value=poll_interval
            )

        end = deadline if deadline is not None else self._clock() + DEFAULT_SETTLEMENT_TIMEOUT
        head = self._web3.eth.block_number
        from_block = max(0, head - SETTLEMENT_LOOKBACK_BLOCKS)
        event = self._paymaster.events.SettleUserOp

        attempt = 0
        while self._clock() < end:
            attempt += 1
            logs = event.get_logs(
                argument_filters={"userOpHash": op_hash},
                from_block=from_block,
            )
            if logs:
                logger.info(
                    "Settlement found for %s in block %s",
                    op_hash.to_0x_hex(),
                    logs[0].get("blockNumber"),
                )
                logger.debug("Settlement event: %s", serialise_event(logs[0]))
                return logs[0]

            logger.debug(
                "No settlement for %s yet (attempt %s, from_block=%s)",
                op_hash.to_0x_hex(),
                attempt,
                from_block,
            )
            self._sleep(poll_interval)

        logger.info("No settlement for %s before deadline", op_hash.to_0x_hex())
        return None
