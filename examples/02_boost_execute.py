"""Example: route an operation through MEV-Boost and wait for settlement."""

from __future__ import annotations

import logging
import os
import time

from dotenv import load_dotenv
from eth_account import Account
from web3 import Web3

from mevboost_aa import AccountConfig, MEVBoostAccount, MEVConfig, UserOperationClient

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOGLEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

MIN_AMOUNT_WEI = Web3.to_wei(0.00001, "ether")
SELF_SPONSOR_DELAY = 60  # seconds before the account pays for itself


def main() -> None:
    """Submit boostExecute() and poll the paymaster for SettleUserOp."""

    private_key = os.getenv("PRIVATE_KEY")
    if not private_key:
        raise ValueError("PRIVATE_KEY not found in environment variables")
    rpc_url = os.getenv("RPC_URL")
    if not rpc_url:
        raise ValueError("RPC_URL not found in environment variables")
    target = os.getenv("TARGET")
    if not target:
        raise ValueError("TARGET not found in environment variables")

    signer = Account.from_key(private_key)
    account = MEVBoostAccount.create(signer, rpc_url, AccountConfig.from_env())
    client = UserOperationClient(account.connections)

    config = MEVConfig(
        min_amount=MIN_AMOUNT_WEI,
        self_sponsored_after=int(time.time()) + SELF_SPONSOR_DELAY,
    )
    account.boost_execute(config, target, 0, b"")
    response = client.send_user_operation(account)
    logging.info("Boost user operation hash: %s", response.user_op_hash)

    event = account.boost_wait(response.user_op_hash, deadline=time.time() + 120)
    if event is None:
        logging.warning("No searcher settled the operation before the deadline")
        return

    logging.info(
        "Settled in block %s, amount=%s", event["blockNumber"], event["args"]["amount"]
    )


if __name__ == "__main__":
    main()
