"""Example: send ETH from a MEV-Boost account and wait for the receipt."""

from __future__ import annotations

import logging
import os
import time

from dotenv import load_dotenv
from eth_account import Account
from web3 import Web3

from mevboost_aa import AccountConfig, MEVBoostAccount, UserOperationClient

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOGLEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

AMOUNT_ETH = 0.0001


def main() -> None:
    """Send a plain execute() operation through the bundler."""

    private_key = os.getenv("PRIVATE_KEY")
    if not private_key:
        raise ValueError("PRIVATE_KEY not found in environment variables")
    rpc_url = os.getenv("RPC_URL")
    if not rpc_url:
        raise ValueError("RPC_URL not found in environment variables")
    recipient = os.getenv("RECIPIENT")
    if not recipient:
        raise ValueError("RECIPIENT not found in environment variables")

    signer = Account.from_key(private_key)
    account = MEVBoostAccount.create(signer, rpc_url, AccountConfig.from_env())
    logging.info("MEV-Boost account address: %s", account.proxy_address)

    client = UserOperationClient(account.connections)
    account.execute(recipient, Web3.to_wei(AMOUNT_ETH, "ether"), b"")
    response = client.send_user_operation(account)
    logging.info("User operation hash: %s", response.user_op_hash)

    for _ in range(30):
        receipt = client.get_user_operation_receipt(response.user_op_hash)
        if receipt is not None:
            logging.info("Included in transaction %s", receipt["receipt"]["transactionHash"])
            return
        time.sleep(2)

    logging.warning("User operation not included yet")


if __name__ == "__main__":
    main()
