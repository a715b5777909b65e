"""Protocol constants for the MEV-Boost account abstraction SDK."""

from enum import Enum

from eth_typing import HexStr
from web3 import Web3


class ERC4337(str, Enum):
    """Canonical ERC-4337 deployments."""

    ENTRY_POINT = "0x5FF137D4b0FDCD49DcA30c7CF57E578a026d2789"


ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# MEVBoostAccountFactory.createAccount salt; one account per signer.
ACCOUNT_SALT = 0

# EntryPoint nonce key used for every operation.
NONCE_KEY = 0

# Hashed and signed once to obtain a correctly sized dummy signature.
DUMMY_SIGNATURE_MESSAGE = HexStr("0xdead")

# error SenderAddressResult(address sender)
SENDER_ADDRESS_RESULT_SELECTOR = bytes(Web3.keccak(text="SenderAddressResult(address)")[:4])

# Blocks behind the chain head scanned for SettleUserOp events.
SETTLEMENT_LOOKBACK_BLOCKS = 100

# Percentage added on top of node fee suggestions.
GAS_PRICE_BUFFER_PERCENT = 13
