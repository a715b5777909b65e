"""Minimal ABI fragments for the contracts the SDK talks to."""

_MEV_CONFIG_COMPONENTS = [
    {"name": "minAmount", "type": "uint256"},
    {"name": "selfSponsoredAfter", "type": "uint48"},
]

EntryPoint_abi = [
    {
        "inputs": [
            {"name": "sender", "type": "address"},
            {"name": "key", "type": "uint192"},
        ],
        "name": "getNonce",
        "outputs": [{"name": "nonce", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"name": "initCode", "type": "bytes"}],
        "name": "getSenderAddress",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [{"name": "sender", "type": "address"}],
        "name": "SenderAddressResult",
        "type": "error",
    },
]

MEVBoostAccountFactory_abi = [
    {
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "mevBoostPaymaster", "type": "address"},
            {"name": "salt", "type": "uint256"},
        ],
        "name": "createAccount",
        "outputs": [{"name": "ret", "type": "address"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "mevBoostPaymaster", "type": "address"},
            {"name": "salt", "type": "uint256"},
        ],
        "name": "getAddress",
        "outputs": [{"name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
]

MEVBoostAccount_abi = [
    {
        "inputs": [
            {"name": "dest", "type": "address"},
            {"name": "value", "type": "uint256"},
            {"name": "func", "type": "bytes"},
        ],
        "name": "execute",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "dest", "type": "address[]"},
            {"name": "value", "type": "uint256[]"},
            {"name": "func", "type": "bytes[]"},
        ],
        "name": "executeBatch",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "config", "type": "tuple", "components": _MEV_CONFIG_COMPONENTS},
            {"name": "dest", "type": "address"},
            {"name": "value", "type": "uint256"},
            {"name": "func", "type": "bytes"},
        ],
        "name": "boostExecute",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "config", "type": "tuple", "components": _MEV_CONFIG_COMPONENTS},
            {"name": "dest", "type": "address[]"},
            {"name": "value", "type": "uint256[]"},
            {"name": "func", "type": "bytes[]"},
        ],
        "name": "boostExecuteBatch",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]

MEVBoostPaymaster_abi = [
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "name": "searcherUserOpHash", "type": "bytes32"},
            {"indexed": True, "name": "userOpHash", "type": "bytes32"},
            {"indexed": False, "name": "amount", "type": "uint256"},
        ],
        "name": "SettleUserOp",
        "type": "event",
    },
]
