"""Tests for the MEV-Boost account builder."""

from __future__ import annotations

import pytest
from eth_abi import decode as abi_decode
from eth_account import Account
from eth_account.messages import encode_defunct
from web3 import Web3
from web3.exceptions import ContractLogicError

from tests.fakes import (
    CHAIN_ID,
    ENTRY_POINT,
    FACTORY,
    PAYMASTER,
    PROXY,
    TARGET,
    DummyBundler,
    DummyConnections,
    DummyEntryPoint,
    sender_revert,
)
from mevboost_aa.account import MEVBoostAccount
from mevboost_aa.exceptions import (
    AddressResolutionError,
    BundlerError,
    MiddlewareError,
    ValidationError,
)
from mevboost_aa.types import MEVConfig, MiddlewareContext, UserOperation


def _selector(signature: str) -> bytes:
    return bytes(Web3.keccak(text=signature)[:4])


def _create(signer, account_config, **kwargs) -> tuple[MEVBoostAccount, DummyConnections]:
    connections = DummyConnections(config=account_config, **kwargs)
    account = MEVBoostAccount.create(
        signer, "https://rpc", account_config, connections=connections
    )
    return account, connections


class TestCreate:
    def test_resolves_proxy_and_seeds_defaults(self, signer, account_config) -> None:
        account, connections = _create(signer, account_config)

        assert account.proxy_address == PROXY
        assert account.get_op().sender == PROXY
        assert bytes(account.init_code[:20]) == bytes.fromhex(FACTORY[2:])
        assert connections.entry_point.init_codes == [bytes(account.init_code)]

        create_call = bytes(account.init_code[20:])
        assert create_call[:4] == _selector("createAccount(address,address,uint256)")
        owner, paymaster, salt = abi_decode(["address", "address", "uint256"], create_call[4:])
        assert Web3.to_checksum_address(owner) == signer.address
        assert Web3.to_checksum_address(paymaster) == PAYMASTER
        assert salt == 0

    def test_placeholder_signature_signs_dead_constant(self, signer, account_config) -> None:
        account, _ = _create(signer, account_config)

        expected = signer.sign_message(
            encode_defunct(primitive=bytes(Web3.keccak(hexstr="0xdead")))
        ).signature
        assert account.get_op().signature == bytes(expected)
        assert len(account.get_op().signature) == 65

    def test_registers_middleware_in_order(self, signer, account_config) -> None:
        account, _ = _create(signer, account_config)

        assert account.middleware_names == [
            "resolve_account",
            "get_gas_price",
            "estimate_user_operation_gas",
            "eoa_signature",
        ]

    def test_paymaster_middleware_replaces_estimator(self, signer, account_config) -> None:
        def sponsor(ctx: MiddlewareContext) -> UserOperation:
            return ctx.op.evolve(paymaster_and_data=PAYMASTER)

        config = account_config.with_overrides(paymaster_middleware=sponsor)
        account, connections = _create(signer, config)

        assert account.middleware_names == [
            "resolve_account",
            "get_gas_price",
            "paymaster_middleware",
            "eoa_signature",
        ]
        op = account.build()
        assert op.paymaster_and_data == bytes.fromhex(PAYMASTER[2:])
        assert connections.bundler.calls == []

    def test_successful_get_sender_address_is_fatal(self, signer, account_config) -> None:
        entry_point = DummyEntryPoint(sender_result=[])

        with pytest.raises(AddressResolutionError, match="unexpected result"):
            _create(signer, account_config, entry_point=entry_point)

    def test_revert_without_sender_propagates(self, signer, account_config) -> None:
        error = ContractLogicError("execution reverted", data="0x")
        entry_point = DummyEntryPoint(sender_error=error)

        with pytest.raises(ContractLogicError) as excinfo:
            _create(signer, account_config, entry_point=entry_point)
        assert excinfo.value is error

    def test_zero_sender_is_not_trusted(self, signer, account_config) -> None:
        error = sender_revert("0x0000000000000000000000000000000000000000")
        entry_point = DummyEntryPoint(sender_error=error)

        with pytest.raises(ContractLogicError) as excinfo:
            _create(signer, account_config, entry_point=entry_point)
        assert excinfo.value is error

    def test_connections_must_share_config(self, signer, account_config) -> None:
        connections = DummyConnections(config=account_config)
        other = account_config.with_overrides(factory=TARGET)

        with pytest.raises(ValidationError) as excinfo:
            MEVBoostAccount.create(signer, "https://rpc", other, connections=connections)

        assert excinfo.value.field == "config"
        assert connections.entry_point.init_codes == []

    def test_paymaster_middleware_must_match_connections(self, signer, account_config) -> None:
        connections = DummyConnections(config=account_config)
        other = account_config.with_overrides(paymaster_middleware=lambda ctx: ctx.op)

        with pytest.raises(ValidationError):
            MEVBoostAccount.create(signer, "https://rpc", other, connections=connections)

    def test_connections_must_share_rpc_url(self, signer, account_config) -> None:
        connections = DummyConnections(config=account_config)

        with pytest.raises(ValidationError) as excinfo:
            MEVBoostAccount.create(signer, "https://other", account_config, connections=connections)

        assert excinfo.value.field == "rpc_url"


class TestCallData:
    def test_execute_encodes_single_call(self, signer, account_config) -> None:
        account, _ = _create(signer, account_config)

        account.execute(TARGET, 5, "0x1234")

        call_data = account.get_op().call_data
        assert call_data[:4] == _selector("execute(address,uint256,bytes)")
        to, value, data = abi_decode(["address", "uint256", "bytes"], call_data[4:])
        assert (Web3.to_checksum_address(to), value, data) == (TARGET, 5, b"\x12\x34")

    def test_execute_batch_encodes_arrays(self, signer, account_config) -> None:
        account, _ = _create(signer, account_config)

        account.execute_batch([TARGET, PAYMASTER], [1, 2], [b"", b"\x01"])

        call_data = account.get_op().call_data
        assert call_data[:4] == _selector("executeBatch(address[],uint256[],bytes[])")
        to, values, data = abi_decode(["address[]", "uint256[]", "bytes[]"], call_data[4:])
        assert [Web3.to_checksum_address(item) for item in to] == [TARGET, PAYMASTER]
        assert list(values) == [1, 2]
        assert list(data) == [b"", b"\x01"]

    def test_execute_batch_rejects_mismatched_lengths(self, signer, account_config) -> None:
        account, _ = _create(signer, account_config)
        before = account.get_op().call_data

        with pytest.raises(ValidationError) as excinfo:
            account.execute_batch([TARGET, PAYMASTER], [1, 2, 3], [b"", b"", b""])

        assert excinfo.value.field == "batch"
        assert account.get_op().call_data == before

    def test_boost_execute_passes_config_through(self, signer, account_config) -> None:
        account, _ = _create(signer, account_config)

        account.boost_execute(MEVConfig(min_amount=10, self_sponsored_after=99), TARGET, 0, b"")

        call_data = account.get_op().call_data
        assert call_data[:4] == _selector(
            "boostExecute((uint256,uint48),address,uint256,bytes)"
        )
        config, to, value, data = abi_decode(
            ["(uint256,uint48)", "address", "uint256", "bytes"], call_data[4:]
        )
        assert config == (10, 99)
        assert Web3.to_checksum_address(to) == TARGET

    def test_boost_execute_batch_accepts_mapping_config(self, signer, account_config) -> None:
        account, _ = _create(signer, account_config)

        account.boost_execute_batch(
            {"minAmount": 7, "selfSponsoredAfter": 3}, [TARGET], [0], [b"\xff"]
        )

        call_data = account.get_op().call_data
        assert call_data[:4] == _selector(
            "boostExecuteBatch((uint256,uint48),address[],uint256[],bytes[])"
        )
        config, _, _, data = abi_decode(
            ["(uint256,uint48)", "address[]", "uint256[]", "bytes[]"], call_data[4:]
        )
        assert config == (7, 3)
        assert list(data) == [b"\xff"]

    def test_boost_execute_batch_rejects_mismatched_lengths(self, signer, account_config) -> None:
        account, _ = _create(signer, account_config)

        with pytest.raises(ValidationError):
            account.boost_execute_batch(MEVConfig(1, 2), [TARGET], [0, 1], [b""])

    def test_incomplete_mev_config_is_rejected(self, signer, account_config) -> None:
        account, _ = _create(signer, account_config)

        with pytest.raises(ValidationError):
            account.boost_execute({"minAmount": 1}, TARGET, 0, b"")


class TestBuild:
    def test_first_operation_deploys_account(self, signer, account_config) -> None:
        account, connections = _create(signer, account_config)

        op = account.execute(TARGET, 0, b"").build()

        assert op.nonce == 0
        assert op.init_code == bytes(account.init_code)
        assert connections.entry_point.nonce_calls == [(PROXY, 0)]

    def test_deployed_account_omits_init_code(self, signer, account_config) -> None:
        account, _ = _create(signer, account_config, entry_point=DummyEntryPoint(nonces=[3]))

        op = account.execute(TARGET, 0, b"").build()

        assert op.nonce == 3
        assert op.init_code == b""
        assert op.sender == PROXY

    def test_build_fills_gas_and_signature(self, signer, account_config) -> None:
        account, connections = _create(signer, account_config)
        placeholder = account.get_op().signature

        op = account.execute(TARGET, 0, b"").build()

        assert op.max_priority_fee_per_gas == 1_130
        assert op.max_fee_per_gas == 2 * 10_000 + 1_130
        assert op.pre_verification_gas == 50_000
        assert op.verification_gas_limit == 200_000
        assert op.call_gas_limit == 100_000
        assert op.signature != placeholder

        method, params = connections.bundler.calls[0]
        assert method == "eth_estimateUserOperationGas"
        assert params[1] == ENTRY_POINT
        assert params[0]["signature"] == "0x" + placeholder.hex()

        user_op_hash = op.hash(ENTRY_POINT, CHAIN_ID)
        recovered = Account.recover_message(
            encode_defunct(primitive=bytes(user_op_hash)), signature=op.signature
        )
        assert recovered == signer.address

    def test_rebuild_resigns_and_rereads_nonce(self, signer, account_config) -> None:
        account, connections = _create(
            signer, account_config, entry_point=DummyEntryPoint(nonces=[0, 1])
        )

        first = account.execute(TARGET, 0, b"").build()
        second = account.execute(TARGET, 1, b"").build()

        assert first.init_code != b""
        assert second.init_code == b""
        assert second.nonce == 1
        assert second.signature != first.signature
        assert len(connections.entry_point.nonce_calls) == 2

    def test_middleware_failure_is_attributed(self, signer, account_config) -> None:
        bundler = DummyBundler(
            {"eth_estimateUserOperationGas": BundlerError("AA21 didn't pay prefund", code=-32500)}
        )
        account, _ = _create(signer, account_config, bundler=bundler)
        account.execute(TARGET, 0, b"")
        before = account.get_op()

        with pytest.raises(MiddlewareError) as excinfo:
            account.build()

        assert excinfo.value.middleware == "estimate_user_operation_gas"
        assert isinstance(excinfo.value.__cause__, BundlerError)
        assert account.get_op() == before
