import pytest
from eth_account import Account

from mevboost_aa.config import AccountConfig
from tests.fakes import FACTORY, PAYMASTER


@pytest.fixture
def signer():
    return Account.from_key("0x" + "11" * 32)


@pytest.fixture
def account_config() -> AccountConfig:
    return AccountConfig(factory=FACTORY, paymaster=PAYMASTER)
