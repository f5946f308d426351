"""Tests for the character NFT contract binding."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from love_diary.services.chain import ChainConfigError, CharacterContract

OWNER = "0x52908400098527886E0F7030069857D2E4169EE7"
CONTRACT = "0x1111111111111111111111111111111111111111"


@pytest.mark.asyncio
async def test_owner_of_requires_contract_address() -> None:
    contract = CharacterContract("https://rpc.test", None)

    with pytest.raises(ChainConfigError):
        await contract.owner_of(1)


@pytest.mark.asyncio
async def test_owner_of_calls_contract(mocker) -> None:
    web3_cls = mocker.patch("love_diary.services.chain.AsyncWeb3")
    web3_cls.to_checksum_address.side_effect = lambda value: value
    bound = MagicMock()
    bound.functions.ownerOf.return_value.call = AsyncMock(return_value=OWNER)
    web3_cls.return_value.eth.contract.return_value = bound

    contract = CharacterContract("https://rpc.test", CONTRACT)

    assert await contract.owner_of(42) == OWNER
    assert await contract.owner_of(43) == OWNER
    bound.functions.ownerOf.assert_any_call(42)
    web3_cls.return_value.eth.contract.assert_called_once()
