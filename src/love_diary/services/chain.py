"""Read access to the character NFT contract."""

from __future__ import annotations

from typing import Any, Final

from web3 import AsyncWeb3

from love_diary.core.settings import settings
from love_diary.services.ownership import OwnerReader

# Only the ERC-721 read the auth guard needs
OWNER_OF_ABI: Final[list[dict[str, Any]]] = [
    {
        "inputs": [{"internalType": "uint256", "name": "tokenId", "type": "uint256"}],
        "name": "ownerOf",
        "outputs": [{"internalType": "address", "name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
]


class ChainConfigError(RuntimeError):
    """Raised when the contract binding is not configured."""


class CharacterContract:
    """Thin async binding of the character NFT's ``ownerOf``."""

    def __init__(self, rpc_url: str, address: str | None) -> None:
        self._rpc_url = rpc_url
        self._address = address
        self._contract: Any | None = None

    def _ensure_contract(self) -> Any:
        if not self._address:
            raise ChainConfigError("CHARACTER_NFT_ADDRESS is not configured")
        if self._contract is None:
            w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(self._rpc_url))
            self._contract = w3.eth.contract(
                address=AsyncWeb3.to_checksum_address(self._address),
                abi=OWNER_OF_ABI,
            )
        return self._contract

    async def owner_of(self, token_id: int) -> str:
        """Return the current owner address of ``token_id``."""
        contract = self._ensure_contract()
        owner: str = await contract.functions.ownerOf(int(token_id)).call()
        return owner


class _CharacterContractSingleton:
    """Singleton wrapper for CharacterContract."""

    _instance: CharacterContract | None = None

    @classmethod
    def get_instance(cls) -> CharacterContract:
        if cls._instance is None:
            cls._instance = CharacterContract(
                settings.base_rpc_url, settings.character_nft_address
            )
        return cls._instance


def get_character_contract() -> CharacterContract:
    """Return the process-wide character contract binding."""
    return _CharacterContractSingleton.get_instance()


def get_owner_reader() -> OwnerReader:
    """Return the ``ownerOf`` read capability used by the ownership guard."""
    return get_character_contract().owner_of
