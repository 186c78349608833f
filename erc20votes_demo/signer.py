"""Signer resolution: node-managed accounts or local private keys."""

from eth_account import Account
from web3 import AsyncWeb3, Web3


class Signer:
    """An address able to send transactions.

    ``account`` is an eth_account LocalAccount when the key is held locally;
    otherwise the node signs for ``address``.
    """

    def __init__(self, address: str, account=None):
        self.address = Web3.to_checksum_address(address)
        self.account = account

    @classmethod
    def from_key(cls, private_key: str) -> "Signer":
        account = Account.from_key(private_key)
        return cls(account.address, account)

    @property
    def is_local(self) -> bool:
        return self.account is not None

    def __repr__(self):
        kind = "local" if self.is_local else "node"
        return f"Signer({self.address}, {kind})"


def normalize_key(raw_key: str) -> str:
    """Return a 0x-prefixed hex key. Anything that is not hex is read as a keyfile path."""
    raw_key = raw_key.strip()
    if raw_key.startswith("0x"):
        return raw_key
    if len(raw_key) == 64 and all(c in "0123456789abcdefABCDEF" for c in raw_key):
        return "0x" + raw_key
    with open(raw_key) as f:
        return normalize_key(f.read())


async def resolve_signers(w3: AsyncWeb3, private_keys: list[str] | None = None) -> list[Signer]:
    """Local keys win when given; fall back to the node's unlocked accounts."""
    if private_keys:
        return [Signer.from_key(normalize_key(k)) for k in private_keys]
    accounts = await w3.eth.accounts
    return [Signer(a) for a in accounts]
