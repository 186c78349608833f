from collections import defaultdict

import pytest

from erc20votes_demo.signer import Signer

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
MINT_VALUE = 10 * 10**18


class FakeVotesToken:
    """In-memory ERC20Votes: balances, delegation and per-block vote checkpoints."""

    def __init__(self, chain, owner: str, address: str):
        self.chain = chain
        self.owner = owner
        self.address = address
        self.balances = defaultdict(int)
        self.delegatees = {}
        self.checkpoints = defaultdict(list)

    def _votes(self, address):
        cps = self.checkpoints[address]
        return cps[-1][1] if cps else 0

    def _push(self, address, delta):
        cps = self.checkpoints[address]
        value = self._votes(address) + delta
        block = self.chain.block_number
        if cps and cps[-1][0] == block:
            cps[-1] = (block, value)
        else:
            cps.append((block, value))

    def _move_votes(self, src, dst, amount):
        if src == dst or amount == 0:
            return
        if src:
            self._push(src, -amount)
        if dst:
            self._push(dst, amount)

    async def mint(self, sender, to, amount):
        self.chain.record("mint")
        if sender.address != self.owner:
            raise RuntimeError("execution reverted: Ownable: caller is not the owner")
        self.chain.mine()
        self.balances[to] += amount
        self._move_votes(None, self.delegatees.get(to), amount)

    async def transfer(self, sender, to, amount):
        self.chain.record("transfer")
        if self.balances[sender.address] < amount:
            raise RuntimeError("execution reverted: ERC20: transfer amount exceeds balance")
        self.chain.mine()
        self.balances[sender.address] -= amount
        self.balances[to] += amount
        self._move_votes(self.delegatees.get(sender.address), self.delegatees.get(to), amount)

    async def delegate(self, sender, delegatee):
        self.chain.record("delegate")
        self.chain.mine()
        old = self.delegatees.get(sender.address)
        self.delegatees[sender.address] = delegatee
        self._move_votes(old, delegatee, self.balances[sender.address])

    async def balance_of(self, address):
        self.chain.record("balance_of")
        return self.balances[address]

    async def get_votes(self, address):
        self.chain.record("get_votes")
        return self._votes(address)

    async def get_past_votes(self, address, block_number):
        self.chain.record("get_past_votes")
        if block_number >= self.chain.block_number:
            raise RuntimeError("execution reverted: ERC5805FutureLookup")
        value = 0
        for block, votes in self.checkpoints[address]:
            if block > block_number:
                break
            value = votes
        return value

    async def delegates(self, address):
        return self.delegatees.get(address, ZERO_ADDRESS)

    async def info(self):
        return {
            "address": self.address,
            "name": "MyToken",
            "symbol": "MTK",
            "decimals": 18,
            "total_supply": sum(self.balances.values()),
        }


class FakeChain:
    """Chain stand-in: every mutating call mines exactly one block."""

    def __init__(self, n_signers=3, connected=True, fail_on=None):
        self.block_number = 0
        self.connected = connected
        self.fail_on = fail_on
        self.signers = [Signer("0x%040x" % (i + 1)) for i in range(n_signers)]
        self.tokens = {}
        self.calls = []

    def record(self, name):
        self.calls.append(name)
        if name == self.fail_on:
            raise RuntimeError(f"Transaction reverted. Hash: {name}")

    def mine(self):
        self.block_number += 1

    async def is_connected(self):
        return self.connected

    async def latest_block_number(self):
        return self.block_number

    async def get_signers(self):
        return list(self.signers)

    async def deploy_token(self, deployer):
        self.record("deploy")
        self.mine()
        address = "0x%040x" % (0xC0FFEE + len(self.tokens))
        token = FakeVotesToken(self, deployer.address, address)
        self.tokens[address] = token
        return token

    def token_at(self, address):
        return self.tokens[address]


@pytest.fixture
def chain():
    return FakeChain()


@pytest.fixture
def lines():
    return []
