"""Chain access and the deployed ERC20Votes token."""

from web3 import AsyncWeb3

from . import abi as contract_abi
from .signer import Signer, resolve_signers


class Chain:
    """Block height, signers and contract deployment over one AsyncWeb3 connection."""

    def __init__(self, w3: AsyncWeb3, abi: list | None = None, bytecode: str | None = None,
                 private_keys: list[str] | None = None):
        self.w3 = w3
        self.abi = abi or contract_abi.TOKEN_ABI
        self.bytecode = bytecode
        self.private_keys = private_keys

    async def is_connected(self) -> bool:
        return await self.w3.is_connected()

    async def latest_block_number(self) -> int:
        block = await self.w3.eth.get_block("latest")
        return block["number"]

    async def get_signers(self) -> list[Signer]:
        return await resolve_signers(self.w3, self.private_keys)

    async def send_tx(self, tx_func, sender: Signer):
        """Send a contract transaction from sender and wait for it. Raises on revert."""
        if sender.is_local:
            tx = await tx_func.build_transaction({
                "from": sender.address,
                "nonce": await self.w3.eth.get_transaction_count(sender.address),
            })
            signed = sender.account.sign_transaction(tx)
            tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        else:
            tx_hash = await tx_func.transact({"from": sender.address})
        receipt = await self.w3.eth.wait_for_transaction_receipt(tx_hash)
        if receipt["status"] != 1:
            raise RuntimeError(f"Transaction reverted. Hash: {tx_hash.hex()}")
        return receipt

    async def deploy_token(self, deployer: Signer) -> "VotesToken":
        if not self.bytecode:
            raise RuntimeError("No token bytecode loaded, cannot deploy")
        factory = self.w3.eth.contract(abi=self.abi, bytecode=self.bytecode)
        receipt = await self.send_tx(factory.constructor(), deployer)
        address = receipt.get("contractAddress")
        if not address:
            raise RuntimeError(
                f"Deployment tx succeeded but no contract address in receipt. "
                f"Hash: {receipt['transactionHash'].hex()}"
            )
        return self.token_at(address)

    def token_at(self, address: str) -> "VotesToken":
        contract = self.w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(address),
            abi=self.abi,
        )
        return VotesToken(self, contract)


class VotesToken:
    """One deployed token instance. Mutating calls wait for their receipt."""

    def __init__(self, chain: Chain, contract):
        self.chain = chain
        self.contract = contract
        self.address = contract.address

    async def mint(self, sender: Signer, to: str, amount: int):
        return await self.chain.send_tx(self.contract.functions.mint(to, amount), sender)

    async def transfer(self, sender: Signer, to: str, amount: int):
        return await self.chain.send_tx(self.contract.functions.transfer(to, amount), sender)

    async def delegate(self, sender: Signer, delegatee: str):
        return await self.chain.send_tx(self.contract.functions.delegate(delegatee), sender)

    async def balance_of(self, address: str) -> int:
        return await self.contract.functions.balanceOf(address).call()

    async def get_votes(self, address: str) -> int:
        return await self.contract.functions.getVotes(address).call()

    async def get_past_votes(self, address: str, block_number: int) -> int:
        return await self.contract.functions.getPastVotes(address, block_number).call()

    async def delegates(self, address: str) -> str:
        return await self.contract.functions.delegates(address).call()

    async def info(self) -> dict:
        """Token metadata."""
        fns = self.contract.functions
        return {
            "address": self.address,
            "name": await fns.name().call(),
            "symbol": await fns.symbol().call(),
            "decimals": await fns.decimals().call(),
            "total_supply": await fns.totalSupply().call(),
        }
