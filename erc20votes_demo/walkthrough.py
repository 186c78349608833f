"""Vote delegation walkthrough: mint, delegate, transfer, query past votes."""

import asyncio

import click

MINT_VALUE = 10 * 10**18  # 10 tokens at 18 decimals


class Walkthrough:
    """One run of the walkthrough against a Chain.

    Mutating steps wait for their receipt before the next step starts. Any
    failure propagates out of run() and aborts the remaining steps.
    """

    def __init__(self, chain, mint_value: int = MINT_VALUE, echo=None):
        self.chain = chain
        self.mint_value = mint_value
        self.echo = echo or click_echo
        self.log_index = 0

    async def report_block(self, step: str) -> int:
        block_number = await self.chain.latest_block_number()
        self.echo(
            f"_________{step}(Log-{self.log_index}) - Current block number is {block_number}_________"
        )
        self.log_index += 1
        return block_number

    async def run(self) -> dict:
        signers = await self.chain.get_signers()
        if len(signers) < 3:
            raise RuntimeError(f"Need at least 3 signers, chain provided {len(signers)}")
        owner, acct1, acct2 = signers[:3]

        # Deploy
        await self.report_block("DEPLOY CONTRACT & GET SIGNERS")
        token = await self.chain.deploy_token(owner)
        self.echo(f"   Token contract deployed at {token.address}\n")

        # Mint from the deployer, which holds the minter role
        await self.report_block("MINT TOKENS")
        await token.mint(owner, acct1.address, self.mint_value)
        self.echo(f"   Minted {self.mint_value} decimal units to account {acct1.address}\n")
        balance = await token.balance_of(acct1.address)
        self.echo(f"   acct1 has {balance} decimal units of MyToken\n")

        await self.report_block("CHECK VOTING POWER")
        votes_before = await token.get_votes(acct1.address)
        self.echo(
            f"   Account {acct1.address} has {votes_before} units of voting power "
            f"before self-delegating\n"
        )

        await self.report_block("DELEGATE ACCT1")
        await token.delegate(acct1, acct1.address)

        await self.report_block("CHECK VOTING POWER")
        votes_after = await token.get_votes(acct1.address)
        self.echo(
            f"   Account {acct1.address} has {votes_after} units of voting power "
            f"after self-delegating\n"
        )

        await self.report_block("TRANSFER")
        await token.transfer(acct1, acct2.address, self.mint_value // 2)

        # acct2 holds tokens but has not delegated yet
        await self.report_block(
            "CHECK VOTING POWER OF ACCT1 & ACCT2 AFTER TRANSFER (ACCT2 NEEDS DELEGATION)"
        )
        acct1_votes, acct2_votes = await asyncio.gather(
            *(token.get_votes(acc.address) for acc in (acct1, acct2))
        )
        self.echo(
            f"   Account1 has {acct1_votes} units of voting power after transferring "
            f"half of the original amount\n"
        )
        self.echo(
            f"   Account2 has {acct2_votes} units of voting power after transfer "
            f"and no delegation\n"
        )

        await self.report_block("DELEGATE ACCT2")
        await token.delegate(acct2, acct2.address)

        await self.report_block("CHECKING VOTING POWER OF ACCT2")
        acct2_delegated = await token.get_votes(acct2.address)
        self.echo(f"   Account2 has {acct2_delegated} units of voting power after self-delegation\n")

        await self.report_block("GET PAST VOTES")
        last_block = await self.chain.latest_block_number()
        past_block = last_block - 2
        past_votes = await token.get_past_votes(acct1.address, past_block)
        self.echo(
            f"   Account 1 had {past_votes} units of voting power at the two previous block\n"
        )

        return {
            "token": token.address,
            "owner": owner.address,
            "acct1": acct1.address,
            "acct2": acct2.address,
            "acct1_balance": balance,
            "acct1_votes_before_delegation": votes_before,
            "acct1_votes_after_delegation": votes_after,
            "acct1_votes_after_transfer": acct1_votes,
            "acct2_votes_after_transfer": acct2_votes,
            "acct2_votes_after_delegation": acct2_delegated,
            "past_votes_block": past_block,
            "acct1_past_votes": past_votes,
            "reports": self.log_index,
        }


async def token_status(chain, address: str) -> dict:
    """Current state of an already deployed token for every signer."""
    token = chain.token_at(address)
    info = await token.info()
    info["block_number"] = await chain.latest_block_number()
    info["accounts"] = []
    for signer in await chain.get_signers():
        info["accounts"].append({
            "address": signer.address,
            "balance": await token.balance_of(signer.address),
            "delegate": await token.delegates(signer.address),
            "votes": await token.get_votes(signer.address),
        })
    return info


def click_echo(msg: str):
    click.echo(msg)
