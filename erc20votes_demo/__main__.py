"""CLI entry point for erc20votes-demo."""

import asyncio

import click
import yaml
from web3 import AsyncHTTPProvider, AsyncWeb3

from .abi import DEFAULT_ARTIFACT, load_artifact
from .chain import Chain
from .walkthrough import Walkthrough, token_status

DEFAULT_RPC_URL = "http://127.0.0.1:8545"


def load_config(path: str | None) -> dict:
    if path is None:
        return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


def make_chain(rpc_url: str, private_keys: list[str] | None,
               artifact: str | None = None) -> Chain:
    w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url))
    if artifact is None:
        return Chain(w3, private_keys=private_keys)
    abi, bytecode = load_artifact(artifact)
    return Chain(w3, abi, bytecode, private_keys=private_keys)


async def ensure_connected(chain: Chain, rpc_url: str):
    if not await chain.is_connected():
        raise click.ClickException(f"Cannot connect to RPC: {rpc_url}")


@click.group()
@click.option("--rpc", envvar="RPC_URL", default=None, help=f"Ethereum RPC URL (default: {DEFAULT_RPC_URL})")
@click.option("--key", "keys", envvar="PRIVATE_KEYS", multiple=True,
              help="Signer private key (hex) or path to keyfile; repeat for owner, acct1, acct2")
@click.option("--config", "config_path", default=None, type=click.Path(exists=True), help="Path to config.yaml")
@click.option("--artifact", default=None, help=f"Compiled token artifact (default: {DEFAULT_ARTIFACT})")
@click.pass_context
def cli(ctx, rpc, keys, config_path, artifact):
    """ERC20Votes demo: deploy a token and walk through vote delegation."""
    cfg = load_config(config_path)
    ctx.ensure_object(dict)

    ctx.obj["rpc_url"] = rpc or cfg.get("rpc_url") or DEFAULT_RPC_URL
    ctx.obj["artifact"] = artifact or cfg.get("artifact") or DEFAULT_ARTIFACT
    ctx.obj["config"] = cfg

    ctx.obj["private_keys"] = split_keys(keys or cfg.get("private_keys")) or None


def split_keys(raw) -> list[str]:
    """Flatten keys given as a list, a comma separated string, or YAML ints."""
    if raw is None:
        return []
    if isinstance(raw, (str, int)):
        raw = [raw]
    private_keys = []
    for key in raw:
        # YAML reads unquoted 0x... keys as ints
        if isinstance(key, int):
            key = f"0x{key:064x}"
        private_keys.extend(k.strip() for k in str(key).split(",") if k.strip())
    return private_keys


async def _walkthrough(obj) -> dict:
    chain = make_chain(obj["rpc_url"], obj["private_keys"], obj["artifact"])
    await ensure_connected(chain, obj["rpc_url"])
    return await Walkthrough(chain).run()


async def _status(obj, address: str) -> dict:
    chain = make_chain(obj["rpc_url"], obj["private_keys"])
    await ensure_connected(chain, obj["rpc_url"])
    return await token_status(chain, address)


@cli.command()
@click.pass_context
def run(ctx):
    """Deploy the token, mint, delegate, transfer and query past votes."""
    try:
        asyncio.run(_walkthrough(ctx.obj))
    except Exception as e:
        click.echo(f"{type(e).__name__}: {e}", err=True)
        ctx.exit(1)


@cli.command()
@click.argument("address")
@click.pass_context
def status(ctx, address):
    """Show token info and each signer's balance, delegate and votes."""
    try:
        info = asyncio.run(_status(ctx.obj, address))
    except Exception as e:
        click.echo(f"{type(e).__name__}: {e}", err=True)
        ctx.exit(1)

    click.echo(f"Token:          {info['address']}")
    click.echo(f"Name:           {info['name']} ({info['symbol']})")
    click.echo(f"Decimals:       {info['decimals']}")
    click.echo(f"Total supply:   {info['total_supply']}")
    click.echo(f"Block number:   {info['block_number']}")
    for acc in info["accounts"]:
        click.echo(f"\n{acc['address']}")
        click.echo(f"  Balance:      {acc['balance']}")
        click.echo(f"  Delegate:     {acc['delegate']}")
        click.echo(f"  Votes:        {acc['votes']}")


if __name__ == "__main__":
    cli()
