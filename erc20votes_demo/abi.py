"""ERC20Votes token interface and compiled artifact loading."""

import json
from pathlib import Path

DEFAULT_ARTIFACT = "artifacts/contracts/MyToken.sol/MyToken.json"

TOKEN_ABI = [
    {
        "inputs": [],
        "stateMutability": "nonpayable",
        "type": "constructor",
    },
    {
        "inputs": [],
        "name": "name",
        "outputs": [{"name": "", "type": "string"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "symbol",
        "outputs": [{"name": "", "type": "string"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "decimals",
        "outputs": [{"name": "", "type": "uint8"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "totalSupply",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"name": "account", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "name": "mint",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "name": "transfer",
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [{"name": "delegatee", "type": "address"}],
        "name": "delegate",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [{"name": "account", "type": "address"}],
        "name": "delegates",
        "outputs": [{"name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"name": "account", "type": "address"}],
        "name": "getVotes",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "account", "type": "address"},
            {"name": "blockNumber", "type": "uint256"},
        ],
        "name": "getPastVotes",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "name": "delegator", "type": "address"},
            {"indexed": True, "name": "fromDelegate", "type": "address"},
            {"indexed": True, "name": "toDelegate", "type": "address"},
        ],
        "name": "DelegateChanged",
        "type": "event",
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "name": "delegate", "type": "address"},
            {"indexed": False, "name": "previousBalance", "type": "uint256"},
            {"indexed": False, "name": "newBalance", "type": "uint256"},
        ],
        "name": "DelegateVotesChanged",
        "type": "event",
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "name": "from", "type": "address"},
            {"indexed": True, "name": "to", "type": "address"},
            {"indexed": False, "name": "value", "type": "uint256"},
        ],
        "name": "Transfer",
        "type": "event",
    },
]


def load_artifact(path: str | Path) -> tuple[list, str]:
    """Read ``(abi, bytecode)`` from a Hardhat or Foundry build artifact.

    Hardhat stores ``bytecode`` as a hex string, Foundry as
    ``{"object": "0x..."}``. An artifact without an ABI falls back to
    TOKEN_ABI.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Artifact not found: {path}. Compile the token contract first.")

    with open(path) as f:
        data = json.load(f)

    abi = data.get("abi") or TOKEN_ABI
    bytecode = data.get("bytecode")
    if isinstance(bytecode, dict):
        bytecode = bytecode.get("object")

    if not bytecode or bytecode == "0x":
        raise ValueError(f"Bytecode not found in artifact {path}")
    if not bytecode.startswith("0x"):
        bytecode = "0x" + bytecode
    return abi, bytecode
