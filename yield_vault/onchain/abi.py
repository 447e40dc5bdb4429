"""ABI loading from the bundled JSON files.

Only the read-only functions the state readers need are bundled.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Type, Union

from eth_typing import HexAddress
from web3 import Web3
from web3.contract import Contract

# How big is our contract class cache
_CACHE_SIZE = 32


def get_abi_by_filename(fname: str) -> dict:
    """Reads an embedded ABI file and returns it.

    Example::

        abi = get_abi_by_filename("UniswapV2Pair.json")

    :param fname: File name under ``yield_vault/abi``
    :return: Contract interface with the ``abi`` key
    """
    here = Path(__file__).resolve().parent.parent
    abi_path = here / "abi" / Path(fname)
    with open(abi_path, "rt", encoding="utf-8") as f:
        return json.load(f)


@lru_cache(maxsize=_CACHE_SIZE)
def get_contract(web3: Web3, fname: str) -> Type[Contract]:
    """Get a Contract proxy class for a bundled ABI.

    Results are cached, the web3 connection is part of the cache key.
    """
    abi = get_abi_by_filename(fname)
    return web3.eth.contract(abi=abi["abi"])


def get_deployed_contract(web3: Web3, fname: str, address: Union[HexAddress, str]) -> Contract:
    """Get a Contract proxy object for a contract deployed at a specific address.

    :param web3:
        Web3 instance

    :param fname:
        Bundled ABI file name

    :param address:
        Address of the deployed contract, any case

    :return:
        `web3.contract.Contract` proxy
    """
    assert isinstance(web3, Web3), f"Got {type(web3)} instead of Web3"
    assert address, "get_deployed_contract() address was None"
    address = Web3.to_checksum_address(address)
    Contract = get_contract(web3, fname)
    return Contract(address)
