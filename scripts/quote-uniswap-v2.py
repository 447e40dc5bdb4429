"""Quote a swap against a live Uniswap v2 pair.

Usage:

.. code-block:: shell

    export JSON_RPC_ETHEREUM=...
    python scripts/quote-uniswap-v2.py

"""

import os

from web3 import HTTPProvider, Web3

from yield_vault.amm.quote import AmmQuoteEngine
from yield_vault.onchain.uniswap_v2 import UniswapV2PairReader
from yield_vault.utils import setup_console_logging

setup_console_logging()

#: USDC/WETH on Uniswap v2 mainnet
pair_address = "0xB4e16d0168e52d35CaCD2c6185b44281Ec28C9Dc"
usdc = Web3.to_checksum_address("0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48")

web3 = Web3(HTTPProvider(os.environ["JSON_RPC_ETHEREUM"]))
print(f"Connected to chain {web3.eth.chain_id}, last block {web3.eth.block_number:,}")

engine = AmmQuoteEngine(UniswapV2PairReader.from_address(web3, pair_address))
amount_in = 1_000 * 10**6
expected, min_out = engine.quote_with_slippage(amount_in, usdc, slippage_bps=50)
print(f"1000 USDC buys {expected / 10**18:.6f} WETH, at 0.5% slippage at least {min_out / 10**18:.6f} WETH")
