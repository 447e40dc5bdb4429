"""Constant-product AMM quoting and swapping."""
