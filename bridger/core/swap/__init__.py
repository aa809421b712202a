"""Single-chain swaps through the 1inch aggregator."""
