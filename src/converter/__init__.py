"""QI/QUAI rate cache and conversion-slippage engine."""
