"""Pricing layer -- slippage model and conversion engine."""

from converter.pricing.engine import ConversionEngine
from converter.pricing.slippage import compute_slippage

__all__ = ["ConversionEngine", "compute_slippage"]
