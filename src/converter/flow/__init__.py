"""Conversion flow tracking."""

from converter.flow.tracker import FlowTracker

__all__ = ["FlowTracker"]
