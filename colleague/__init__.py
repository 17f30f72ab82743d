"""Colleague: streaming AI colleague with risk-gated tool use."""

__version__ = "0.1.0"
