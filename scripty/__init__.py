"""Scripty — design-time script generation with output reconciliation."""

__version__ = "0.1.0"
