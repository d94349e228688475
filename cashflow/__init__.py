"""Retirement drawdown and savings accumulation projections."""

__version__ = "0.1.0"
