"""Censored adoption-time simulation and Bayesian estimation."""

__version__ = "0.1.0"
