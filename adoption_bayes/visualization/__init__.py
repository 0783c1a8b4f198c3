"""Visualization of posteriors and likelihood bias."""

from .posterior import (
    HAS_MATPLOTLIB,
    density_curve,
    plot_posterior_densities,
    plot_bias_comparison,
)

__all__ = [
    "HAS_MATPLOTLIB",
    "density_curve",
    "plot_posterior_densities",
    "plot_bias_comparison",
]
