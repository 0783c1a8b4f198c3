"""Posterior density and bias plots."""

from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple, Union

import numpy as np
from scipy import stats

try:
    import matplotlib.pyplot as plt
    import matplotlib
    matplotlib.use('Agg')  # Non-interactive backend
    HAS_MATPLOTLIB = True
except ImportError:
    HAS_MATPLOTLIB = False

from ..analysis.bias import BiasReport
from ..models.posterior import PosteriorResult


def _require_matplotlib() -> None:
    if not HAS_MATPLOTLIB:
        raise ImportError("Matplotlib not available. Install with: pip install matplotlib")


def _save_or_return(fig, output_path: Optional[Union[str, Path]], dpi: int):
    """Save as PNG and PDF when a path is given, else return the figure."""
    if output_path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        fig.savefig(f"{output_path}.png", dpi=dpi, bbox_inches='tight')
        fig.savefig(f"{output_path}.pdf", bbox_inches='tight')

        plt.close(fig)
        return None

    return fig


def density_curve(
    result: PosteriorResult,
    group: str,
    n_points: int = 400,
) -> Tuple[np.ndarray, np.ndarray]:
    """Posterior density of one group on a probability grid.

    Uses the exact Beta density when the engine provides Beta parameters
    and a Gaussian KDE of the draws otherwise.

    Raises:
        ValueError: If the group has fewer than two distinct draws.
    """
    draws = np.asarray(result.draws[group], dtype=float)

    if result.beta_parameters is not None:
        a, b = result.beta_parameters[group]
        dist = stats.beta(a, b)
        lower, upper = dist.ppf([1e-4, 1 - 1e-4])
        grid = np.linspace(lower, upper, n_points)
        return grid, dist.pdf(grid)

    if len(np.unique(draws)) < 2:
        raise ValueError(f"Need at least two distinct draws for group {group!r}")

    spread = draws.max() - draws.min()
    grid = np.linspace(
        max(draws.min() - 0.1 * spread, 0.0),
        min(draws.max() + 0.1 * spread, 1.0),
        n_points,
    )
    return grid, stats.gaussian_kde(draws)(grid)


def plot_posterior_densities(
    result: PosteriorResult,
    true_values: Optional[Sequence[float]] = None,
    output_path: Optional[Union[str, Path]] = None,
    title: Optional[str] = None,
    figsize: Tuple[float, float] = (10, 6),
    dpi: int = 300,
):
    """Plot the posterior density of every group on one axis.

    Args:
        result: Posterior to plot.
        true_values: Simulation probabilities in label order, drawn as
            dashed vertical lines.
        output_path: Path to save figure (without extension).
            If None, returns figure without saving.
        title: Plot title. If None, auto-generated.
        figsize: Figure size in inches.
        dpi: Resolution for saved figures.

    Returns:
        Matplotlib figure if output_path is None.
    """
    _require_matplotlib()

    fig, ax = plt.subplots(figsize=figsize)
    colors = plt.rcParams['axes.prop_cycle'].by_key()['color']

    for i, label in enumerate(result.group_labels):
        color = colors[i % len(colors)]
        draws = result.draws[label]
        if result.beta_parameters is None and len(np.unique(draws)) < 2:
            # Point estimate (MAP)
            ax.axvline(result.posterior_mean(label), color=color, linewidth=2,
                       label=f"{label} (mode)")
        else:
            grid, density = density_curve(result, label)
            ax.plot(grid, density, color=color, linewidth=2, label=label)
            ax.fill_between(grid, density, alpha=0.2, color=color)

        if true_values is not None:
            ax.axvline(true_values[i], color=color, linestyle='--', linewidth=1.5,
                       label=f"{label} true p={true_values[i]:.3f}")

    ax.set_xlabel('Adoption probability per day', fontsize=12)
    ax.set_ylabel('Posterior density', fontsize=12)

    if title is None:
        title = (f"Posterior ({result.likelihood.name.lower()} likelihood, "
                 f"{result.method.name.lower()})")
    ax.set_title(title, fontsize=14)

    ax.legend(loc='best')
    ax.grid(True, alpha=0.3)

    plt.tight_layout()

    return _save_or_return(fig, output_path, dpi)


def plot_bias_comparison(
    reports: Sequence[BiasReport],
    output_path: Optional[Union[str, Path]] = None,
    title: Optional[str] = None,
    figsize: Tuple[float, float] = (10, 6),
    dpi: int = 300,
):
    """Plot naive and censored bias per group across replicates.

    Args:
        reports: Bias reports, typically from several replicates.
        output_path: Path to save figure (without extension).
        title: Plot title.
        figsize: Figure size.
        dpi: Resolution.

    Returns:
        Matplotlib figure if output_path is None.
    """
    _require_matplotlib()
    if not reports:
        raise ValueError("reports cannot be empty")

    groups: Dict[str, Dict[str, list]] = {}
    for report in reports:
        entry = groups.setdefault(report.group, {"censored": [], "naive": []})
        entry["censored"].append(report.censored_bias)
        entry["naive"].append(report.naive_bias)

    fig, ax = plt.subplots(figsize=figsize)

    labels = list(groups)
    positions = np.arange(len(labels))
    width = 0.35
    for offset, name in ((-width / 2, "censored"), (width / 2, "naive")):
        data = [groups[label][name] for label in labels]
        ax.boxplot(
            data,
            positions=positions + offset,
            widths=width * 0.9,
            patch_artist=True,
            boxprops={'facecolor': 'tab:blue' if name == "censored" else 'tab:orange',
                      'alpha': 0.5},
        )
        ax.plot([], [], color='tab:blue' if name == "censored" else 'tab:orange',
                linewidth=8, alpha=0.5, label=f"{name} likelihood")

    ax.axhline(0.0, color='black', linewidth=1)
    ax.set_xticks(positions)
    ax.set_xticklabels(labels)
    ax.set_xlabel('Group', fontsize=12)
    ax.set_ylabel('Posterior mean - true probability', fontsize=12)
    ax.set_title(title or "Bias of naive vs censored likelihood", fontsize=14)

    ax.legend(loc='best')
    ax.grid(True, alpha=0.3, axis='y')

    plt.tight_layout()

    return _save_or_return(fig, output_path, dpi)
