"""Per-kind histogram overlays of both sources, saved as PNG files."""

from pathlib import Path
from typing import List

import matplotlib

matplotlib.use('Agg')

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402

from ..comparison.results import ReconciliationReport  # noqa: E402
from ..comparison.statistical_tests import DistributionComparison  # noqa: E402
from ..utils.logger import get_logger  # noqa: E402

logger = get_logger('charts')


def savefig(fig, output_dir, name: str) -> str:
    """Save ``fig`` as ``<output_dir>/<name>.png``, close it, return the path."""
    path = Path(output_dir) / f"{name}.png"
    fig.savefig(str(path), bbox_inches='tight', dpi=180, facecolor='white')
    plt.close(fig)
    return str(path)


def plot_comparison(comparison: DistributionComparison, title: str):
    """Step histograms of both sides over the shared bin edges."""
    edges = np.asarray(comparison.bin_edges, dtype=float)
    fig, ax = plt.subplots(figsize=(8, 5))

    for counts, label, color in (
        (comparison.row_counts, f"row (entries={comparison.row.count})", 'tab:blue'),
        (comparison.columnar_counts, f"columnar (entries={comparison.columnar.count})", 'tab:orange'),
    ):
        ax.stairs(np.asarray(counts, dtype=float), edges, label=label, color=color)

    status = comparison.chi_square.status
    statistic = comparison.chi_square.details.get('statistic')
    suffix = f" (chi2={statistic:.4g})" if statistic is not None else ''
    ax.set_title(f"{title} - chi-square {status}{suffix}")
    ax.set_xlabel('value')
    ax.set_ylabel('entries')
    ax.legend()
    return fig


def save_distribution_charts(report: ReconciliationReport, output_dir: str) -> List[str]:
    """
    Write one chart per compared kind that has joint bins.

    Args:
        report: Finished ReconciliationReport
        output_dir: Directory to write the PNGs into

    Returns:
        Paths of the written images
    """
    Path(output_dir).mkdir(parents=True, exist_ok=True)
    paths = []

    groups = (
        ('histogram', report.distributions),
        ('element_histogram', report.element_distributions),
    )
    for prefix, comparisons in groups:
        for comparison in comparisons:
            # Kinds with no values on either side have no bins
            if len(comparison.bin_edges) < 2:
                continue
            title = f"{comparison.kind.label} ({prefix.replace('_', ' ')})"
            fig = plot_comparison(comparison, title)
            paths.append(savefig(fig, output_dir, f"{prefix}_{comparison.kind.value.lower()}"))

    logger.info(f"Saved {len(paths)} distribution chart(s) to {output_dir}")
    return paths
