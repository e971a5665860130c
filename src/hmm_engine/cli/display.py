"""
Rich renderers for model parameters and training output.
"""

from typing import Optional, Sequence

import numpy as np
from rich.table import Table


def vector_table(vector: np.ndarray, labels: Sequence[str], title: Optional[str] = None,
                 digits: int = 4) -> Table:
    """Render a probability vector as a single-row table."""
    table = Table(title=title)
    for label in labels:
        table.add_column(label, justify="right", style="cyan")
    table.add_row(*[f"{value:.{digits}f}" for value in vector])
    return table


def matrix_table(matrix: np.ndarray, row_labels: Sequence[str], col_labels: Sequence[str],
                 title: Optional[str] = None, digits: int = 4) -> Table:
    """Render a row-stochastic matrix with labelled rows and columns."""
    table = Table(title=title)
    table.add_column("", style="bold")
    for label in col_labels:
        table.add_column(label, justify="right", style="magenta")
    for label, row in zip(row_labels, matrix):
        table.add_row(label, *[f"{value:.{digits}f}" for value in row])
    return table


def history_table(history: Sequence[float]) -> Table:
    """Render the per-iteration log-likelihood trace."""
    table = Table(title="Log-Likelihood")
    table.add_column("Iteration", style="cyan")
    table.add_column("Log-Likelihood", justify="right", style="yellow")
    table.add_column("Improvement", justify="right", style="green")

    previous = None
    for iteration, value in enumerate(history, start=1):
        improvement = "-" if previous is None else f"{value - previous:+.6f}"
        table.add_row(str(iteration), f"{value:.6f}", improvement)
        previous = value
    return table
