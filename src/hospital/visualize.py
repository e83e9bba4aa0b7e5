"""
Ward occupancy chart for quick inspection.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import matplotlib

# Use a non-interactive backend to avoid display issues in headless environments.
matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd


def plot_occupancy(census: pd.DataFrame, outfile: Optional[Path] = None) -> None:
    fig, ax = plt.subplots(figsize=(10, 5))

    colors = ["tab:red" if t == "F" else "tab:blue" for t in census["type"]]
    ax.bar(census["ward"], census["capacity"], color="lightgrey", label="capacity")
    ax.bar(census["ward"], census["occupied"], color=colors, label="occupied")
    ax.set_title("Ward occupancy")
    ax.set_ylabel("Beds")
    ax.legend()

    plt.tight_layout()
    if outfile:
        plt.savefig(outfile, dpi=150)
    else:
        plt.show()
    plt.close(fig)
