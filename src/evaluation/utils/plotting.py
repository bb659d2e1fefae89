import matplotlib.pyplot as plt
import pandas as pd
from typing import Optional, Tuple

# Define consistent plotting styles
Z_ORDER = {
    'grid': 1,
    'threshold': 2,
    'trace': 5,
}


def plot_energy_trace(
    trace: pd.DataFrame,
    initial_energy: Optional[float] = None,
    title: str = "Remaining Energy per Device",
    save_path: Optional[str] = None,
    figsize: Tuple[int, int] = (12, 6)
):
    """
    Plots the remaining energy of each device over simulated time.

    Args:
        trace: energy trace as returned by telemetry.read_energy_trace
               (columns time, device, remaining_J).
        initial_energy: if given, drawn as a dashed reference line.
        title: The main title for the plot.
        save_path: Path to save the figure. If None, plt.show() is called.
        figsize: The (width, height) of the figure.
    """
    fig, ax = plt.subplots(figsize=figsize)

    num_devices = 0
    if trace.empty:
        print("Warning: empty energy trace, nothing to plot.")
    else:
        num_devices = trace["device"].nunique()
        for device, samples in trace.groupby("device", sort=True):
            ax.step(
                samples["time"].to_numpy(),
                samples["remaining_J"].to_numpy(),
                where="post",
                label=str(device),
                zorder=Z_ORDER['trace'],
            )

    if initial_energy is not None:
        ax.axhline(initial_energy, linestyle="--", color="gray", label="Initial energy", zorder=Z_ORDER['threshold'])

    ax.set_title(title)
    ax.set_xlabel("Time (s)")
    ax.set_ylabel("Remaining energy (J)")
    ax.grid(True, linestyle=":", zorder=Z_ORDER['grid'])
    if 0 < num_devices <= 20 or initial_energy is not None:
        ax.legend(loc="best", fontsize="small")

    if save_path:
        fig.savefig(save_path, bbox_inches="tight")
        print(f"Energy plot saved to {save_path}")
        plt.close(fig)
    else:
        plt.show()
    return fig

