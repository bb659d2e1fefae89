import argparse
import os
import sys

from evaluation.metrics.repetition import RepetitionResults
from evaluation.utils.plotting import plot_energy_trace


def main(argv=None):
    parser = argparse.ArgumentParser(description="Plot the energy trace of a saved run.")
    parser.add_argument("--run_dir", type=str, required=True, help="Run folder written by run_simulation")
    parser.add_argument("--initial_energy", type=float, default=None, help="Reference line (J)")
    parser.add_argument("--out", type=str, default=None, help="Output image (default: <run_dir>/energy.png)")
    args = parser.parse_args(argv)

    results = RepetitionResults.from_folder(args.run_dir)
    if results.energy_trace.empty:
        print(f"No energy trace found in {args.run_dir}", file=sys.stderr)
        return 1

    save_path = args.out or os.path.join(args.run_dir, "energy.png")
    plot_energy_trace(
        results.energy_trace,
        initial_energy=args.initial_energy,
        title=f"Remaining Energy per Device ({results.id})",
        save_path=save_path,
    )
    for device, rate in results.consumption_rate().items():
        print(f"{device}: {rate * 1000.0:.3f} mJ/s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
