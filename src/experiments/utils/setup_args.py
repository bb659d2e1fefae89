import argparse

from experiments import config


def setup_arguments(argv=None) -> argparse.Namespace:
    """Configures and parses command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Replay a recorded event trace through the access-control and telemetry engine."
    )

    parser.add_argument(
        "--scenario",
        choices=config.SCENARIOS,
        default="iot",
        help="Reference scenario, selects the report and the default run window",
    )
    parser.add_argument(
        "--events",
        type=str,
        required=True,
        help="CSV event trace with columns time,kind,identity,value",
    )
    parser.add_argument(
        "--allow",
        nargs="*",
        default=[],
        help="Authorized sender identities (e.g. 10.1.1.2)",
    )
    parser.add_argument(
        "--allow_file",
        type=str,
        default=None,
        help="File with one authorized identity per line",
    )
    parser.add_argument(
        "--devices",
        nargs="*",
        default=None,
        help="Energy-reporting devices. Defaults to every device found in the trace",
    )
    parser.add_argument(
        "--initial_energy",
        type=float,
        default=config.INITIAL_ENERGY_J,
        help="Initial energy of each device in joules",
    )
    parser.add_argument(
        "--packet_rate",
        type=float,
        default=config.PACKET_RATE,
        help="Nominal packets per second per device, used to estimate the sent packets",
    )
    parser.add_argument(
        "--intended",
        type=int,
        default=None,
        help="Intended sent packet count. Overrides the rate x duration estimate",
    )
    parser.add_argument(
        "--sim_time",
        type=float,
        default=None,
        help="End of the run window in seconds (scenario default if omitted)",
    )
    parser.add_argument(
        "--app_start",
        type=float,
        default=config.APP_START,
        help="Time at which the senders start, used to estimate the sent packets",
    )
    parser.add_argument(
        "--out_dir",
        type=str,
        default="results/run",
        help="Base output directory",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print one line per monitored event (redirected to the run folder)",
    )
    return parser.parse_args(argv)
