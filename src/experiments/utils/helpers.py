import os
import sys
import json
from datetime import datetime
from pathlib import Path
from typing import List, Dict, Any, Optional

import pandas as pd

from simulator.engine.common.Monitor import Monitor
from simulator.entities.sources.ReplaySource import ENERGY_KIND, PACKET_KIND
from telemetry.aggregator import RunSummary
from telemetry.errors import MalformedEventError
from telemetry.identity import normalize_identity
from experiments import config


def setup_working_environment(
    out_dir: str,
    scenario: str,
    events_path: str,
    suffix: Optional[str] = None
) -> str:
    """
    Creates the output directory for a single run: <out_dir>/<scenario>/<trace name>[_suffix]
    """
    run_folder_name = Path(events_path).stem
    if suffix:
        run_folder_name = f"{run_folder_name}_{suffix}"

    run_output_dir = os.path.join(out_dir, scenario, run_folder_name)
    os.makedirs(run_output_dir, exist_ok=True)

    print(f"--- Starting Run ({scenario}: {events_path}) ---")
    print(f"--- Output Directory: {run_output_dir} ---")

    return run_output_dir


def estimate_intended_packets(
    num_devices: int,
    packet_rate: float,
    sim_time: float,
    app_start: float = config.APP_START,
) -> int:
    """
    Nominal number of packets the senders were configured to send: devices x rate x active time.
    There is no sender-side instrumentation, so this is an estimate supplied to the aggregator.
    """
    active_time = max(sim_time - app_start, 0.0)
    return int(num_devices * packet_rate * active_time)


def discover_devices(events: pd.DataFrame) -> List[str]:
    """
    Canonical identities of the devices found in the trace, in order of appearance.
    Packet senders count as devices even if they never report energy (they consumed nothing).
    """
    devices = []
    kinds = events["kind"].astype(str).str.strip().str.lower()
    device_rows = events[kinds.isin([PACKET_KIND, ENERGY_KIND])]
    for identity in device_rows["identity"].dropna():
        try:
            device = normalize_identity(identity)
        except MalformedEventError:
            continue  # the monitors reject and report that row
        if device not in devices:
            devices.append(device)
    return devices


def format_report(scenario: str, summary: RunSummary) -> str:
    """Text report printed at the end of a run, same wording as the reference scenarios"""
    if scenario == "security":
        lines = [
            f"Authorized packets: {summary.authorized_count}",
            f"Unauthorized packets: {summary.unauthorized_count}",
        ]
    else:
        lines = [
            "",
            "--- Simulation Results ---",
            f"Total Packets Sent:     {summary.total_packets_sent}",
            f"Total Packets Received: {summary.total_packets_received}",
            f"Packet Delivery Ratio (PDR): {summary.delivery_ratio_percent:.2f} %",
            f"Average Energy Consumption per Device: {summary.average_energy_consumed_joules * 1000.0:.2f} mJ",
            "--------------------------",
        ]
    if summary.rejected_count:
        lines.append(f"Rejected malformed events: {summary.rejected_count}")
    return "\n".join(lines)


def save_results(
    monitors: List[Monitor],
    run_output_dir: str,
) -> List[str]:
    base_path = os.path.join(run_output_dir, "log")
    saved = []
    for monitor in monitors:
        file_path = monitor.save_to_csv(base_path)
        if file_path:
            saved.append(file_path)
    print(f"Monitor logs saved to: {', '.join(saved) if saved else '(no records)'}")
    return saved


def save_summary(summary: RunSummary, run_output_dir: str) -> str:
    summary_path = os.path.join(run_output_dir, config.SUMMARY_FILE)
    with open(summary_path, 'w') as f:
        json.dump(summary.to_dict(), f, indent=2)
    print(f"Run summary saved to: {summary_path}")
    return summary_path


def save_parameters_log(
    all_args_dict: Dict[str, Any],
    run_output_dir: str,
):
    """Saves all run parameters to a text file for reproducibility."""
    params_log_path = os.path.join(run_output_dir, config.PARAMETERS_FILE)

    try:
        with open(params_log_path, 'w') as f:
            f.write("--- Run Parameters ---\n")
            f.write(f"Run Start Time: {datetime.now().isoformat()}\n")

            f.write("\n[Command Line Arguments]\n")
            for key, value in sorted(all_args_dict.items()):
                f.write(f"{key}: {value}\n")

        print(f"Run parameters saved to: {params_log_path}")
    except OSError as e:
        print(
            f"--- ERROR: Failed to write parameters log to {params_log_path} ---",
            file=sys.stderr,
        )
        print(f"{e}", file=sys.stderr)
