import sys
import os
import traceback
from typing import List, Optional

from simulator.engine.Scheduler import Scheduler
from simulator.engine.common.Monitor import Monitor
from simulator.entities.sources.ReplaySource import ReplaySource
from telemetry.aggregator import RunSummary
from telemetry.allow_list import AllowList
from telemetry.run import RunTelemetry
from evaluation.utils.simulation_logger import SimulationLogger
from experiments import config
from experiments.utils.setup_args import setup_arguments
from experiments.utils.helpers import (
    setup_working_environment,
    estimate_intended_packets,
    discover_devices,
    format_report,
    save_parameters_log,
    save_results,
    save_summary,
)


def build_allow_list(allow: List[str], allow_file: Optional[str]) -> AllowList:
    """Allow-list from the command line identities plus the optional file"""
    identities = list(allow)
    if allow_file:
        identities.extend(AllowList.from_file(allow_file))
    return AllowList(identities)


def run_simulation(scheduler: Scheduler, sim_time: float) -> int:
    """Replays the scheduled events until the end of the run window."""

    print(f"\n--- Replaying events for {sim_time}s ---")
    executed = scheduler.run(until=sim_time)
    print(f"--- Replay finished at {scheduler.now():.6f}s ({executed} events) ---")
    return executed


# ======================================================================================
# Core execution function
# ======================================================================================

def run_single_simulation(
    scenario: str,
    events: str,
    allow: List[str],
    allow_file: Optional[str],
    devices: Optional[List[str]],
    initial_energy: float,
    packet_rate: float,
    intended: Optional[int],
    sim_time: Optional[float],
    app_start: float,
    out_dir: str,
    verbose: bool = False,
) -> RunSummary:
    """
    Orchestrates the setup, replay, finalization and saving for a single run
    """
    if sim_time is None:
        sim_time = config.SECURITY_SIM_TIME if scenario == "security" else config.IOT_SIM_TIME

    run_output_dir = setup_working_environment(out_dir, scenario, events)
    logger = SimulationLogger(os.path.join(run_output_dir, "run_log.txt"))

    try:
        allow_list = build_allow_list(allow, allow_file)
        logger.log(f"Allow-list: {', '.join(allow_list) or '(empty)'}")

        scheduler = Scheduler()
        source = ReplaySource(scheduler)
        trace = ReplaySource.read_trace(events)
        n_events = source.load(trace)
        logger.log(f"Loaded {n_events} events from {events}")

        if devices is None:
            devices = discover_devices(trace)

        if intended is None:
            intended = estimate_intended_packets(len(devices), packet_rate, sim_time, app_start)

        save_parameters_log(
            {
                "scenario": scenario, "events": events, "allow": list(allow_list),
                "allow_file": allow_file, "devices": devices, "initial_energy": initial_energy,
                "packet_rate": packet_rate, "intended": intended, "sim_time": sim_time,
                "app_start": app_start, "out_dir": out_dir,
            },
            run_output_dir,
        )

        trace_path = os.path.join(run_output_dir, config.ENERGY_TRACE_FILE)
        with RunTelemetry(allow_list, trace_path=trace_path, verbose=verbose) as run:
            run.attach_to(source)
            monitors: List[Monitor] = [run.acl_monitor, run.energy_monitor]

            if verbose:
                log_file_path = os.path.join(run_output_dir, config.MONITORS_LOG_FILE)
                logger.log(f"Verbose monitors output will be redirected to: {log_file_path}")
                original_stdout = sys.stdout
                with open(log_file_path, 'w') as log_file_handle:
                    sys.stdout = log_file_handle
                    try:
                        run_simulation(scheduler, sim_time)
                    finally:
                        sys.stdout = original_stdout
            else:
                run_simulation(scheduler, sim_time)

            if run.energy_monitor.trace_failures:
                logger.warning(f"{run.energy_monitor.trace_failures} energy samples could not be written to {trace_path}")

            summary = run.finalize(
                {device: initial_energy for device in devices},
                intended,
            )

        logger.log(format_report(scenario, summary))
        save_results(monitors, run_output_dir)
        save_summary(summary, run_output_dir)
        return summary

    finally:
        logger.close()


# ======================================================================================
# main (for standalone execution)
# ======================================================================================

def main_standalone(argv=None):
    """
    used only if __name__ == "__main__"
    """
    try:
        args = setup_arguments(argv)

        run_single_simulation(
            scenario=args.scenario,
            events=args.events,
            allow=args.allow,
            allow_file=args.allow_file,
            devices=args.devices,
            initial_energy=args.initial_energy,
            packet_rate=args.packet_rate,
            intended=args.intended,
            sim_time=args.sim_time,
            app_start=args.app_start,
            out_dir=args.out_dir,
            verbose=args.verbose,
        )

    except Exception:
        print("\n--- RUN CRASHED (STANDALONE) ---")
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main_standalone()
