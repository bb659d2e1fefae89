'''
Default run parameters of the two reference scenarios.
They can be overridden by command-line arguments (see utils/setup_args.py).
'''

SCENARIOS = ["security", "iot"]

# --- security scenario (THz access point with address ACL) ---
SECURITY_SIM_TIME = 3.0         # the access point stops the clock at 3 s

# --- iot scenario (energy and delivery ratio) ---
IOT_SIM_TIME = 10.0
INITIAL_ENERGY_J = 1.0          # per device
PACKET_RATE = 1                 # packets per second per device
APP_START = 1.0                 # senders start 1 s into the run

ENERGY_TRACE_FILE = "energy-log.txt"
SUMMARY_FILE = "summary.json"
PARAMETERS_FILE = "parameters.txt"
MONITORS_LOG_FILE = "monitors_log.txt"
