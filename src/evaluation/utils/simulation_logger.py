import sys
import os


class SimulationLogger:
    """
    Logger for replay runs, logs both on console and to a file, centralizing the logging.
    """

    def __init__(self, log_filename: str, echo: bool = True):
        """
        Initialize the logger and open the log file, given the full path
        """
        self.log_file_path = log_filename
        self.log_file = None
        self.echo = echo

        log_dir = os.path.dirname(log_filename)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir, exist_ok=True)

        try:
            self.log_file = open(log_filename, 'a', buffering=1)
            self.log(f"--- Log file initialized at: {log_filename} ---")
        except OSError as e:
            sys.stderr.write(f"CRITICAL: Cannot open log file {log_filename}: {e}\n")

    def log(self, message: str):
        """Log message to both console and log file"""
        if self.echo:
            sys.stdout.write(message + "\n")
        if self.log_file:
            try:
                self.log_file.write(message + "\n")
            except OSError as e:
                sys.stderr.write(f"CRITICAL: Failed to write to log file: {e}\n")

    def warning(self, message: str):
        """Warnings go to stderr and to the log file"""
        sys.stderr.write(f"Warning: {message}\n")
        if self.log_file:
            try:
                self.log_file.write(f"Warning: {message}\n")
            except OSError as e:
                sys.stderr.write(f"CRITICAL: Failed to write to log file: {e}\n")

    def flush(self):
        """Flush the log file buffer."""
        if self.log_file:
            self.log_file.flush()

    def close(self):
        """Flush and close the log file"""
        if self.log_file:
            try:
                self.log(f"--- Closing log file: {self.log_file_path} ---")
                self.log_file.close()
            except OSError as e:
                sys.stderr.write(f"Failed to close log file: {e}\n")
            finally:
                self.log_file = None #set the file to None anyway

    def __enter__(self) -> "SimulationLogger":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return None
