import logging
import signal
import subprocess

from .exceptions import SessionLaunchError
from .remote_command import ssm_parameters

INTERACTIVE_DOCUMENT = "AWS-StartInteractiveCommand"


class SSMSession:
    """Interactive SSM Session Manager context manager class.

    Runs ``aws ssm start-session`` attached to the current terminal. Entering
    starts the process, ``wait()`` blocks until the operator leaves the
    session, and exiting makes sure the process is gone.
    """

    def __init__(
        self,
        target: str,
        command: str,
        region: str = None,
        profile: str = None,
        logger=None,
        label: str = None,
        document_name: str = INTERACTIVE_DOCUMENT,
    ):
        self.target = target
        self.command = command
        self.region = region
        self.profile = profile
        self.logger = logger or logging.getLogger(__name__)
        self.label = label
        self.document_name = document_name
        self.proc = None

    def _log(self, message):
        prefix = f"[{self.label}] " if self.label else ""
        self.logger.info(f"{prefix}{message}")

    @property
    def argv(self):
        argv = [
            "aws",
            "ssm",
            "start-session",
            "--target",
            self.target,
            "--document-name",
            self.document_name,
            "--parameters",
            ssm_parameters(self.command),
        ]
        if self.region:
            argv += ["--region", self.region]
        if self.profile:
            argv += ["--profile", self.profile]
        return argv

    def __enter__(self):
        self._log(f"Starting SSM session for target: {self.target}")
        self.logger.debug("Remote command: %s", self.command)
        try:
            self.proc = subprocess.Popen(self.argv)
        except FileNotFoundError as e:
            raise SessionLaunchError("The AWS CLI is required.") from e
        except OSError as e:
            raise SessionLaunchError(
                f"Failed to start aws ssm start-session: {e}"
            ) from e
        return self

    def wait(self):
        # Ctrl-C belongs to the remote shell while the session is up.
        previous = signal.signal(signal.SIGINT, signal.SIG_IGN)
        try:
            returncode = self.proc.wait()
        finally:
            signal.signal(signal.SIGINT, previous)

        if returncode != 0:
            raise SessionLaunchError(
                f"SSM session to {self.target} exited with status {returncode}.",
                returncode=returncode,
            )
        self._log("Session closed.")
        return returncode

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.proc and self.proc.poll() is None:
            self._log("Terminating aws ssm start-session...")
            self.proc.terminate()
            try:
                self.proc.wait(timeout=5)
            except subprocess.TimeoutExpired:
                self._log("Force killing aws ssm start-session...")
                self.proc.kill()
