"""
fakesmtpd runner

Starts fakesmtpd as a subprocess for a test suite and stops it afterwards:

    runner = FakeSMTPdRunner(message_dir='.artifacts', port=9125)
    runner.start()
    ...
    runner.stop()
"""
import logging
import os
import signal
import subprocess
import sys
import time
from pathlib import Path
from typing import List, Optional

from app_fakesmtpd.config import get_app_config, get_base_dir, get_query_port
from app_fakesmtpd.exceptions.fakesmtpd_exception import FakeSMTPdException

logger = logging.getLogger(__name__)

PIDFILE_POLL_INTERVAL = 0.05


class FakeSMTPdRunner:
    """Runs fakesmtpd in a child process"""

    def __init__(
            self,
            message_dir: str,
            port: int,
            http_port: Optional[int] = None,
            pidfile: Optional[str] = None,
            logfile: Optional[str] = None,
            startup_timeout: Optional[float] = None
    ):
        config = get_app_config()
        self.message_dir = message_dir
        self.port = int(port)
        self.http_port = int(http_port) if http_port is not None else get_query_port(self.port)
        self.pidfile = pidfile or config['pidfile']
        self.logfile = logfile
        self.startup_timeout = startup_timeout or config['startup_timeout']
        self.process: Optional[subprocess.Popen] = None

    @property
    def description(self) -> str:
        return f"fakesmtpd server on port {self.port}"

    @property
    def command(self) -> List[str]:
        command = [
            sys.executable,
            str(get_base_dir() / 'manage.py'),
            'start_fakesmtpd',
            str(self.port),
            self.message_dir,
            '--pidfile', self.pidfile,
        ]
        if self.logfile:
            command.extend(['--logfile', self.logfile])
        return command

    @property
    def server_pid(self) -> Optional[int]:
        return self.process.pid if self.process else None

    def start(self) -> int:
        """
        Spawn the server and wait until it has written its PID file

        Returns:
            PID of the server process

        Raises:
            FakeSMTPdException: If the server exits or does not come up in time
        """
        Path(self.message_dir).mkdir(parents=True, exist_ok=True)
        # a stale PID file would look like a started server
        Path(self.pidfile).unlink(missing_ok=True)

        logger.info(f"[start] Starting {self.description}")
        logger.info(f"[start]   ---> {' '.join(self.command)}")
        self.process = subprocess.Popen(self.command, cwd=str(get_base_dir()))

        deadline = time.monotonic() + self.startup_timeout
        while self.read_pidfile() is None:
            if self.process.poll() is not None:
                raise FakeSMTPdException(
                    f"{self.description} exited with code {self.process.returncode}"
                )
            if time.monotonic() > deadline:
                self.stop()
                raise FakeSMTPdException(
                    f"{self.description} did not start within {self.startup_timeout}s"
                )
            time.sleep(PIDFILE_POLL_INTERVAL)

        return self.process.pid

    def read_pidfile(self) -> Optional[int]:
        try:
            return int(Path(self.pidfile).read_text().strip())
        except (FileNotFoundError, ValueError):
            return None

    def stop(self):
        """Terminate the server process"""
        if self.process is None:
            return

        real_pid = self.read_pidfile()
        logger.info(f"[stop] Stopping {self.description} "
                    f"(child PID={self.process.pid}, server PID={real_pid})")

        if real_pid is not None and real_pid != self.process.pid:
            try:
                os.kill(real_pid, signal.SIGTERM)
            except ProcessLookupError:
                logger.debug(f"[stop] Server PID={real_pid} already gone")

        if self.process.poll() is None:
            self.process.terminate()
            try:
                self.process.wait(timeout=self.startup_timeout)
            except subprocess.TimeoutExpired:
                logger.warning(f"[stop] {self.description} did not stop, killing it")
                self.process.kill()
                self.process.wait()

        self.process = None
