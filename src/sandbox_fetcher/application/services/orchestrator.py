"""
Fetch Orchestrator

Agent-side launcher for the fetcher process. Encodes the request into
the environment, spawns ``sandbox-fetcher`` and hands back a handle
whose status resolves when the child exits.
"""

import asyncio
import os
from pathlib import Path
from typing import IO, Any, Dict, Optional, Sequence, Union

import structlog

from sandbox_fetcher.domain.value_objects import ResourceDescriptor
from sandbox_fetcher.errors import SpawnError
from sandbox_fetcher.infrastructure.protocol import PROTOCOL_KEYS, encode_environment
from sandbox_fetcher.settings import Settings, get_settings

logger = structlog.get_logger(__name__)

FETCHER_EXECUTABLE = "sandbox-fetcher"

Redirect = Union[int, IO[Any], None]


class FetchHandle:
    """
    Completion handle for one fetcher process.

    ``status`` resolves to the exit code, or ``None`` when the process
    was terminated by a signal. Cancelling ``status`` does not stop the
    process; use ``terminate()`` or ``kill()`` for that.
    """

    def __init__(self, process: asyncio.subprocess.Process):
        self._process = process
        self.status: "asyncio.Task[Optional[int]]" = asyncio.ensure_future(self._wait())

    @property
    def pid(self) -> int:
        return self._process.pid

    async def _wait(self) -> Optional[int]:
        returncode = await self._process.wait()
        if returncode < 0:
            logger.warning("Fetcher terminated by signal", pid=self.pid, signal=-returncode)
            return None
        logger.info("Fetcher exited", pid=self.pid, exit_code=returncode)
        return returncode

    def terminate(self) -> None:
        self._signal(self._process.terminate)

    def kill(self) -> None:
        self._signal(self._process.kill)

    def _signal(self, send) -> None:
        if self._process.returncode is not None:
            return
        try:
            send()
        except ProcessLookupError:
            pass

    def __await__(self):
        return self.status.__await__()


class FetchOrchestrator:
    """Launch the fetcher for a task's resources."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    @property
    def executable(self) -> Path:
        return Path(self.settings.launcher_dir) / FETCHER_EXECUTABLE

    def environment(
        self,
        descriptors: Sequence[ResourceDescriptor],
        work_directory,
        user: Optional[str] = None,
    ) -> Dict[str, str]:
        """
        Full child environment: the agent's own environment with every
        protocol key replaced by the encoded request.
        """
        encoded = encode_environment(
            descriptors,
            work_directory,
            user=user,
            frameworks_home=self.settings.frameworks_home,
            hadoop_home=self.settings.hadoop_home,
        )
        env = {k: v for k, v in os.environ.items() if k not in PROTOCOL_KEYS}
        env.update(encoded)
        return env

    async def run(
        self,
        descriptors: Sequence[ResourceDescriptor],
        work_directory,
        user: Optional[str] = None,
        stdout: Redirect = None,
        stderr: Redirect = None,
    ) -> FetchHandle:
        """
        Spawn the fetcher and return its handle without waiting for it.

        Args:
            descriptors: Resources to fetch, in order
            work_directory: Existing directory receiving the artifacts
            user: Optional owner of the fetched artifacts
            stdout: File object or descriptor for the child's stdout;
                inherited when None. Pipes are not drained.
            stderr: Same for stderr

        Raises:
            SpawnError: If the process cannot be created
            ConfigurationError: If a descriptor cannot be encoded
        """
        env = self.environment(descriptors, work_directory, user=user)
        executable = self.executable

        try:
            process = await asyncio.create_subprocess_exec(
                str(executable),
                env=env,
                stdout=stdout,
                stderr=stderr,
            )
        except OSError as e:
            raise SpawnError(
                "Failed to start fetcher process",
                detail=str(e),
                executable=str(executable),
            ) from e

        logger.info(
            "Fetcher started",
            pid=process.pid,
            work_directory=str(work_directory),
            resources=len(descriptors),
        )
        return FetchHandle(process)
