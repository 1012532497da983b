"""
Integration tests for the fetch orchestrator.

Each test spawns a real fetcher process through the launcher from
conftest.py and waits for its status.
"""

import asyncio
import io
import os
import stat
import tarfile

import pytest

from sandbox_fetcher.application.services import FetchOrchestrator
from sandbox_fetcher.domain.value_objects import ResourceDescriptor
from sandbox_fetcher.errors import SpawnError
from sandbox_fetcher.settings import Settings

TIMEOUT = 60
EXECUTE_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


async def _fetch(settings, descriptors, work_dir, **kwargs):
    handle = await FetchOrchestrator(settings).run(descriptors, work_dir, **kwargs)
    return await asyncio.wait_for(handle.status, timeout=TIMEOUT)


def _fake_launcher(tmp_path, body: str) -> Settings:
    directory = tmp_path / "fake-launcher"
    directory.mkdir()
    script = directory / "sandbox-fetcher"
    script.write_text("#!/bin/sh\n" + body)
    script.chmod(0o755)
    return Settings(launcher_dir=directory)


@pytest.mark.integration
class TestFetchScenarios:
    """End-to-end fetches through the child process."""

    @pytest.mark.asyncio
    async def test_local_file(self, settings, source_dir, work_dir):
        """Test a bare local path is copied without execute permission."""
        (source_dir / "test").write_text("test")

        status = await _fetch(
            settings, [ResourceDescriptor(str(source_dir / "test"), False, False)], work_dir
        )

        assert status == 0
        assert (work_dir / "test").read_text() == "test"
        assert not os.stat(work_dir / "test").st_mode & EXECUTE_BITS

    @pytest.mark.asyncio
    async def test_compressed_tar(self, settings, source_dir, work_dir):
        """Test a compressed tarball is unpacked into the work directory."""
        data = b"inside the archive"
        with tarfile.open(source_dir / "bundle.tar.gz", "w:gz") as tar:
            info = tarfile.TarInfo("bundle/member.txt")
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))

        status = await _fetch(
            settings, [ResourceDescriptor(str(source_dir / "bundle.tar.gz"), False, True)], work_dir
        )

        assert status == 0
        assert (work_dir / "bundle" / "member.txt").read_bytes() == data

    @pytest.mark.asyncio
    async def test_executable(self, settings, source_dir, work_dir):
        """Test the executable flag grants execute to everyone."""
        (source_dir / "test").write_text("#!/bin/sh\n")
        (source_dir / "test").chmod(0o644)

        status = await _fetch(
            settings, [ResourceDescriptor(str(source_dir / "test"), True, False)], work_dir
        )

        assert status == 0
        assert os.stat(work_dir / "test").st_mode & EXECUTE_BITS == EXECUTE_BITS

    @pytest.mark.asyncio
    async def test_http(self, settings, http_server, work_dir):
        """Test a resource served over HTTP."""
        base_url, served = http_server
        (served / "help").write_text("help text")

        status = await _fetch(
            settings, [ResourceDescriptor(f"{base_url}/help", False, False)], work_dir
        )

        assert status == 0
        assert (work_dir / "help").read_text() == "help text"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("prefix", ["file://", "file://localhost"])
    async def test_file_uri(self, settings, source_dir, work_dir, prefix):
        (source_dir / "test").write_text("test")

        status = await _fetch(
            settings, [ResourceDescriptor(prefix + str(source_dir / "test"), False, False)], work_dir
        )

        assert status == 0
        assert (work_dir / "test").read_text() == "test"

    @pytest.mark.asyncio
    async def test_file_uri_twice_identical(self, settings, source_dir, tmp_path):
        (source_dir / "test").write_bytes(os.urandom(1024))
        descriptor = ResourceDescriptor("file://" + str(source_dir / "test"), False, False)

        contents = []
        for name in ("first", "second"):
            work = tmp_path / name
            work.mkdir()
            assert await _fetch(settings, [descriptor], work) == 0
            contents.append((work / "test").read_bytes())

        assert contents[0] == contents[1]

    @pytest.mark.asyncio
    async def test_missing_source_exit_code(self, settings, source_dir, work_dir):
        status = await _fetch(
            settings, [ResourceDescriptor(str(source_dir / "absent"), False, False)], work_dir
        )

        assert status == 1

    @pytest.mark.asyncio
    async def test_missing_work_directory_exit_code(self, settings, source_dir, tmp_path):
        (source_dir / "test").write_text("test")

        status = await _fetch(
            settings, [ResourceDescriptor(str(source_dir / "test"), False, False)], tmp_path / "absent"
        )

        assert status == 2


@pytest.mark.integration
class TestOrchestratorProcess:
    """Process handling of the orchestrator."""

    @pytest.mark.asyncio
    async def test_missing_launcher(self, tmp_path, work_dir):
        orchestrator = FetchOrchestrator(Settings(launcher_dir=tmp_path / "nowhere"))

        with pytest.raises(SpawnError):
            await orchestrator.run([], work_dir)

    @pytest.mark.asyncio
    async def test_launcher_not_executable(self, tmp_path, work_dir):
        settings = _fake_launcher(tmp_path, "exit 0\n")
        (settings.launcher_dir / "sandbox-fetcher").chmod(0o644)

        with pytest.raises(SpawnError):
            await FetchOrchestrator(settings).run([], work_dir)

    @pytest.mark.asyncio
    async def test_run_returns_before_exit_and_kill_resolves_none(self, tmp_path, work_dir):
        settings = _fake_launcher(tmp_path, "exec sleep 30\n")

        handle = await FetchOrchestrator(settings).run([], work_dir)
        assert not handle.status.done()

        handle.kill()
        assert await asyncio.wait_for(handle.status, timeout=TIMEOUT) is None

    @pytest.mark.asyncio
    async def test_exit_code_passed_through(self, tmp_path, work_dir):
        settings = _fake_launcher(tmp_path, "exit 7\n")

        handle = await FetchOrchestrator(settings).run([], work_dir)

        assert await asyncio.wait_for(handle, timeout=TIMEOUT) == 7

    @pytest.mark.asyncio
    async def test_child_environment(self, tmp_path, work_dir, monkeypatch):
        dump = tmp_path / "env.txt"
        settings = _fake_launcher(tmp_path, f'env > "{dump}"\n')
        monkeypatch.setenv("MESOS_USER", "inherited-user")
        monkeypatch.setenv("HADOOP_HOME", "/inherited/hadoop")
        monkeypatch.setenv("UNRELATED_VARIABLE", "kept")

        handle = await FetchOrchestrator(settings).run(
            [ResourceDescriptor("/tmp/a", True, False), ResourceDescriptor("hdfs:///b.tgz")],
            work_dir,
        )
        assert await asyncio.wait_for(handle.status, timeout=TIMEOUT) == 0

        lines = dump.read_text().splitlines()
        assert "MESOS_EXECUTOR_URIS=/tmp/a+1N hdfs:///b.tgz+0X" in lines
        assert f"MESOS_WORK_DIRECTORY={work_dir}" in lines
        assert "UNRELATED_VARIABLE=kept" in lines
        assert not any(line.startswith("MESOS_USER=") for line in lines)
        assert not any(line.startswith("HADOOP_HOME=") for line in lines)
