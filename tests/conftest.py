"""Pytest configuration and fixtures."""

import functools
import sys
import threading
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

import pytest

# Add src to path for imports when the package is not installed
_src_path = Path(__file__).resolve().parent.parent / "src"
if str(_src_path) not in sys.path:
    sys.path.insert(0, str(_src_path))

from sandbox_fetcher.settings import Settings


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without child processes")
    config.addinivalue_line("markers", "integration: tests spawning the fetcher process")


@pytest.fixture
def work_dir(tmp_path) -> Path:
    """Empty sandbox work directory."""
    directory = tmp_path / "work"
    directory.mkdir()
    return directory


@pytest.fixture
def source_dir(tmp_path) -> Path:
    """Directory holding files to be fetched."""
    directory = tmp_path / "from"
    directory.mkdir()
    return directory


@pytest.fixture
def launcher_dir(tmp_path) -> Path:
    """
    Launcher directory with a ``sandbox-fetcher`` executable that runs
    this checkout's package with the current interpreter.
    """
    directory = tmp_path / "launcher"
    directory.mkdir()
    script = directory / "sandbox-fetcher"
    script.write_text(
        "#!/bin/sh\n"
        f'PYTHONPATH="{_src_path}${{PYTHONPATH:+:$PYTHONPATH}}"\n'
        "export PYTHONPATH\n"
        f'exec "{sys.executable}" -m sandbox_fetcher "$@"\n'
    )
    script.chmod(0o755)
    return directory


@pytest.fixture
def settings(launcher_dir) -> Settings:
    """Orchestrator settings pointing at the test launcher."""
    return Settings(launcher_dir=launcher_dir, frameworks_home=None, hadoop_home=None)


@pytest.fixture
def no_proxy(monkeypatch):
    """Keep HTTP requests to the local test server off any proxy."""
    for key in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("NO_PROXY", "127.0.0.1,localhost")


@pytest.fixture
def http_server(tmp_path, no_proxy):
    """
    Serve a directory over HTTP on localhost.

    Yields:
        (base_url, served_directory)
    """
    served = tmp_path / "served"
    served.mkdir()
    handler = functools.partial(SimpleHTTPRequestHandler, directory=str(served))
    server = ThreadingHTTPServer(("127.0.0.1", 0), handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}", served
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)
