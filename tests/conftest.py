"""
Pytest configuration for taskgrid tests.

This module provides shared fixtures and configuration for all tests.
"""

import shutil
import uuid

import pytest


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line(
        "markers", "requires_tmux: mark test as requiring a real tmux binary"
    )


@pytest.fixture
def tmux_server():
    """A libtmux server on a throwaway socket, killed after the test."""
    if shutil.which("tmux") is None:
        pytest.skip("tmux not installed or not in PATH")

    import libtmux

    server = libtmux.Server(socket_name=f"taskgrid-test-{uuid.uuid4().hex[:8]}")
    yield server
    try:
        server.kill()
    except Exception:
        pass
