"""
Shared fixtures for zsh2fish tests.

The real history source shells out to zsh; these fixtures replace it with canned
`fc -l -t '%s'` output so the parser and pipeline can be tested without zsh.
"""

from typing import Callable

import pytest

import zsh2fish


def fc_listing(*commands: str, start_ts: int = 1700000000) -> bytes:
    """Build `fc -l` style output (padded event number, two-space gaps) for `commands`."""
    lines = [
        f"{i:>5}  {start_ts + i}  {command}"
        for i, command in enumerate(commands, 1)
    ]
    return ("\n".join(lines) + "\n").encode("utf-8")


@pytest.fixture
def history_source() -> Callable[..., Callable[[str], bytes]]:
    """Factory for a history source that records the path it was asked for."""

    def make(raw: bytes):
        def source(path: str) -> bytes:
            source.calls.append(path)
            return raw

        source.calls = []
        return source

    return make


@pytest.fixture
def patch_source(monkeypatch, history_source):
    """Install canned bytes as the default zsh history source for the whole run."""

    def install(raw: bytes):
        source = history_source(raw)
        monkeypatch.setattr(zsh2fish, "zsh_history_source", source)
        return source

    return install


@pytest.fixture(name="fc_listing")
def fc_listing_fixture():
    return fc_listing
