"""Tests for configuration file loading."""

import pytest

from dyndesk.config_loader import ConfigLoader
from dyndesk.models import DyndeskError


@pytest.mark.asyncio
async def test_load_file(tmp_path, test_logger):
    fname = tmp_path / "config.toml"
    fname.write_text('[dyndesk]\nmin_desktops = 3\ndesktop_label = "Work"\n')

    loader = ConfigLoader(test_logger)
    config = await loader.load(fname)

    assert config == {"dyndesk": {"min_desktops": 3, "desktop_label": "Work"}}
    assert loader.config is config


@pytest.mark.asyncio
async def test_missing_file(tmp_path, test_logger):
    assert await ConfigLoader(test_logger).load(tmp_path / "nope.toml") == {}


@pytest.mark.asyncio
async def test_default_path(tmp_path, test_logger, monkeypatch):
    fname = tmp_path / "default.toml"
    fname.write_text("[dyndesk]\nbackend = \"ewmh\"\n")
    monkeypatch.setattr("dyndesk.constants.CONFIG_FILE", fname)

    assert await ConfigLoader(test_logger).load() == {"dyndesk": {"backend": "ewmh"}}


@pytest.mark.asyncio
async def test_invalid_toml(tmp_path, test_logger):
    fname = tmp_path / "config.toml"
    fname.write_text("[dyndesk\nmin_desktops = ")

    with pytest.raises(DyndeskError):
        await ConfigLoader(test_logger).load(fname)


def test_resolve_path_expands_variables(monkeypatch):
    monkeypatch.setenv("DYNDESK_TEST_DIR", "/somewhere")
    assert str(ConfigLoader.resolve_path("$DYNDESK_TEST_DIR/config.toml")) == "/somewhere/config.toml"
