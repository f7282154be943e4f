"""Pytest configuration and shared fixtures for dpm tests

This module provides the fake sysfs tree fixture and logging capture
used across the unit tests. Command fakes live in tests/fakes.py.
"""

import logging
from typing import Callable, Optional

import pytest

from dpm.common.config import Config, HardwareConfig


@pytest.fixture
def fake_host(tmp_path) -> Callable[..., HardwareConfig]:
    """Factory for a fake sysfs/procfs tree and the HardwareConfig pointing at it

    Usage:
        hardware = fake_host(vendor="Dell Inc.", product="Precision 7780",
                             driver=True, connectors={"card1-eDP-1": "connected"})
    """

    def _build(
        vendor: str = "Dell Inc.\n",
        product: str = "Precision 7780\n",
        driver: bool = True,
        connectors: Optional[dict[str, str]] = None,
        min_displays: int = 2,
    ) -> HardwareConfig:
        dmi = tmp_path / "dmi"
        dmi.mkdir(exist_ok=True)
        (dmi / "sys_vendor").write_text(vendor)
        (dmi / "product_name").write_text(product)

        driver_path = tmp_path / "proc" / "driver" / "nvidia"
        if driver:
            driver_path.mkdir(parents=True, exist_ok=True)

        drm = tmp_path / "drm"
        drm.mkdir(exist_ok=True)
        for name, status in (connectors or {}).items():
            connector = drm / name
            connector.mkdir()
            (connector / "status").write_text(f"{status}\n")
        # Card nodes themselves carry no status and must be ignored
        (drm / "card1").mkdir(exist_ok=True)

        return HardwareConfig(
            sys_vendor_path=str(dmi / "sys_vendor"),
            product_name_path=str(dmi / "product_name"),
            discrete_driver_path=str(driver_path),
            drm_path=str(drm),
            min_displays=min_displays,
        )

    return _build


@pytest.fixture
def default_config() -> Config:
    """Built-in default configuration."""
    return Config()


@pytest.fixture(autouse=True)
def setup_logging(caplog):
    """Setup logging for tests"""
    caplog.set_level(logging.DEBUG)

