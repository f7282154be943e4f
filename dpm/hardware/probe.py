"""Read-only host introspection: DMI identity, PCI devices, DRM connectors."""

from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path
from typing import Optional

from dpm.common.config import HardwareConfig
from dpm.common.types import CommandRunner, HostProfile

logger = logging.getLogger(__name__)


class HostProbe:
    """Gathers the facts the eligibility gates are evaluated against.

    Every method is read-only. Paths and patterns come from the
    `hardware` config section so tests can point the probe at a fake
    sysfs tree and a fake `lspci`.
    """

    def __init__(
        self,
        hardware: HardwareConfig,
        runner: CommandRunner = subprocess.run,
        log: Optional[logging.Logger] = None,
    ) -> None:
        """
        Initialize probe.

        Args:
            hardware: Hardware section of the configuration.
            runner: subprocess.run-compatible callable used for `lspci`.
            log: Logger to report through (module logger by default).
        """
        self._hardware: HardwareConfig = hardware
        self._runner: CommandRunner = runner
        self._log: logging.Logger = log or logger
        self._discrete_re = re.compile(hardware.discrete_gpu_pattern, re.IGNORECASE)
        self._integrated_re = re.compile(hardware.integrated_gpu_pattern, re.IGNORECASE)

    def identity_read(self) -> tuple[str, str]:
        """
        Read vendor and product strings from the DMI identity interface.

        Returns:
            (vendor, product); an unreadable file reads as "".
        """
        vendor = self._firstLine_read(Path(self._hardware.sys_vendor_path))
        product = self._firstLine_read(Path(self._hardware.product_name_path))
        self._log.debug("Hardware: %s %s", vendor, product)
        return vendor, product

    def discreteDriver_isLoaded(self) -> bool:
        """Check that the discrete GPU driver interface path exists."""
        return Path(self._hardware.discrete_driver_path).exists()

    def pciDevices_list(self) -> Optional[list[str]]:
        """
        List PCI devices through `lspci`.

        Returns:
            One entry per device line, or None if `lspci` could not be run.
        """
        try:
            completed = self._runner(
                [self._hardware.lspci_command],
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            self._log.debug("Failed to run %s: %s", self._hardware.lspci_command, exc)
            return None
        return [line for line in completed.stdout.splitlines() if line.strip()]

    def discreteDevices_find(self, devices: list[str]) -> list[str]:
        """Device lines that match the discrete GPU vendor pattern."""
        return [line for line in devices if self._discrete_re.search(line)]

    def integratedDevices_find(self, devices: list[str]) -> list[str]:
        """Device lines that match the integrated graphics pattern."""
        return [line for line in devices if self._integrated_re.search(line)]

    def connectedDisplays_count(self) -> int:
        """
        Count DRM connectors whose status attribute reads `connected`.

        Returns:
            Number of connected display interfaces.
        """
        drm_root = Path(self._hardware.drm_path)
        count = 0
        for connector in sorted(drm_root.glob("card*-*")):
            status = self._firstLine_read(connector / "status")
            if status == "connected":
                count += 1
        self._log.debug("Connected displays: %d", count)
        return count

    def profile_collect(self) -> HostProfile:
        """
        Gather every fact at once, without short-circuiting.

        Returns:
            Snapshot of host identity, GPU state and display count.
        """
        vendor, product = self.identity_read()
        devices = self.pciDevices_list() or []
        return HostProfile(
            vendor=vendor,
            product=product,
            has_discrete_gpu=self.discreteDriver_isLoaded() and bool(self.discreteDevices_find(devices)),
            has_integrated_gpu=bool(self.integratedDevices_find(devices)),
            connected_displays=self.connectedDisplays_count(),
        )

    @staticmethod
    def _firstLine_read(path: Path) -> str:
        try:
            text = path.read_text(errors="replace")
        except OSError:
            return ""
        return text.split("\n", 1)[0]
