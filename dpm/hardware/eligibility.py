"""
Eligibility gate.

Decides whether the host matches the known-bad configuration: the right
chassis, running on the discrete GPU only, with more than one display
attached. Gates are evaluated in that order and the first failure wins,
so later (more expensive) probes are skipped on hosts that cannot match.
"""

from __future__ import annotations

import logging
from typing import Optional

from dpm.common.config import HardwareConfig
from dpm.hardware.probe import HostProbe

logger = logging.getLogger(__name__)

__all__ = ["EligibilityChecker"]


class EligibilityChecker:
    """Evaluates the identity, discrete-GPU and display-count gates."""

    def __init__(
        self,
        hardware: HardwareConfig,
        probe: HostProbe,
        log: Optional[logging.Logger] = None,
    ) -> None:
        """
        Initialize checker.

        Args:
            hardware: Expected identity strings and minimum display count.
            probe: Host introspection source.
            log: Logger to report through (module logger by default).
        """
        self._hardware: HardwareConfig = hardware
        self._probe: HostProbe = probe
        self._log: logging.Logger = log or logger

    def isEligible(self, force: bool) -> bool:
        """
        Decide whether remediation should run on this host.

        Args:
            force: Skip every gate.

        Returns:
            True when the fix should be attempted.
        """
        if force:
            self._log.info("Force mode enabled - skipping hardware checks")
            return True

        if not self.identity_check():
            return False
        if not self.discreteGpu_check():
            return False
        if not self.displayCount_check():
            return False

        self._log.info("Hardware checks passed - fix should be applied")
        return True

    def identity_check(self) -> bool:
        """Host vendor and product must contain the configured substrings."""
        vendor, product = self._probe.identity_read()
        if self._hardware.vendor not in vendor or self._hardware.product not in product:
            self._log.info(
                "Not a %s %s - found: %s %s",
                self._hardware.vendor,
                self._hardware.product,
                vendor,
                product,
            )
            return False
        return True

    def discreteGpu_check(self) -> bool:
        """Discrete GPU must be driving the host with no integrated GPU visible."""
        if not self._probe.discreteDriver_isLoaded():
            self._log.debug("Discrete GPU driver not loaded (%s missing)", self._hardware.discrete_driver_path)
            return False

        devices = self._probe.pciDevices_list()
        if devices is None:
            self._log.info("Could not enumerate PCI devices")
            return False

        discrete = self._probe.discreteDevices_find(devices)
        for line in discrete:
            self._log.debug("Found discrete GPU device: %s", line)
        if not discrete:
            self._log.info("Discrete GPU not found")
            return False

        integrated = self._probe.integratedDevices_find(devices)
        for line in integrated:
            self._log.debug("Found integrated graphics: %s", line)
        if integrated:
            self._log.info("Integrated graphics present - not in discrete-only mode")
            return False

        return True

    def displayCount_check(self) -> bool:
        """At least `min_displays` connectors must report `connected`."""
        count = self._probe.connectedDisplays_count()
        if count < self._hardware.min_displays:
            self._log.info(
                "Multiple displays not detected (%d connected, need %d)",
                count,
                self._hardware.min_displays,
            )
            return False
        return True
