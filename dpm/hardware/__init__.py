"""Host introspection and the eligibility gate."""

from dpm.hardware.eligibility import EligibilityChecker
from dpm.hardware.probe import HostProbe

__all__ = ["EligibilityChecker", "HostProbe"]
