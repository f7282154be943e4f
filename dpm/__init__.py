"""
dpm: Display Priority Manager
Keeps the internal panel primary on hybrid-GPU Dell Precision 7780 laptops
"""

import subprocess
from pathlib import Path


def _gitHash_get() -> str:
    """Short git hash of the checkout, or 'dev' outside a repository"""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short=4", "HEAD"],
            cwd=Path(__file__).parent.parent,
            capture_output=True,
            text=True,
            timeout=1,
        )
    except (OSError, subprocess.SubprocessError):
        return "dev"
    if result.returncode == 0 and result.stdout.strip():
        return result.stdout.strip()
    return "dev"


__version__ = f"2.0.0.{_gitHash_get()}"
__author__ = "dpm contributors"
