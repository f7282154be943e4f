"""kscreen-doctor client and output status parser."""

from dpm.kscreen.doctor import KscreenDoctor, TopologyQueryError
from dpm.kscreen.parser import topology_parse

__all__ = ["KscreenDoctor", "TopologyQueryError", "topology_parse"]
