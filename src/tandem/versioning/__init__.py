"""Version ranges and propagation of version bumps."""

from tandem.versioning.propagate import VersionMap, update_package_versions
from tandem.versioning.ranges import RANGE_OPERATORS, admits, range_type

__all__ = [
    "RANGE_OPERATORS",
    "VersionMap",
    "admits",
    "range_type",
    "update_package_versions",
]
