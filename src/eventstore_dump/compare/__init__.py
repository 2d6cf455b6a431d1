# ABOUTME: Dump comparison module for checking two feed dumps against each other.
# ABOUTME: Used to verify a replica or migration reproduced the same entries.

from eventstore_dump.compare.dump_diff import (
    ComparisonReport,
    DumpMap,
    compare_dumps,
    load_dump,
)

__all__ = ["ComparisonReport", "DumpMap", "compare_dumps", "load_dump"]
