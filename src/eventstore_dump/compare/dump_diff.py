# ABOUTME: Comparison of two feed dump files keyed by entry id.
# ABOUTME: Reports missing keys, differing values and duplicates, naming known aggregates.

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

import structlog

log = structlog.get_logger()


def aggregate_id_from_key(key: str) -> str:
    """Return the aggregate id of a four-part colon-separated key, else an empty string."""
    parts = key.split(":")
    if len(parts) == 4:
        return parts[2]
    return ""


def describe_key(key: str, known_aggregates: Mapping[str, str]) -> str | None:
    """Look up the description of the aggregate a key belongs to."""
    return known_aggregates.get(aggregate_id_from_key(key))


@dataclass
class DuplicateRecord:
    """A key seen more than once in a dump file."""

    key: str
    previous: str
    value: str
    record_no: int
    description: str | None = None


@dataclass
class DumpMap:
    """Key/value view of one dump file; later records win."""

    path: Path
    records: dict[str, str] = field(default_factory=dict)
    duplicates: list[DuplicateRecord] = field(default_factory=list)
    skipped: int = 0

    def __len__(self) -> int:
        return len(self.records)


@dataclass
class ComparisonReport:
    """Differences between a source and a target dump."""

    source: DumpMap
    target: DumpMap
    missing_from_target: list[str]
    missing_from_source: list[str]
    differing: list[str]
    descriptions: dict[str, str] = field(default_factory=dict)


def load_dump(path: Path, known_aggregates: Mapping[str, str] | None = None) -> DumpMap:
    """Read a dump file into a map of first field to second field.

    Args:
        path: Dump file with one "<key> <value> ..." record per line.
        known_aggregates: Aggregate id to description lookup for duplicate logging.

    Returns:
        DumpMap for the file.
    """
    known_aggregates = known_aggregates or {}
    dump = DumpMap(path=path)

    with path.open(encoding="utf-8") as f:
        for record_no, line in enumerate(f, start=1):
            line_parts = line.rstrip("\n").split(" ")
            if len(line_parts) < 2:
                log.warning("dump_line_skipped", path=str(path), record=record_no, line=line)
                dump.skipped += 1
                continue

            key, value = line_parts[0], line_parts[1]
            previous = dump.records.get(key)
            if previous is not None:
                duplicate = DuplicateRecord(
                    key=key,
                    previous=previous,
                    value=value,
                    record_no=record_no,
                    description=describe_key(key, known_aggregates),
                )
                log.info(
                    "dump_duplicate_key",
                    key=key,
                    has=previous,
                    adding=value,
                    record=record_no,
                    aggregate=duplicate.description,
                )
                dump.duplicates.append(duplicate)

            dump.records[key] = value

    log.info("dump_loaded", path=str(path), records=len(dump.records))
    return dump


def missing_keys(left: Mapping[str, str], right: Mapping[str, str]) -> list[str]:
    """Keys of left that are absent from right, in left's order."""
    return [key for key in left if key not in right]


def differing_keys(left: Mapping[str, str], right: Mapping[str, str]) -> list[str]:
    """Keys present in both maps whose values differ."""
    return [key for key, value in left.items() if key in right and right[key] != value]


def compare_dumps(
    source_path: Path,
    target_path: Path,
    known_aggregates: Mapping[str, str] | None = None,
) -> ComparisonReport:
    """Load two dump files and compare their keys and values."""
    known_aggregates = known_aggregates or {}
    source = load_dump(source_path, known_aggregates)
    target = load_dump(target_path, known_aggregates)

    differing = differing_keys(source.records, target.records)
    descriptions = {}
    for key in differing:
        description = describe_key(key, known_aggregates)
        if description:
            descriptions[key] = description

    return ComparisonReport(
        source=source,
        target=target,
        missing_from_target=missing_keys(source.records, target.records),
        missing_from_source=missing_keys(target.records, source.records),
        differing=differing,
        descriptions=descriptions,
    )
