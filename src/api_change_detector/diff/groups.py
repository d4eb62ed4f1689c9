"""Group discovery and per-group analysis.

A directory may hold several API documents named ``apiDocs-<group>.<ext>``.
Each group is diffed against the same-named document of the previous
version, independently of the others.
"""

import logging
from collections.abc import Callable
from pathlib import Path

from api_change_detector.config import DetectorSettings
from api_change_detector.parser.base import ApiDocument
from api_change_detector.parser.swagger import load_document

from .comparator import compare
from .models import Group, GroupResult

logger = logging.getLogger(__name__)

DocumentLoader = Callable[[str], ApiDocument | None]


def extract_group_name(filename: str, settings: DetectorSettings | None = None) -> str | None:
    """``apiDocs-internal.yaml`` -> ``internal``; None if the name does not match."""
    settings = settings or DetectorSettings()
    if not filename.startswith(settings.file_prefix):
        return None
    stem, dot, ext = filename[len(settings.file_prefix):].rpartition(".")
    if not dot or not stem or ext not in settings.extensions:
        return None
    return stem


def display_name(group_name: str, settings: DetectorSettings | None = None) -> str:
    settings = settings or DetectorSettings()
    known = settings.display_names.get(group_name)
    if known:
        return known
    return f"{group_name[:1].upper()}{group_name[1:]} API"


def scan_group_files(directory: Path | str | None, settings: DetectorSettings | None = None) -> dict[str, Path]:
    """Map group name -> document path for one directory, sorted by group name."""
    settings = settings or DetectorSettings()
    if directory is None:
        return {}
    directory = Path(directory)
    if not directory.is_dir():
        return {}

    try:
        filenames = [p.name for p in directory.iterdir() if p.is_file()]
    except OSError as e:
        logger.warning("Error scanning directory %s: %s", directory, e)
        return {}

    preference = {ext: i for i, ext in enumerate(settings.extensions)}
    found: dict[str, Path] = {}
    for filename in sorted(filenames, key=lambda f: preference.get(f.rpartition(".")[2], len(preference))):
        name = extract_group_name(filename, settings)
        if name is not None and name not in found:
            found[name] = directory / filename

    return {name: found[name] for name in sorted(found)}


def discover_groups(
    new_dir: Path | str,
    old_dir: Path | str | None = None,
    settings: DetectorSettings | None = None,
) -> dict[str, Group]:
    """Pair every group of ``new_dir`` with its counterpart in ``old_dir``, if any."""
    settings = settings or DetectorSettings()
    logger.info("Discovering API groups in %s", new_dir)

    new_groups = scan_group_files(new_dir, settings)
    old_groups = scan_group_files(old_dir, settings)

    groups = {}
    for name, new_path in new_groups.items():
        old_path = old_groups.get(name)
        groups[name] = Group(
            name=name,
            display_name=display_name(name, settings),
            new_path=str(new_path),
            old_path=str(old_path) if old_path is not None else None,
        )

    logger.info("Discovered %d API groups: %s", len(groups), list(groups))
    return groups


def analyze_group(group: Group, load: DocumentLoader = load_document) -> GroupResult:
    """Diff one group. A group without a previous document yields no changes."""
    old_doc = load(group.old_path) if group.old_path is not None else None
    new_doc = load(group.new_path)
    return GroupResult.from_change_set(compare(old_doc, new_doc), group)


def analyze_all_groups(
    new_dir: Path | str,
    old_dir: Path | str | None = None,
    load: DocumentLoader = load_document,
    settings: DetectorSettings | None = None,
) -> dict[str, GroupResult]:
    """Discover groups and diff each one; a failing group never stops the others."""
    logger.info("Analyzing changes for all groups")
    groups = discover_groups(new_dir, old_dir, settings)

    results: dict[str, GroupResult] = {}
    for name, group in groups.items():
        logger.info("Analyzing group: %s (%s)", group.display_name, name)
        try:
            result = analyze_group(group, load)
        except Exception as e:
            logger.error("Error analyzing group %s: %s", name, e)
            results[name] = GroupResult.failed(group, str(e))
            continue

        summary = result.summary
        logger.info(
            "%s: %d breaking, %d new, %d modified",
            group.display_name,
            summary.breaking_changes,
            summary.new_endpoints,
            summary.modified_endpoints,
        )
        results[name] = result

    return results
