#!/usr/bin/env python3
"""Fail when production code reads the host clock directly.

Compliance decisions (late classification, exemption voiding) hinge on
"now", so every component takes a TimeAuthorityProtocol instead of
calling datetime.now() or datetime.utcnow(). SystemTimeAuthority is the
single allowed caller.

Usage:
    python scripts/check_no_datetime_now.py [package_directory]

Exit codes:
    0: No violations found
    1: Direct clock reads found
"""

import re
import sys
from pathlib import Path

PACKAGE = "asset_archive"

DATETIME_NOW_PATTERN = re.compile(r"datetime\s*\.\s*(now|utcnow)\s*\(")

ALLOWED_FILES = frozenset(
    {
        "application/services/time_authority_service.py",
    }
)


def check_file(file_path: Path) -> list[tuple[int, str]]:
    """Return (line number, line) for each direct clock read in a file."""
    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return []

    violations: list[tuple[int, str]] = []
    for line_num, line in enumerate(content.splitlines(), start=1):
        if line.lstrip().startswith("#"):
            continue
        if DATETIME_NOW_PATTERN.search(line):
            violations.append((line_num, line.strip()))
    return violations


def find_violations(package_dir: Path) -> dict[str, list[tuple[int, str]]]:
    found: dict[str, list[tuple[int, str]]] = {}
    for py_file in sorted(package_dir.rglob("*.py")):
        relative = py_file.relative_to(package_dir).as_posix()
        if relative in ALLOWED_FILES:
            continue
        violations = check_file(py_file)
        if violations:
            found[relative] = violations
    return found


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if args:
        package_dir = Path(args[0])
    else:
        package_dir = Path(__file__).resolve().parent.parent / PACKAGE

    if not package_dir.is_dir():
        print(f"Warning: {package_dir} not found, skipping check")
        return 0

    all_violations = find_violations(package_dir)
    if not all_violations:
        print(f"No datetime.now() violations found in {package_dir.name}/")
        return 0

    print("Direct datetime.now() calls detected:")
    print()
    for file_path, violations in all_violations.items():
        print(f"  {file_path}:")
        for line_num, line_content in violations:
            print(f"    Line {line_num}: {line_content}")
        print()
    print("Inject TimeAuthorityProtocol and call self._time.now() instead.")
    return 1


if __name__ == "__main__":
    sys.exit(main())
