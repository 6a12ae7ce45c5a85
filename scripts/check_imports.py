#!/usr/bin/env python3
"""Check hexagonal import boundaries inside the asset_archive package.

Layers and what each may import from the package:
- domain/: nothing
- application/: domain
- infrastructure/: domain, application
- bootstrap/: domain, application, infrastructure
- workers/: everything above
- config/: nothing, and every layer may import it

Imports under TYPE_CHECKING count too: the whole module tree is walked.

Usage:
    python scripts/check_imports.py [package_directory]

Exit codes:
    0: No violations found
    1: Violations found
"""
import ast
import sys
from pathlib import Path

PACKAGE = "asset_archive"

ALLOWED_IMPORTS: dict[str, set[str]] = {
    "domain": set(),
    "application": {"domain"},
    "infrastructure": {"domain", "application"},
    "bootstrap": {"domain", "application", "infrastructure"},
    "workers": {"domain", "application", "infrastructure", "bootstrap"},
    "config": set(),
}

# Importable from every layer
SHARED_LAYERS: frozenset[str] = frozenset({"config"})

Violation = tuple[str, int, str]


def imported_modules(node: ast.Import | ast.ImportFrom) -> list[str]:
    """Return the absolute module names an import statement pulls in."""
    if isinstance(node, ast.ImportFrom):
        # Relative imports never cross a layer in this package
        if node.level or node.module is None:
            return []
        return [node.module]
    return [alias.name for alias in node.names]


def layer_of_file(py_file: Path, package_dir: Path) -> str | None:
    try:
        parts = py_file.relative_to(package_dir).parts
    except ValueError:
        return None
    if len(parts) < 2:
        return None
    return parts[0] if parts[0] in ALLOWED_IMPORTS else None


def layer_of_module(module: str) -> str | None:
    parts = module.split(".")
    if len(parts) < 2 or parts[0] != PACKAGE:
        return None
    return parts[1] if parts[1] in ALLOWED_IMPORTS else None


def check_module(module: str, file_layer: str) -> str | None:
    """Return an error message if file_layer may not import module."""
    target = layer_of_module(module)
    if target is None or target == file_layer or target in SHARED_LAYERS:
        return None
    if target not in ALLOWED_IMPORTS[file_layer]:
        return f"{file_layer} layer cannot import from {target} ({module})"
    return None


def check_file_imports(py_file: Path, package_dir: Path) -> list[Violation]:
    file_layer = layer_of_file(py_file, package_dir)
    if file_layer is None:
        return []

    try:
        tree = ast.parse(py_file.read_text(encoding="utf-8"), filename=str(py_file))
    except (SyntaxError, UnicodeDecodeError) as e:
        print(f"Warning: Could not parse {py_file}: {e}", file=sys.stderr)
        return []

    violations: list[Violation] = []
    for node in ast.walk(tree):
        if not isinstance(node, (ast.Import, ast.ImportFrom)):
            continue
        for module in imported_modules(node):
            message = check_module(module, file_layer)
            if message:
                violations.append((str(py_file), node.lineno, message))
    return violations


def check_import_boundaries(package_dir: Path) -> list[Violation]:
    if not package_dir.is_dir():
        print(f"Error: Package directory '{package_dir}' does not exist", file=sys.stderr)
        return []

    violations: list[Violation] = []
    for py_file in sorted(package_dir.rglob("*.py")):
        violations.extend(check_file_imports(py_file, package_dir))
    return violations


def format_violations(violations: list[Violation]) -> str:
    if not violations:
        return ""
    lines = ["Import boundary violations found:", ""]
    lines.extend(f"  {path}:{line}: {message}" for path, line, message in sorted(violations))
    lines.append("")
    lines.append(f"Total: {len(violations)} violation(s)")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if args:
        package_dir = Path(args[0])
    else:
        package_dir = Path(__file__).resolve().parent.parent / PACKAGE

    violations = check_import_boundaries(package_dir)
    if violations:
        print(format_violations(violations))
        return 1
    print("No import boundary violations found.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
