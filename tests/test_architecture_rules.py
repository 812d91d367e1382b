"""Architecture enforcement tests for the ingestion engine's layering.

Import boundaries are checked with static file scans (no imports, so no
import-time side effects). Rules validated here:

1) Inner layers (``base``, ``config``, ``persistence`` and the dialect
   packages) must not import the ``service`` layer (request builder, CLI).
2) ``base`` may depend on the repository protocol in
   ``persistence.interfaces`` but never on a concrete backend.
3) Dialect packages are pure payload parsers: they must not import the
   stream controller or any persistence code.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable, List, Pattern

import pytest

PACKAGE_ROOT = Path(__file__).resolve().parent.parent / "chat_ingest"
DIALECT_PACKAGES = ("anthropic", "openai", "hunyuan")

_IMPORT_LINE = re.compile(r"^\s*(?:from|import)\s+(\S+)", re.MULTILINE)


def _iter_python_files(root: Path) -> Iterable[Path]:
    """Yield source files under ``root``, skipping caches and the test suite."""
    for path in root.rglob("*.py"):
        if "__pycache__" in path.parts or "tests" in path.relative_to(PACKAGE_ROOT).parts:
            continue
        yield path


def _imported_modules(path: Path) -> List[str]:
    return _IMPORT_LINE.findall(path.read_text(encoding="utf-8", errors="replace"))


def _offenders(roots: Iterable[Path], forbidden: Pattern[str]) -> List[str]:
    found: List[str] = []
    for root in roots:
        for py in _iter_python_files(root):
            found.extend(f"{py}: imports '{m}'" for m in _imported_modules(py) if forbidden.search(m))
    return found


@pytest.fixture(scope="module", autouse=True)
def _require_package() -> None:
    if not PACKAGE_ROOT.is_dir():
        pytest.skip("chat_ingest package not found next to tests/")


def test_inner_layers_do_not_import_service() -> None:
    roots = [PACKAGE_ROOT / name for name in ("base", "config", "persistence", *DIALECT_PACKAGES)]
    offenders = _offenders(roots, re.compile(r"(^|\.)service(\.|$)"))
    if offenders:
        pytest.fail("Inner layers must not import the service layer.\n" + "\n".join(offenders))


def test_base_uses_only_repository_protocol() -> None:
    offenders = _offenders(
        [PACKAGE_ROOT / "base"],
        re.compile(r"persistence\.(?!interfaces(\.|$))"),
    )
    if offenders:
        pytest.fail("base must depend on persistence.interfaces only.\n" + "\n".join(offenders))


def test_dialects_are_pure_parsers() -> None:
    offenders = _offenders(
        [PACKAGE_ROOT / name for name in DIALECT_PACKAGES],
        re.compile(r"stream_controller|persistence|(^|\.)http(\.|$)"),
    )
    if offenders:
        pytest.fail("Dialect packages must not import the controller, persistence or HTTP.\n" + "\n".join(offenders))
