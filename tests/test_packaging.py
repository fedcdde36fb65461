# tests/test_packaging.py
"""
setup.py only reads files the source tree ships.
"""

import ast
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
SETUP = ROOT / "setup.py"


def _path_parts(node):
    """``["a", "b"]`` for ``_HERE / "a" / "b"``; None for other shapes."""
    if isinstance(node, ast.Name) and node.id == "_HERE":
        return []
    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.Div):
        head = _path_parts(node.left)
        if head is not None and isinstance(node.right, ast.Constant):
            return head + [node.right.value]
    return None


def _referenced_files():
    tree = ast.parse(SETUP.read_text(encoding="utf-8"))
    found = set()
    for node in ast.walk(tree):
        parts = _path_parts(node)
        if parts:
            found.add(ROOT.joinpath(*parts))
    return found


class TestSetupScript:

    def test_every_read_file_is_shipped(self):
        referenced = _referenced_files()
        assert ROOT / "requirements.txt" in referenced
        missing = sorted(str(p.relative_to(ROOT)) for p in referenced if not p.exists())
        assert missing == []

    def test_no_long_description_from_missing_readme(self):
        text = SETUP.read_text(encoding="utf-8")
        assert "README" not in text or (ROOT / "README.md").exists()
