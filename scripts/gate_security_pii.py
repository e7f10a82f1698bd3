#!/usr/bin/env python3
"""Gate: no user content in logs, no print() in runtime code.

Fails if, anywhere under src/:
- print( is called
- a logger call references a variable holding user content (message text,
  prompts, chat IDs, raw payloads, tokens) without passing it through
  len(), bool(), hash_identifier() or safe_log_context()

Usage:
    python scripts/gate_security_pii.py
"""

import ast
import sys
from pathlib import Path

# Variable names that carry user content or credentials
SENSITIVE_NAMES = frozenset(
    {
        "text",
        "prompt",
        "clean",
        "chat_id",
        "payload",
        "body",
        "token",
        "update",
        "sanitized",
    }
)

# Calls whose result is safe to log whatever the argument
SAFE_WRAPPERS = frozenset({"len", "bool", "hash_identifier", "safe_log_context"})

LOG_METHODS = frozenset({"debug", "info", "warning", "error", "critical", "exception", "log"})


def _call_name(node: ast.Call) -> str:
    func = node.func
    if isinstance(func, ast.Name):
        return func.id
    if isinstance(func, ast.Attribute):
        return func.attr
    return ""


def _is_logger_call(node: ast.Call) -> bool:
    func = node.func
    if not isinstance(func, ast.Attribute) or func.attr not in LOG_METHODS:
        return False
    target = func.value
    if isinstance(target, ast.Name):
        return target.id.endswith("logger")
    if isinstance(target, ast.Attribute):
        return target.attr.endswith("logger")
    return False


def _unsafe_names(node: ast.AST) -> list[str]:
    """Sensitive names used in node outside of a safe wrapper call."""
    if isinstance(node, ast.Call) and _call_name(node) in SAFE_WRAPPERS:
        return []
    if isinstance(node, ast.Name) and node.id in SENSITIVE_NAMES:
        return [node.id]
    found: list[str] = []
    for child in ast.iter_child_nodes(node):
        found.extend(_unsafe_names(child))
    return found


def check_file(filepath: Path) -> list[str]:
    """Check one file. Returns a list of error messages."""
    try:
        tree = ast.parse(filepath.read_text(encoding="utf-8"), filename=str(filepath))
    except (UnicodeDecodeError, SyntaxError) as e:
        return [f"{filepath}: could not parse: {e}"]

    errors = []
    for node in ast.walk(tree):
        if not isinstance(node, ast.Call):
            continue
        if isinstance(node.func, ast.Name) and node.func.id == "print":
            errors.append(f"{filepath}:{node.lineno}: print() not allowed in runtime code")
        elif _is_logger_call(node):
            args = [*node.args, *(kw.value for kw in node.keywords)]
            for name in sorted({n for arg in args for n in _unsafe_names(arg)}):
                errors.append(
                    f"{filepath}:{node.lineno}: logger call uses '{name}' "
                    "without redaction (len/hash_identifier/safe_log_context)"
                )
    return errors


def main(src_dir: Path | None = None) -> int:
    """Run the gate on the src directory."""
    src_dir = src_dir or Path(__file__).resolve().parent.parent / "src"
    if not src_dir.exists():
        sys.stderr.write("Error: src directory not found\n")
        return 1

    all_errors: list[str] = []
    for pyfile in sorted(src_dir.rglob("*.py")):
        all_errors.extend(check_file(pyfile))

    if all_errors:
        sys.stderr.write("PII gate FAILED:\n")
        for err in all_errors:
            sys.stderr.write(f"  {err}\n")
        return 1

    sys.stdout.write("PII gate PASSED\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
