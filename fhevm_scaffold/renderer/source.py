"""Helpers that inspect artifact text without interpreting it.

Source artifacts are opaque to the renderer; these functions only pull out
the few names the documents mention (contract name, function signatures)
and wrap text in markdown fences.
"""

from __future__ import annotations

import re
from pathlib import PurePath

from fhevm_scaffold.utils import to_pascal

_CONTRACT_RE = re.compile(r"^\s*contract\s+(\w+)(?:\s+is\s+|\s*\{)", re.MULTILINE)
_FUNCTION_RE = re.compile(r"^\s*function\s+(\w+)\s*\(([^)]*)\)([^{;]*)", re.MULTILINE)
_DOC_BLOCK_RE = re.compile(r"/\*\*[ \t]*\n\s*\*[ \t]*(.+?)[ \t]*\n")
_NOTICE_RE = re.compile(r"@notice[ \t]+(.+)")
_PRAGMA_RE = re.compile(r"^\s*pragma\s+solidity\s+([^;]+);", re.MULTILINE)
_BACKTICK_RUN_RE = re.compile(r"`{3,}")

_LANGUAGES: dict[str, str] = {
    ".sol": "solidity",
    ".ts": "typescript",
    ".js": "javascript",
    ".json": "json",
    ".sh": "bash",
}


def extract_contract_name(source_text: str, fallback_path: str | PurePath | None = None) -> str:
    """Return the first ``contract X`` declared in *source_text*.

    Falls back to the PascalCase stem of *fallback_path*, then ``"Contract"``.
    """
    match = _CONTRACT_RE.search(source_text)
    if match:
        return match.group(1)
    if fallback_path is not None:
        stem = to_pascal(PurePath(fallback_path).stem)
        if stem:
            return stem
    return "Contract"


def extract_description(source_text: str) -> str:
    """Return a one-line description taken from the contract's comments.

    Uses the first line of the first multi-line ``/** ... */`` block unless it
    is a NatSpec tag, then the first ``@notice``; empty when neither exists.
    """
    block = _DOC_BLOCK_RE.search(source_text)
    if block:
        line = block.group(1).removesuffix("*/").strip()
        if line and not line.startswith("@"):
            return line
    notice = _NOTICE_RE.search(source_text)
    if notice:
        return notice.group(1).removesuffix("*/").strip()
    return ""


def extract_function_signatures(source_text: str) -> list[dict[str, str]]:
    """Return ``{"name", "signature"}`` for every ``function`` declaration."""
    functions: list[dict[str, str]] = []
    for match in _FUNCTION_RE.finditer(source_text):
        name, params, trailer = match.groups()
        signature = f"function {name}({params}){trailer}"
        functions.append({"name": name, "signature": " ".join(signature.split())})
    return functions


def extract_solidity_version(source_text: str) -> str | None:
    """Return the ``pragma solidity`` constraint, if any."""
    match = _PRAGMA_RE.search(source_text)
    return match.group(1).strip() if match else None


def code_language(path: str | PurePath) -> str:
    """Map an artifact file suffix to a markdown fence language."""
    return _LANGUAGES.get(PurePath(path).suffix.lower(), "text")


def fenced(text: str, language: str) -> str:
    """Wrap *text* verbatim in a fence longer than any backtick run it contains."""
    longest = max((len(run) for run in _BACKTICK_RUN_RE.findall(text)), default=2)
    fence = "`" * max(3, longest + 1)
    body = text if text.endswith("\n") else text + "\n"
    return f"{fence}{language}\n{body}{fence}"
