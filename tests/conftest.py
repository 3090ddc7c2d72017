"""Shared pytest fixtures for the fhevm-scaffold test suite.

Provides reusable fixtures for:
- A temporary source root holding contract and test artifacts
- A small registry injected directly (no bundled data involved)
- A tiny base template
- A Config wiring the three together
"""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from typing import Any

import pytest

from fhevm_scaffold.config import Config
from fhevm_scaffold.registry import ExampleRegistry
from fhevm_scaffold.utils import set_quiet


# ---------------------------------------------------------------------------
# Artifact text
# ---------------------------------------------------------------------------

COUNTER_SOL = textwrap.dedent("""\
    // SPDX-License-Identifier: BSD-3-Clause-Clear
    pragma solidity ^0.8.24;

    import {FHE, euint32, externalEuint32} from "@fhevm/solidity/lib/FHE.sol";

    /// @title Encrypted counter
    contract FHECounter is SepoliaConfig {
        euint32 private _count;

        function getCount() external view returns (euint32) {
            return _count;
        }

        function increment(externalEuint32 input, bytes calldata proof) external {
            _count = FHE.add(_count, FHE.fromExternal(input, proof));
            FHE.allowThis(_count);
            FHE.allow(_count, msg.sender);
        }
    }
""")

COUNTER_TS = textwrap.dedent("""\
    import { expect } from "chai";

    describe("FHECounter", function () {
      it("increments", async function () {
        expect(true).to.eq(true);
      });
    });
""")

ADD_SOL = textwrap.dedent("""\
    // SPDX-License-Identifier: BSD-3-Clause-Clear
    pragma solidity ^0.8.24;

    contract FHEAdd {
        function add(uint32 a, uint32 b) external pure returns (uint32) {
            return a + b;
        }
    }
""")

ADD_TS = 'describe("FHEAdd", function () {});\n'

ACL_SOL = textwrap.dedent("""\
    pragma solidity ^0.8.24;

    contract AccessControlExample is SepoliaConfig {
        function grant(address user) external {}
    }
""")


# ---------------------------------------------------------------------------
# Registry data
# ---------------------------------------------------------------------------

REGISTRY_DATA: dict[str, Any] = {
    "examples": [
        {
            "name": "fhe-counter",
            "title": "FHE Counter",
            "description": "Encrypted counter using FHE.add",
            "category": "basic",
            "contract_file": "contracts/basic/FHECounter.sol",
            "test_file": "test/basic/FHECounter.ts",
            "difficulty": "beginner",
            "concepts": ["encryption", "arithmetic"],
            "tags": ["counter", "basic"],
            "chapter": "Getting Started",
            "learning_objectives": ["Increment an encrypted counter"],
        },
        {
            "name": "fhe-add",
            "title": "FHE Addition",
            "description": "Adds two encrypted values",
            "category": "basic",
            "contract_file": "contracts/basic/FHEAdd.sol",
            "test_file": "test/basic/FHEAdd.ts",
            "difficulty": "intermediate",
            "concepts": ["fhe-add"],
            "tags": ["arithmetic"],
        },
        {
            "name": "acl",
            "title": "Access Control",
            "description": "Granting decryption rights",
            "category": "access-control",
            "contract_file": "contracts/acl/AccessControlExample.sol",
            "difficulty": "advanced",
            "concepts": ["allow", "Permission management"],
            "tags": ["permissions", "acl"],
        },
    ],
    "categories": [
        {
            "name": "basic",
            "title": "Basic Examples",
            "description": "Fundamental encrypted operations",
            "examples": ["fhe-counter", "fhe-add"],
            "difficulty": "beginner",
        },
        {
            "name": "access-control",
            "title": "Access Control",
            "description": "Managing who may decrypt",
            "examples": ["acl"],
            "difficulty": "advanced",
        },
    ],
}


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def quiet_output():
    """Silence step lines during tests; errors still print."""
    set_quiet(True)
    yield
    set_quiet(False)


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def source_root(tmp_path: Path) -> Path:
    """Temporary repository root containing every artifact the registry names."""
    root = tmp_path / "repo"
    files = {
        "contracts/basic/FHECounter.sol": COUNTER_SOL,
        "test/basic/FHECounter.ts": COUNTER_TS,
        "contracts/basic/FHEAdd.sol": ADD_SOL,
        "test/basic/FHEAdd.ts": ADD_TS,
        "contracts/acl/AccessControlExample.sol": ACL_SOL,
    }
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def base_template(tmp_path: Path) -> Path:
    """Minimal base template with placeholders and an excluded directory."""
    template = tmp_path / "template"
    files = {
        "package.json": json.dumps(
            {"name": "fhevm-hardhat-template", "version": "1.0.0", "scripts": {"test": "hardhat test"}},
            indent=2,
        ),
        "hardhat.config.ts": "export default {};\n",
        "contracts/FHECounter.sol": "contract Placeholder {}\n",
        "test/FHECounter.ts": "// placeholder\n",
        "deploy/deploy.ts": "// placeholder deploy\n",
        "node_modules/junk/index.js": "module.exports = 1;\n",
    }
    for relative, content in files.items():
        path = template / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return template


@pytest.fixture
def output_root(tmp_path: Path) -> Path:
    return tmp_path / "out"


@pytest.fixture
def config(source_root: Path, base_template: Path, output_root: Path) -> Config:
    """Config pointing at the temporary source root and template."""
    return Config(
        source_root=source_root,
        base_template_dir=base_template,
        output_root=output_root,
    )


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

@pytest.fixture
def registry_data() -> dict[str, Any]:
    """A fresh deep copy of ``REGISTRY_DATA`` tests may mutate."""
    return json.loads(json.dumps(REGISTRY_DATA))


@pytest.fixture
def registry(registry_data: dict[str, Any]) -> ExampleRegistry:
    """Small, valid registry built from ``REGISTRY_DATA``."""
    return ExampleRegistry.from_dict(registry_data).ensure_valid()


@pytest.fixture
def registry_file(tmp_path: Path, registry_data: dict[str, Any]) -> Path:
    """``REGISTRY_DATA`` written to a JSON file."""
    path = tmp_path / "examples.json"
    path.write_text(json.dumps(registry_data, indent=2), encoding="utf-8")
    return path
