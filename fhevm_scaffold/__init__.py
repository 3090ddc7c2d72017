"""FHEVM example scaffolding tool.

Turns the static example registry into standalone Hardhat projects and
GitBook documentation pages:

* :mod:`fhevm_scaffold.registry` -- the immutable example/category table.
* :mod:`fhevm_scaffold.renderer` -- jinja2-backed document rendering.
* :mod:`fhevm_scaffold.materializer` -- project and docs generation.

Quick usage::

    from fhevm_scaffold.config import Config
    from fhevm_scaffold.registry import load_default_registry
    from fhevm_scaffold.materializer import ProjectMaterializer

    registry = load_default_registry()
    materializer = ProjectMaterializer(registry, Config())
    project = await materializer.materialize_example("fhe-counter", "./out")
"""

__version__ = "0.3.0"
