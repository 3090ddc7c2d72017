"""Project materialization and documentation generation.

Quick usage::

    from fhevm_scaffold.materializer import ProjectMaterializer

    materializer = ProjectMaterializer(registry, config)
    project = await materializer.materialize_example("fhe-counter", "/tmp/out")
"""

from .artifacts import ResolvedArtifacts, read_artifact, resolve_artifacts
from .batch import BatchReport, ItemOutcome, ItemStatus
from .docs import DocsGenerator
from .project import GeneratedProject, ProjectMaterializer
from .summary import IndexEntry, SummaryIndex
from .workspace import TargetLock, Workspace, lock_path_for

__all__ = [
    "BatchReport",
    "DocsGenerator",
    "GeneratedProject",
    "IndexEntry",
    "ItemOutcome",
    "ItemStatus",
    "ProjectMaterializer",
    "ResolvedArtifacts",
    "SummaryIndex",
    "TargetLock",
    "Workspace",
    "lock_path_for",
    "read_artifact",
    "resolve_artifacts",
]
