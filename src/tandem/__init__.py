"""tandem - dependency-aware workspace orchestration for package.json monorepos.

Provides:
- Workspace discovery and the internal dependency graph
- Dependency-ordered concurrent task scheduling with cycle tolerance
- Range-preserving propagation of version bumps
"""

__version__ = "0.1.0"

from tandem.config import TandemConfig, load_config  # noqa: E402
from tandem.diagnostics import (  # noqa: E402
    Diagnostic,
    DiagnosticCollector,
    DiagnosticKind,
    DiagnosticSink,
)
from tandem.errors import (  # noqa: E402
    ConfigurationError,
    ManifestError,
    PackageNotFoundError,
    ReleasePlanInconsistentError,
    ScriptNotFoundError,
    TandemError,
    TaskExecutionError,
    WorkspaceNotFoundError,
)
from tandem.execution import (  # noqa: E402
    BatchResult,
    ExecutionResult,
    ExecutionStatus,
    TaskScheduler,
    run_workspace_tasks,
)
from tandem.validation import validate_project  # noqa: E402
from tandem.versioning import update_package_versions  # noqa: E402
from tandem.workspace import (  # noqa: E402
    DependencyGraph,
    DependencyType,
    Manifest,
    Package,
    Workspace,
)

__all__ = [
    # Version
    "__version__",
    # Core
    "Workspace",
    "Package",
    "Manifest",
    "DependencyType",
    "DependencyGraph",
    "TandemConfig",
    "load_config",
    # Execution
    "TaskScheduler",
    "run_workspace_tasks",
    "ExecutionResult",
    "ExecutionStatus",
    "BatchResult",
    # Versioning
    "update_package_versions",
    "validate_project",
    # Diagnostics
    "Diagnostic",
    "DiagnosticKind",
    "DiagnosticSink",
    "DiagnosticCollector",
    # Errors
    "TandemError",
    "ConfigurationError",
    "WorkspaceNotFoundError",
    "ManifestError",
    "PackageNotFoundError",
    "ScriptNotFoundError",
    "TaskExecutionError",
    "ReleasePlanInconsistentError",
]
