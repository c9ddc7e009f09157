"""
grafctl - keep Grafana dashboards and their SQL/PromQL query files in step.

Dashboards reference query files from panel descriptions
(``query=<path>``). grafctl pushes file contents into dashboard targets,
exports targets back to files, normalizes descriptions, and backs up or
restores a whole Grafana instance.
"""

__version__ = "0.4.0"

# Re-export core entry points for convenience
from grafctl.core.errors import GrafctlError
from grafctl.core.reconcile import ReconcileService

__all__ = ["GrafctlError", "ReconcileService", "__version__"]
