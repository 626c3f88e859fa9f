"""appforge project generation pipeline.

Turns a platform/framework/feature configuration into a project scaffold by
running it through a fixed roster of stages, reporting progress to a task
store and a notification bus along the way.

Usage::

    from appforge import Configuration, MemoryTaskStore, NotificationBus, Orchestrator

    orchestrator = Orchestrator(MemoryTaskStore(), NotificationBus())
    project = await orchestrator.generate(
        Configuration.from_values("web", "react", ["api"], name="Shop")
    )
    print(project.status, len(project.result.files))
"""

from appforge.config import Config
from appforge.cost import CostEstimate, estimate_cost
from appforge.models import Configuration, ConfigurationError, GenerationResult
from appforge.notifications import NotificationBus
from appforge.orchestrator import STAGES, Orchestrator, StageError
from appforge.store import JsonTaskStore, MemoryTaskStore

__all__ = [
    "Config",
    "Configuration",
    "ConfigurationError",
    "CostEstimate",
    "GenerationResult",
    "JsonTaskStore",
    "MemoryTaskStore",
    "NotificationBus",
    "Orchestrator",
    "STAGES",
    "StageError",
    "estimate_cost",
]
