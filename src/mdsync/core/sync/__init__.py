"""
The sync engine: fingerprint cache, identity resolution, deferred tasks,
resource kinds with their importers and exporters, and the orchestrator.
"""

from .cache import FingerprintCache
from .fields import FieldSet
from .identity import IdentityResolver
from .kinds import Kind, KindRegistry, default_registry
from .models import DocumentOutcome, OutcomeStatus, SyncReport
from .orchestrator import SyncOrchestrator
from .tasks import DeferredTaskQueue, Pending

__all__ = [
    "DeferredTaskQueue",
    "DocumentOutcome",
    "FieldSet",
    "FingerprintCache",
    "IdentityResolver",
    "Kind",
    "KindRegistry",
    "OutcomeStatus",
    "Pending",
    "SyncOrchestrator",
    "SyncReport",
    "default_registry",
]
