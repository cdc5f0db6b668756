"""Processors for running chat turns and provisioning the hosted assistant."""

from .assistant_provisioner import AssistantProvisioner
from .run_orchestrator import RunOrchestrator

__all__ = [
    "AssistantProvisioner",
    "RunOrchestrator",
]
