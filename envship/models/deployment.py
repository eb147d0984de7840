"""Deployment models — targets, the deploy state machine, results."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from envship.models.environment import EnvironmentName


class DeploymentTarget(BaseModel):
    """Where one environment is served from.

    Defined by operator settings; never persisted. Only the edge-cached
    (production) target carries an ``edge_cache_id``.
    """

    model_config = ConfigDict(frozen=True)

    environment_name: EnvironmentName
    config_source_path: str
    storage_destination: str
    edge_cache_id: str | None = None
    edge_domain: str | None = None

    @property
    def is_edge_cached(self) -> bool:
        return bool(self.edge_cache_id)


class DeployState(str, Enum):
    """Per-invocation deploy state."""

    PENDING = "pending"
    BUILDING = "building"
    CONFIGURING = "configuring"
    PUBLISHING = "publishing"
    INVALIDATING = "invalidating"
    DONE = "done"
    FAILED = "failed"


# Valid state transitions, enforced by DeployMachine.
# PENDING -> CONFIGURING is taken when a run reuses an artifact that was
# already built for a previous environment.
VALID_TRANSITIONS: dict[DeployState, set[DeployState]] = {
    DeployState.PENDING: {DeployState.BUILDING, DeployState.CONFIGURING, DeployState.FAILED},
    DeployState.BUILDING: {DeployState.CONFIGURING, DeployState.FAILED},
    DeployState.CONFIGURING: {DeployState.PUBLISHING, DeployState.FAILED},
    DeployState.PUBLISHING: {
        DeployState.INVALIDATING,
        DeployState.DONE,
        DeployState.FAILED,
    },
    DeployState.INVALIDATING: {DeployState.DONE, DeployState.FAILED},
    DeployState.DONE: set(),  # terminal
    DeployState.FAILED: set(),  # terminal
}

TERMINAL_STATES: frozenset[DeployState] = frozenset(
    s for s, allowed in VALID_TRANSITIONS.items() if not allowed
)


class StateTransition(BaseModel):
    """Records a single state transition for the deploy report."""

    model_config = ConfigDict(frozen=True)

    from_state: DeployState
    to_state: DeployState
    at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    detail: str = ""


class PublishReport(BaseModel):
    """What a mirror publish changed at the destination."""

    model_config = ConfigDict(frozen=True)

    destination: str
    uploaded: list[str] = []
    deleted: list[str] = []


class DeployResult(BaseModel):
    """Structured outcome of one ``deploy`` invocation."""

    model_config = ConfigDict(frozen=True)

    environment: EnvironmentName
    storage_destination: str
    state: DeployState
    transitions: list[StateTransition] = []

    objects_uploaded: int = 0
    objects_deleted: int = 0
    artifact_digest: str = ""  # digest of the artifact excluding the config slot
    config_digest: str = ""  # digest of the substituted config document

    edge_cached: bool = False
    invalidation_attempted: bool = False
    invalidation_succeeded: bool | None = None  # None when not edge cached
    invalidation_id: str | None = None
    invalidation_error: str | None = None

    live_urls: list[str] = []
    failed_step: str | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.state == DeployState.DONE
