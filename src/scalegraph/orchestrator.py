"""
Scale Workbench: the thin orchestration layer.

Every user-triggered operation runs the same pipeline:

    request -> await generative service -> validate -> assemble -> store.add

ARCHITECTURAL RULE:
    - The only suspension point is the awaited service call
    - The store is touched after the await, never before it
    - Insertion is the last step; a failure earlier leaves the family untouched

Each operation class ("branching", "importing") has its own guard. A second
call while one is outstanding is rejected immediately, not queued, and the
guard is released on every exit path.

A call captures the family generation and a per-operation token when it
starts. If either has moved by the time the service answers (the family
was replaced, or the call was cancelled), the result is discarded.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, FrozenSet, Iterator, List, Mapping, Optional, Sequence, Set, Tuple

from scalegraph import graph
from scalegraph.assembler import assemble, branch_node_id, build_fallback_root, build_root
from scalegraph.config import EngineConfig
from scalegraph.errors import (
    AdaptationValidationError,
    ClientError,
    IngestError,
    IngestRejectedError,
    NodeNotFoundError,
    NodeValidationError,
    OperationInProgressError,
    RootProtectedError,
    ScaleGraphError,
    StaleResultError,
    StructuringValidationError,
    TransportError,
)
from scalegraph.layout import next_branch_position
from scalegraph.model import ScaleNode
from scalegraph.serialization import build_adaptation_request, build_structuring_request
from scalegraph.store import ScaleStore, validate_node
from scalegraph.validation import StructuringStatus, validate_adaptation, validate_structuring


BRANCHING = "branching"
IMPORTING = "importing"

ServiceClient = Callable[[Dict[str, Any]], Awaitable[Mapping[str, Any]]]
GroupingConfirmation = Callable[[Mapping[str, Any]], bool]


# =============================================================================
# OUTCOMES
# =============================================================================


class BranchStatus(Enum):
    CREATED = "created"
    INVALID = "invalid"
    FAILED = "failed"
    STALE = "stale"
    BUSY = "busy"
    NOT_FOUND = "not_found"


class ImportStatus(Enum):
    IMPORTED = "imported"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    INVALID = "invalid"
    FAILED = "failed"
    STALE = "stale"
    BUSY = "busy"


@dataclass
class BranchOutcome:
    """
    Result of ScaleWorkbench.branch().

    Properties:
        status: What happened
        node: The inserted branch (CREATED only)
        warnings: Structural drift messages (CREATED only)
        error: The ScaleGraphError behind a non-CREATED status
    """

    status: BranchStatus
    node: Optional[ScaleNode] = None
    warnings: List[str] = field(default_factory=list)
    error: Optional[ScaleGraphError] = None

    @property
    def ok(self) -> bool:
        return self.status is BranchStatus.CREATED


@dataclass
class ImportOutcome:
    """Result of ScaleWorkbench.import_scale()."""

    status: ImportStatus
    node: Optional[ScaleNode] = None
    used_fallback: bool = False
    error: Optional[ScaleGraphError] = None

    @property
    def ok(self) -> bool:
        return self.status is ImportStatus.IMPORTED


@dataclass(frozen=True)
class DeletePlan:
    """A cascade removal awaiting confirmation."""

    target_id: str
    ids: FrozenSet[str]

    @property
    def count(self) -> int:
        return len(self.ids)


# =============================================================================
# GUARDS
# =============================================================================


class OperationGuard:
    """Per-operation in-progress flags."""

    def __init__(self):
        self._held: Set[str] = set()

    def is_held(self, operation: str) -> bool:
        return operation in self._held

    @contextmanager
    def hold(self, operation: str) -> Iterator[None]:
        if operation in self._held:
            raise OperationInProgressError(operation)
        self._held.add(operation)
        try:
            yield
        finally:
            self._held.discard(operation)


# =============================================================================
# WORKBENCH
# =============================================================================


class ScaleWorkbench:
    """
    Coordinates the engine components for one scale family.

    Args:
        store: The family's ScaleStore
        adaptation_client: async callable(request) -> response dict for
            branch adaptation. Raises TransportError on failure.
        structuring_client: async callable(request) -> response dict for
            ingest structuring. Without it imports use the fallback root.
        config: EngineConfig (layout constants, root id and position)
    """

    def __init__(self, store: ScaleStore, adaptation_client: Optional[ServiceClient] = None,
                 structuring_client: Optional[ServiceClient] = None,
                 config: Optional[EngineConfig] = None):
        self.store = store
        self.adaptation_client = adaptation_client
        self.structuring_client = structuring_client
        self.config = config or EngineConfig()
        self._guard = OperationGuard()
        self._tokens: Dict[str, int] = {}

    @classmethod
    def from_config(cls, config: EngineConfig, **clients: Optional[ServiceClient]) -> "ScaleWorkbench":
        return cls(ScaleStore(strict=config.strict), config=config, **clients)

    # -------------------------------------------------------------------------
    # call bookkeeping
    # -------------------------------------------------------------------------

    def in_progress(self, operation: str) -> bool:
        return self._guard.is_held(operation)

    def cancel(self, operation: str) -> bool:
        """
        Invalidate the result of an in-flight call.

        The call still finishes, but whatever it returns is discarded.

        Returns:
            True if a call of that kind was in progress
        """
        self._tokens[operation] = self._tokens.get(operation, 0) + 1
        return self.in_progress(operation)

    def _start(self, operation: str) -> Tuple[int, int]:
        self._tokens[operation] = self._tokens.get(operation, 0) + 1
        return self.store.family_generation, self._tokens[operation]

    def _check_current(self, operation: str, ticket: Tuple[int, int]) -> None:
        generation, token = ticket
        if self.store.family_generation != generation:
            raise StaleResultError(f"The scale family changed during {operation}")
        if self._tokens.get(operation) != token:
            raise StaleResultError(f"{operation.capitalize()} was cancelled")

    # -------------------------------------------------------------------------
    # branching
    # -------------------------------------------------------------------------

    async def branch(self, source_id: str, intent: str) -> BranchOutcome:
        """
        Create an adapted branch of source_id.

        The new node is placed at next_branch_position for the next free
        branch index of the source and inserted as the last step.
        """
        try:
            with self._guard.hold(BRANCHING):
                return await self._branch(source_id, intent)
        except OperationInProgressError as e:
            return BranchOutcome(status=BranchStatus.BUSY, error=e)

    async def _branch(self, source_id: str, intent: str) -> BranchOutcome:
        source = self.store.get(source_id)
        if source is None:
            return BranchOutcome(status=BranchStatus.NOT_FOUND, error=NodeNotFoundError(source_id))
        if self.adaptation_client is None:
            return BranchOutcome(
                status=BranchStatus.FAILED,
                error=ClientError("No adaptation service is configured."),
            )

        ticket = self._start(BRANCHING)
        try:
            payload = await self.adaptation_client(build_adaptation_request(source, intent))
        except TransportError as e:
            return BranchOutcome(status=BranchStatus.FAILED, error=e)

        try:
            self._check_current(BRANCHING, ticket)
            source = self.store.get(source_id)
            if source is None:
                raise StaleResultError(f"Source scale {source_id!r} was removed during branching")
        except StaleResultError as e:
            return BranchOutcome(status=BranchStatus.STALE, error=e)

        try:
            check = validate_adaptation(payload, source)
        except AdaptationValidationError as e:
            return BranchOutcome(status=BranchStatus.INVALID, error=e)

        index = self.store.next_branch_index(source.id)
        position = next_branch_position(source, index, self.config.layout)
        node = assemble(payload, source, position, branch_node_id(source.id, index + 1))
        self.store.add(node)
        return BranchOutcome(status=BranchStatus.CREATED, node=node, warnings=list(check.warnings))

    # -------------------------------------------------------------------------
    # importing
    # -------------------------------------------------------------------------

    async def import_scale(self, records: Sequence[Any], filename: str,
                           confirm_grouping: Optional[GroupingConfirmation] = None) -> ImportOutcome:
        """
        Replace the family with a new root built from ingest records.

        Args:
            records: IngestRecord-like objects (id, dimension, text)
            filename: Source file name, used for the fallback scale name
            confirm_grouping: Called with the structuring response when the
                service reports the file had no dimensions of its own. Must
                return True for the grouping it invented to be accepted.
        """
        try:
            with self._guard.hold(IMPORTING):
                return await self._import(list(records), filename, confirm_grouping)
        except OperationInProgressError as e:
            return ImportOutcome(status=ImportStatus.BUSY, error=e)

    async def _import(self, records: List[Any], filename: str,
                      confirm_grouping: Optional[GroupingConfirmation]) -> ImportOutcome:
        if not records:
            return ImportOutcome(status=ImportStatus.INVALID, error=IngestError("No items found in file"))

        if self.structuring_client is None:
            return self._commit_root(self._fallback_root(records, filename), used_fallback=True)

        ticket = self._start(IMPORTING)
        try:
            payload = await self.structuring_client(build_structuring_request(records, filename))
        except TransportError as e:
            return ImportOutcome(status=ImportStatus.FAILED, error=e)

        try:
            self._check_current(IMPORTING, ticket)
        except StaleResultError as e:
            return ImportOutcome(status=ImportStatus.STALE, error=e)

        try:
            verdict = validate_structuring(payload)
        except StructuringValidationError as e:
            return ImportOutcome(status=ImportStatus.INVALID, error=e)

        if verdict.status is StructuringStatus.REJECTED:
            return ImportOutcome(
                status=ImportStatus.REJECTED,
                error=IngestRejectedError(verdict.rejection_reason or "Invalid scale data"),
            )

        if not verdict.has_dimensions:
            if confirm_grouping is None or not confirm_grouping(payload):
                return ImportOutcome(status=ImportStatus.CANCELLED)

        if not payload["dimensions"]:
            root = self._fallback_root(records, filename, name=payload["scale_name"])
            return self._commit_root(root, used_fallback=True)

        root = build_root(payload, filename, node_id=self.config.root_id, position=self.config.root_position)
        return self._commit_root(root)

    def _fallback_root(self, records: List[Any], filename: str, name: Optional[str] = None) -> ScaleNode:
        return build_fallback_root(records, filename, node_id=self.config.root_id,
                                   position=self.config.root_position, name=name)

    def _commit_root(self, root: ScaleNode, used_fallback: bool = False) -> ImportOutcome:
        # A root that fails validation must not empty the family
        if self.store.strict:
            try:
                validate_node(root)
            except NodeValidationError as e:
                return ImportOutcome(status=ImportStatus.INVALID, error=e)
        self.store.clear()
        self.store.add(root)
        self.store.set_active(root.id)
        return ImportOutcome(status=ImportStatus.IMPORTED, node=root, used_fallback=used_fallback)

    # -------------------------------------------------------------------------
    # deletion
    # -------------------------------------------------------------------------

    def prepare_delete(self, node_id: str) -> Optional[DeletePlan]:
        """
        Compute what deleting node_id would remove, for confirmation.

        Returns:
            DeletePlan, or None if node_id is not in the family

        Raises:
            RootProtectedError: node_id is the root (checked first)
        """
        node = self.store.get(node_id)
        if node is None:
            return None
        if graph.is_root(node):
            raise RootProtectedError(node_id)
        return DeletePlan(target_id=node_id, ids=frozenset(self.store.cascade_delete_set(node_id)))

    def confirm_delete(self, plan: DeletePlan) -> int:
        """
        Remove a confirmed plan.

        Returns:
            Number of nodes removed (0 if the target is already gone)

        Raises:
            PartialCascadeError: the subtree changed since the plan was made
        """
        if plan.target_id not in self.store:
            return 0
        return self.store.remove_cascade(plan.ids)


__all__ = [
    "BRANCHING",
    "IMPORTING",
    "BranchStatus",
    "ImportStatus",
    "BranchOutcome",
    "ImportOutcome",
    "DeletePlan",
    "OperationGuard",
    "ScaleWorkbench",
]
