"""Durable ledger of deferred YouTrack operations (``youtrack-queue/queue.json``)."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

from reportdesk.domain.enums import QueueOperationStatus, QueueOperationType
from reportdesk.domain.errors import ConflictError, NotFoundError
from reportdesk.domain.models.youtrack import QueueOperation, QueueOperationData
from reportdesk.infra.youtrack.json_store import JsonDocumentStore

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _dump(operation: QueueOperation) -> dict[str, Any]:
    return operation.model_dump(mode="json", by_alias=True, exclude_none=True)


class YouTrackQueue:
    def __init__(self, store: JsonDocumentStore) -> None:
        self._store = store

    @classmethod
    def in_dir(cls, tasks_dir: Path) -> "YouTrackQueue":
        path = tasks_dir / "youtrack-queue" / "queue.json"
        return cls(JsonDocumentStore(path, lambda: {"operations": []}))

    async def enqueue(self, op_type: QueueOperationType, data: QueueOperationData) -> QueueOperation:
        operation = QueueOperation(type=op_type, created_at=_now(), data=data)
        async with self._store.update() as doc:
            doc.setdefault("operations", []).append(_dump(operation))
        logger.info("Queued YouTrack %s for task %s as %s", op_type.value, data.task_id, operation.id)
        return operation

    async def all(self) -> list[QueueOperation]:
        doc = await self._store.read()
        return [QueueOperation.model_validate(raw) for raw in doc.get("operations", [])]

    async def pending(self) -> list[QueueOperation]:
        """Pending operations in creation order."""
        return [op for op in await self.all() if op.status == QueueOperationStatus.PENDING]

    async def get(self, operation_id: str) -> Optional[QueueOperation]:
        for op in await self.all():
            if op.id == operation_id:
                return op
        return None

    async def mark_processing(self, operation_id: str) -> Optional[QueueOperation]:
        """Claim a pending operation and start an attempt.

        Returns None when the operation is no longer pending (another pass got to it first);
        the counter only moves on a successful claim.
        """
        async with self._store.update() as doc:
            operations = doc.setdefault("operations", [])
            for index, raw in enumerate(operations):
                if raw.get("id") != operation_id:
                    continue
                operation = QueueOperation.model_validate(raw)
                if operation.status != QueueOperationStatus.PENDING:
                    logger.info("YouTrack operation %s is %s, not claiming it", operation_id, operation.status.value)
                    return None
                operation.status = QueueOperationStatus.PROCESSING
                operation.attempts += 1
                operation.last_attempt_at = _now()
                operations[index] = _dump(operation)
                return operation
            raise NotFoundError(f"Operation with id '{operation_id}' not found")

    async def mark_completed(self, operation_id: str, result: Optional[dict[str, Any]] = None) -> QueueOperation:
        def _apply(op: QueueOperation) -> None:
            op.status = QueueOperationStatus.COMPLETED
            op.error = None
            op.result = result

        operation = await self._modify(operation_id, _apply)
        logger.info("YouTrack operation %s completed after %d attempt(s)", operation_id, operation.attempts)
        return operation

    async def mark_failed_attempt(self, operation_id: str, error: str, max_attempts: int) -> QueueOperation:
        """Back to pending for the next pass, or failed for good once attempts hit the cap."""

        def _apply(op: QueueOperation) -> None:
            op.error = error
            if op.attempts >= max_attempts:
                op.status = QueueOperationStatus.FAILED
            else:
                op.status = QueueOperationStatus.PENDING

        operation = await self._modify(operation_id, _apply)
        if operation.status == QueueOperationStatus.FAILED:
            logger.warning(
                "YouTrack operation %s failed permanently after %d attempts: %s",
                operation_id,
                operation.attempts,
                error,
            )
        else:
            logger.warning("YouTrack operation %s attempt %d failed: %s", operation_id, operation.attempts, error)
        return operation

    async def remove(self, operation_id: str) -> None:
        """Drop an operation from the ledger. One that a pass is working on stays."""
        async with self._store.update() as doc:
            operations = doc.get("operations", [])
            for index, raw in enumerate(operations):
                if raw.get("id") == operation_id:
                    if raw.get("status") == QueueOperationStatus.PROCESSING.value:
                        raise ConflictError(f"Operation '{operation_id}' is being processed")
                    del operations[index]
                    break
            else:
                raise NotFoundError(f"Operation with id '{operation_id}' not found")
        logger.info("Removed YouTrack operation %s from the queue", operation_id)

    async def _modify(self, operation_id: str, apply: Callable[[QueueOperation], None]) -> QueueOperation:
        async with self._store.update() as doc:
            operations = doc.setdefault("operations", [])
            for index, raw in enumerate(operations):
                if raw.get("id") == operation_id:
                    operation = QueueOperation.model_validate(raw)
                    apply(operation)
                    operations[index] = _dump(operation)
                    return operation
            raise NotFoundError(f"Operation with id '{operation_id}' not found")
