import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List

from loguru import logger
from pydantic import BaseModel, Field


class AgentEvent(BaseModel):
    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    event_type: str
    task_id: str
    payload: Dict[str, Any]


class EventBus:
    """A synchronous event bus decoupling the agent loop from observers."""

    def __init__(self):
        self._subscribers: List[Callable[[AgentEvent], None]] = []

    def subscribe(self, callback: Callable[[AgentEvent], None]) -> None:
        """Register a callback to be executed when an event is emitted."""
        self._subscribers.append(callback)

    def emit(self, event_type: str, task_id: str, payload: Dict[str, Any]) -> AgentEvent:
        """Construct and broadcast an AgentEvent to all subscribers."""
        event = AgentEvent(event_type=event_type, task_id=task_id, payload=payload)

        for subscriber in self._subscribers:
            try:
                subscriber(event)
            except Exception as e:
                # A failing observer must not stop the agent.
                logger.warning(f"[EVENTS] subscriber failed on {event_type}: {e}")
        return event


class AuditLogger:
    """Appends every event on a bus to a JSONL file."""

    def __init__(self, file_path: Path, event_bus: EventBus):
        self.file_path = Path(file_path)
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        event_bus.subscribe(self.log_event)

    def log_event(self, event: AgentEvent) -> None:
        with open(self.file_path, "a", encoding="utf-8") as f:
            f.write(json.dumps(event.model_dump()) + "\n")
