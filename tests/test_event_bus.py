import json

from codewright.event_bus import AgentEvent, AuditLogger, EventBus


def test_event_bus_pub_sub():
    test_bus = EventBus()
    received_events: list[AgentEvent] = []

    def dummy_subscriber(event: AgentEvent):
        received_events.append(event)

    # Subscribe to the bus
    test_bus.subscribe(dummy_subscriber)

    # Emit an event
    test_bus.emit(
        event_type="TEST_EVENT",
        task_id="task-1",
        payload={"key": "value"}
    )

    # Verify the event was received and formatted correctly
    assert len(received_events) == 1

    event = received_events[0]
    assert event.event_type == "TEST_EVENT"
    assert event.task_id == "task-1"
    assert event.payload == {"key": "value"}

    # Verify auto-generated fields
    assert event.event_id is not None
    assert isinstance(event.event_id, str)
    assert event.timestamp is not None


def test_failing_subscriber_does_not_break_emit():
    bus = EventBus()
    received: list[AgentEvent] = []

    def broken(event: AgentEvent):
        raise RuntimeError("boom")

    bus.subscribe(broken)
    bus.subscribe(received.append)
    bus.emit("tool_executed", "task-1", {})

    assert len(received) == 1


def test_audit_logger_writes_jsonl(tmp_path):
    bus = EventBus()
    log_file = tmp_path / "logs" / "events.jsonl"
    AuditLogger(log_file, bus)

    bus.emit("task_started", "task-1", {"task": "x"})
    bus.emit("task_finished", "task-1", {"status": "completed"})

    records = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    assert [r["event_type"] for r in records] == ["task_started", "task_finished"]
    assert records[1]["payload"] == {"status": "completed"}
