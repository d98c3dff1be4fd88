from codewright.agent import EVALUATE_PROMPT, Agent
from codewright.config_loader import CodewrightConfig
from codewright.event_bus import EventBus
from codewright.router import RouterResponse


class ScriptedRouter:
    """Replays canned completions and records what the agent sent."""

    def __init__(self, *replies: str):
        self.replies = list(replies)
        self.calls: list[tuple[str, list[dict[str, str]]]] = []

    def complete(self, system_prompt, messages):
        self.calls.append((system_prompt, [dict(m) for m in messages]))
        return RouterResponse(content=self.replies.pop(0), model="scripted")


def _agent(tmp_path, router, **kwargs):
    return Agent(router, config=CodewrightConfig(), working_dir=tmp_path, **kwargs)


def test_completes_after_reading_file(tmp_path):
    (tmp_path / "notes.txt").write_text("remember the milk", encoding="utf-8")
    router = ScriptedRouter(
        "Let me look.\n<read_file><path>notes.txt</path></read_file>",
        "<attempt_completion><result>It says to remember the milk.</result></attempt_completion>",
    )
    agent = _agent(tmp_path, router)

    result = agent.start_task("What does notes.txt say?")

    assert result.status == "completed"
    assert result.iterations == 2
    assert result.final_result == "It says to remember the milk."
    assert [r.action.tool_id.value for r in result.action_results] == ["read_file", "attempt_completion"]

    first_prompt = router.calls[0][1][0]["content"]
    assert first_prompt == "<task>\nWhat does notes.txt say?\n</task>"

    second_system, second_messages = router.calls[1]
    assert "remember the milk" in second_system
    assert "=== REFERENCED FILES ===" in second_system
    assert second_messages[-1]["role"] == "user"
    assert "[read_file succeeded]" in second_messages[-1]["content"]
    assert second_messages[-1]["content"].endswith(EVALUATE_PROMPT)


def test_no_action_stops(tmp_path):
    agent = _agent(tmp_path, ScriptedRouter("I am not sure what to do."))
    result = agent.start_task("do something")
    assert result.status == "no_action"
    assert result.iterations == 1


def test_stop_tool(tmp_path):
    agent = _agent(tmp_path, ScriptedRouter("<stop><message>giving up</message></stop>"))
    result = agent.start_task("impossible")
    assert result.status == "stopped"
    assert result.final_result == "giving up"


def test_max_iterations(tmp_path):
    router = ScriptedRouter(*["<list_files></list_files>"] * 3)
    result = _agent(tmp_path, router).start_task("loop forever", max_iterations=2)

    assert result.status == "max_iterations"
    assert result.iterations == 2
    assert len(router.calls) == 2


def test_multiple_mutating_tools_are_rejected(tmp_path):
    router = ScriptedRouter(
        "<create_file><file>a.txt</file><content>a</content></create_file>"
        "<create_file><file>b.txt</file><content>b</content></create_file>",
        "<attempt_completion><result>ok</result></attempt_completion>",
    )
    result = _agent(tmp_path, router).start_task("make files")

    assert result.status == "completed"
    assert not (tmp_path / "a.txt").exists()
    retry_prompt = router.calls[1][1][-1]["content"]
    assert retry_prompt.startswith("Only list_files, read_file, search_files, web_fetch tools can be used simultaneously.")


def test_failed_completion_does_not_end_task(tmp_path):
    router = ScriptedRouter(
        "<attempt_completion><result>done</result><command>exit 1</command></attempt_completion>",
        "<attempt_completion><result>really done</result></attempt_completion>",
    )
    result = _agent(tmp_path, router).start_task("finish")

    assert result.status == "completed"
    assert result.final_result == "really done"
    assert "[attempt_completion failed]" in router.calls[1][1][-1]["content"]


def test_edit_flow_updates_file(tmp_path):
    target = tmp_path / "app.py"
    target.write_text("print('hi')\n", encoding="utf-8")
    router = ScriptedRouter(
        "<edit_file>\n<file>app.py</file>\n<patch>\n@@ ... @@\n-print('hi')\n+print('hello')\n</patch>\n</edit_file>",
        "<attempt_completion><result>edited</result></attempt_completion>",
    )
    result = _agent(tmp_path, router).start_task("say hello")

    assert result.status == "completed"
    assert target.read_text(encoding="utf-8") == "print('hello')\n"


def test_events_and_history(tmp_path):
    bus = EventBus()
    seen: list[str] = []
    bus.subscribe(lambda e: seen.append(e.event_type))
    router = ScriptedRouter("<attempt_completion><result>ok</result></attempt_completion>")

    result = _agent(tmp_path, router, event_bus=bus, task_id="t-1").start_task("quick")

    assert seen == ["task_started", "plan_parsed", "tool_executed", "task_finished"]
    assert [item.type for item in result.history.items] == ["user_prompt", "agent_response", "action_result"]
    assert 'action_result: "ok"' in result.history.to_prompt_string()


def test_unreadable_file_does_not_abort_task(tmp_path):
    (tmp_path / "blob.bin").write_bytes(b"\xff\xfe\x00binary")
    router = ScriptedRouter(
        "<read_file><path>blob.bin</path></read_file>",
        "<stop></stop>",
    )
    result = _agent(tmp_path, router).start_task("look")

    assert result.status == "stopped"
    assert not result.action_results[0].success
    assert "[read_file failed]" in router.calls[1][1][-1]["content"]
