import io
import json

from rich.console import Console

from codewright.console import NullAgentConsole, StdoutAgentConsole, create_agent_console
from codewright.history import AgentHistory
from codewright.tools import Action, ActionResult, ToolId


def test_history_prompt_string():
    history = AgentHistory()
    history.add_user_prompt("fix the bug")
    history.add_agent_response("<read_file><path>a.py</path></read_file>")
    history.add_action_result(ActionResult(action=Action(tool_id=ToolId.READ_FILE), result="Read a.py"))

    text = history.to_prompt_string()
    assert text.split("\n------\n") == [
        'user_prompt: "fix the bug"',
        'agent_response: "<read_file><path>a.py</path></read_file>"',
        'action_result: "Read a.py"',
    ]


def test_history_json():
    history = AgentHistory()
    history.add_user_prompt("hi")
    assert json.loads(history.to_json()) == {"items": [{"type": "user_prompt", "content": "hi"}]}


def test_stdout_console_escapes_markup():
    buffer = io.StringIO()
    console = StdoutAgentConsole(Console(file=buffer, no_color=True, width=200))
    console.tool("edit_file(file=[red]x[/])")
    console.assistant("   ")

    assert "edit_file(file=[red]x[/])" in buffer.getvalue()
    assert buffer.getvalue().count("\n") == 1


def test_create_agent_console():
    assert isinstance(create_agent_console(False), NullAgentConsole)
    assert isinstance(create_agent_console(True), StdoutAgentConsole)
