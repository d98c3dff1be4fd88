from codewright.message import ActionBlock, PlainBlock, parse_assistant_message
from codewright.tools import ToolId


def test_plain_text_message():
    message = "Hello, this is a plain text message"
    blocks = parse_assistant_message(message)
    assert blocks == [PlainBlock(content=message)]


def test_empty_message_yields_single_empty_block():
    blocks = parse_assistant_message("")
    assert len(blocks) == 1
    assert isinstance(blocks[0], PlainBlock)
    assert blocks[0].content == ""


def test_single_tool_use():
    message = "I will read the file.\n<read_file>\n<path>test.txt</path>\n</read_file>\nDone reading."
    blocks = parse_assistant_message(message)

    assert len(blocks) == 3
    assert blocks[0] == PlainBlock(content="I will read the file.\n")
    assert isinstance(blocks[1], ActionBlock)
    assert blocks[1].action.tool_id == ToolId.READ_FILE
    assert blocks[1].action.params == {"path": "test.txt"}
    assert blocks[2] == PlainBlock(content="\nDone reading.")


def test_compact_tool_tag():
    blocks = parse_assistant_message("<read_file><path>a.txt</path></read_file>")
    assert len(blocks) == 1
    assert blocks[0].action.tool_id == "read_file"
    assert blocks[0].action.params == {"path": "a.txt"}


def test_multiple_tool_uses():
    message = (
        "First step:\n"
        "<list_files>\n<directory>src</directory>\n</list_files>\n"
        "Next step:\n"
        "<read_file>\n<path>src/test.txt</path>\n</read_file>\n"
        "All done."
    )
    blocks = parse_assistant_message(message)

    assert [b.type for b in blocks] == ["plain", "action", "plain", "action", "plain"]
    assert blocks[0].content == "First step:\n"
    assert blocks[1].action.params == {"directory": "src"}
    assert blocks[2].content == "\nNext step:\n"
    assert blocks[3].action.params == {"path": "src/test.txt"}
    assert blocks[4].content == "\nAll done."


def test_unknown_tool_falls_back_to_plain_text():
    message = "Some text\n<invalid_tool>\n<param>value</param>\n</invalid_tool>\nMore text"
    assert parse_assistant_message(message) == [PlainBlock(content=message)]


def test_unregistered_tool_passthrough():
    message = "<bogus_tool><x>1</x></bogus_tool>"
    assert parse_assistant_message(message) == [PlainBlock(content=message)]


def test_body_without_nested_tags_becomes_content_param():
    blocks = parse_assistant_message("<execute_command>  ls -la  </execute_command>")
    assert blocks[0].action.params == {"content": "ls -la"}


def test_stray_angle_brackets_survive():
    message = "if a < b and c <d> then <read_file><path>x.py</path></read_file> ok"
    blocks = parse_assistant_message(message)

    assert blocks[0] == PlainBlock(content="if a < b and c <d> then ")
    assert blocks[1].action.params == {"path": "x.py"}
    assert blocks[2] == PlainBlock(content=" ok")


def test_unclosed_tool_tag_is_plain():
    message = "<read_file><path>x</path>"
    assert parse_assistant_message(message) == [PlainBlock(content=message)]


def test_thinking_wrapper_is_stripped():
    message = "<thinking>\nI should look first.\n</thinking>\n<list_files></list_files>"
    blocks = parse_assistant_message(message)

    assert blocks[0] == PlainBlock(content="I should look first.\n")
    assert blocks[1].action.tool_id == ToolId.LIST_FILES


def test_custom_vocabulary_restricts_tools():
    message = "<read_file><path>a</path></read_file>"
    blocks = parse_assistant_message(message, tool_ids={"list_files"})
    assert blocks == [PlainBlock(content=message)]


def test_patch_param_keeps_inner_angle_brackets():
    message = (
        "<edit_file>\n<file>a.py</file>\n<patch>\n@@ ... @@\n-if a<b:\n+if a <= b:\n</patch>\n</edit_file>"
    )
    blocks = parse_assistant_message(message)
    assert blocks[0].action.params == {
        "file": "a.py",
        "patch": "@@ ... @@\n-if a<b:\n+if a <= b:",
    }


def test_non_tool_name_in_vocabulary_does_not_hide_inner_tags():
    message = "<wrapper><read_file><path>a.py</path></read_file></wrapper>"
    blocks = parse_assistant_message(message, tool_ids={"wrapper", "read_file"})

    assert blocks[0] == PlainBlock(content="<wrapper>")
    assert blocks[1].action.tool_id == ToolId.READ_FILE
    assert blocks[1].action.params == {"path": "a.py"}
    assert blocks[2] == PlainBlock(content="</wrapper>")
