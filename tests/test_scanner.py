from codewright.scanner import TagRun, TextRun, extract_params, scan, strip_thinking


def test_scan_splits_text_and_tags():
    segments = list(scan("hi <stop></stop> bye", {"stop"}))
    assert segments == [
        TextRun("hi "),
        TagRun(name="stop", body="", raw="<stop></stop>"),
        TextRun(" bye"),
    ]


def test_scan_unknown_name_emits_single_bracket():
    segments = list(scan("<x>1</x>", {"stop"}))
    assert segments[0] == TextRun("<")
    assert "".join(s.text for s in segments) == "<x>1</x>"


def test_scan_requires_matching_closer():
    segments = list(scan("<stop>a</other>", {"stop"}))
    assert all(isinstance(s, TextRun) for s in segments)
    assert "".join(s.text for s in segments) == "<stop>a</other>"


def test_scan_many_unclosed_tags_preserves_text():
    text = "<stop>" * 500
    segments = list(scan(text, {"stop"}))
    assert "".join(s.text for s in segments) == text


def test_extract_params_nested():
    assert extract_params("\n<a> 1 </a>\n<b>two\nlines</b>\n") == {"a": "1", "b": "two\nlines"}


def test_extract_params_content():
    assert extract_params("  just text  ") == {"content": "just text"}


def test_strip_thinking():
    assert strip_thinking("Hi <thinking>plan</thinking> there") == "Hi plan there"
    assert strip_thinking("<thinking>\nx\n</thinking>\nrest") == "x\nrest"
