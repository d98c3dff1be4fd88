"""
File tools: read, create, edit, list, search.

All paths resolve against the context's working directory.
"""

from __future__ import annotations

import re
from pathlib import Path

from loguru import logger

from codewright.errors import ToolError
from codewright.patch import apply_patch, apply_patch_with_similarity, load_patch
from codewright.tools.base import (
    ReferencedFile,
    Tool,
    ToolExecutionContext,
    ToolExecutionResult,
    ToolId,
    ToolParam,
)

SEARCH_CONTEXT_LINES = 2


def _read_text(fpath: Path, path: str) -> str:
    try:
        return fpath.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        raise ToolError(f"File {path} is not valid UTF-8 text")


class ReadFileTool(Tool):
    tool_id = ToolId.READ_FILE
    description = (
        "Read the contents of a file at the specified path. "
        "You can use this tool multiple times at once. "
        "Read files are attached as referenced files on the next turn."
    )
    params = {
        "path": ToolParam(description="The path of the file to read"),
    }

    def execute(self, context: ToolExecutionContext, args: dict[str, str]) -> ToolExecutionResult:
        path = args.get("path") or args.get("content")
        if not path:
            raise ToolError("File path is required")

        fpath = context.resolve(path)
        if not fpath.exists():
            return ToolExecutionResult(result=f"File {path} does not exist", success=False)

        content = _read_text(fpath, path)
        return ToolExecutionResult(
            result=f"Read {path}",
            added_files=[ReferencedFile(path=path, content=content)],
        )


class CreateFileTool(Tool):
    tool_id = ToolId.CREATE_FILE
    description = (
        "Creates a new file. Fails if the file already exists. "
        "Created files are attached as referenced files on the next turn."
    )
    params = {
        "file": ToolParam(description="The path of the file to create"),
        "content": ToolParam(description="The content to write to the file"),
    }
    example = """
<create_file>
<file>src/hello.py</file>
<content>print("hello")</content>
</create_file>
"""

    def execute(self, context: ToolExecutionContext, args: dict[str, str]) -> ToolExecutionResult:
        path = args.get("file")
        if not path:
            raise ToolError("File path is required")

        fpath = context.resolve(path)
        if fpath.exists():
            raise ToolError(f"File {path} already exists")

        content = args.get("content", "")
        fpath.parent.mkdir(parents=True, exist_ok=True)
        fpath.write_text(content, encoding="utf-8")
        logger.info(f"[TOOL] Created {path}")
        return ToolExecutionResult(
            result=f"Created file: {path}",
            added_files=[ReferencedFile(path=path, content=content)],
        )


class EditFileTool(Tool):
    tool_id = ToolId.EDIT_FILE
    description = (
        "Edits a file by applying a unified format diff. "
        "Use '@@ ... @@' hunk separators; line numbers are optional. "
        "Include 2-3 unchanged context lines around each change with exact indentation."
    )
    params = {
        "file": ToolParam(description="The path of the file to edit"),
        "patch": ToolParam(description="The unified format diff to apply"),
    }
    example = """
<edit_file>
<file>src/utils.py</file>
<patch>
--- src/utils.py
+++ src/utils.py
@@ ... @@
 def total(items):
-    result = 0
-    for item in items:
-        result += item.price
-    return result
+    return sum(item.price for item in items)
</patch>
</edit_file>
"""

    def execute(self, context: ToolExecutionContext, args: dict[str, str]) -> ToolExecutionResult:
        path = args.get("file")
        patch_text = args.get("patch")
        if not path or not patch_text:
            raise ToolError("File path and patch are required")

        fpath = context.resolve(path)
        if not fpath.exists():
            raise ToolError(f"File {path} does not exist")

        current = _read_text(fpath, path)
        strict = context.config.edit.strategy == "strict" or patch_text.lstrip().startswith("{")
        if strict:
            logger.debug(f"[TOOL] Strict patch for {path}")
            updated = apply_patch(current, load_patch(patch_text))
        else:
            logger.debug(f"[TOOL] Similarity patch for {path}")
            updated = apply_patch_with_similarity(current, patch_text)

        fpath.write_text(updated, encoding="utf-8")
        logger.info(f"[TOOL] Edited {path}")
        return ToolExecutionResult(
            result=f"Successfully edited file: {path}",
            added_files=[ReferencedFile(path=path, content=updated)],
        )


class ListFilesTool(Tool):
    tool_id = ToolId.LIST_FILES
    description = "Lists the entries of a single directory (defaults to the working directory)."
    params = {
        "directory": ToolParam(
            description="The directory to list files from",
            optional=True,
        ),
    }

    def execute(self, context: ToolExecutionContext, args: dict[str, str]) -> ToolExecutionResult:
        directory = args.get("directory") or args.get("content") or "."
        dpath = context.resolve(directory)
        if not dpath.exists():
            dpath.mkdir(parents=True, exist_ok=True)
        if not dpath.is_dir():
            raise ToolError(f"{directory} is not a directory")

        names = sorted(entry.name + ("/" if entry.is_dir() else "") for entry in dpath.iterdir())
        return ToolExecutionResult(result=f"Files in {directory}:\n" + "\n".join(names))


class SearchFilesTool(Tool):
    tool_id = ToolId.SEARCH_FILES
    description = "Perform a regex search across files in a directory."
    params = {
        "path": ToolParam(description="The directory to search"),
        "regex": ToolParam(description="The regex pattern to search for"),
        "filePattern": ToolParam(
            description="Glob pattern restricting which files are searched (default **/*)",
            optional=True,
        ),
    }

    def execute(self, context: ToolExecutionContext, args: dict[str, str]) -> ToolExecutionResult:
        directory = args.get("path")
        pattern = args.get("regex")
        if not directory:
            raise ToolError("Directory path is required")
        if not pattern:
            raise ToolError("Regex pattern is required")

        try:
            regex = re.compile(pattern)
        except re.error as e:
            raise ToolError(f"Invalid regex '{pattern}': {e}")

        root = context.resolve(directory)
        matches: list[str] = []
        for fpath in sorted(root.glob(args.get("filePattern") or "**/*")):
            if not fpath.is_file():
                continue
            try:
                lines = fpath.read_text(encoding="utf-8").split("\n")
            except (UnicodeDecodeError, OSError):
                continue

            rel = fpath.relative_to(root).as_posix()
            for i, line in enumerate(lines):
                if not regex.search(line):
                    continue
                before = "\n".join(lines[max(0, i - SEARCH_CONTEXT_LINES):i])
                after = "\n".join(lines[i + 1:i + 1 + SEARCH_CONTEXT_LINES])
                matches.append(
                    f"File: {rel}\nLine: {i + 1}\nContext:\n{before}\n>> {line}\n{after}\n"
                )

        if not matches:
            return ToolExecutionResult(result="No matches found.")
        return ToolExecutionResult(result="\n---\n".join(matches))
