from typer.testing import CliRunner
from codewright.cli import app
from codewright import __version__

runner = CliRunner()

def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert f"CODEWRIGHT v{__version__}" in result.stdout


def test_apply_dry_run(tmp_path):
    target = tmp_path / "a.txt"
    target.write_text("one\ntwo\nthree", encoding="utf-8")
    patch = tmp_path / "fix.diff"
    patch.write_text("@@ ... @@\n one\n-two\n+2\n three", encoding="utf-8")

    result = runner.invoke(app, ["apply", str(target), str(patch), "--dry-run"])
    assert result.exit_code == 0
    assert "one\n2\nthree" in result.stdout
    assert target.read_text(encoding="utf-8") == "one\ntwo\nthree"


def test_apply_writes_file(tmp_path):
    target = tmp_path / "a.txt"
    target.write_text("one\ntwo", encoding="utf-8")
    patch = tmp_path / "fix.diff"
    patch.write_text("@@ -2 +2 @@\n-two\n+2", encoding="utf-8")

    result = runner.invoke(app, ["apply", str(target), str(patch), "--strict"])
    assert result.exit_code == 0
    assert target.read_text(encoding="utf-8") == "one\n2"


def test_apply_rejects_bad_patch(tmp_path):
    target = tmp_path / "a.txt"
    target.write_text("one", encoding="utf-8")
    patch = tmp_path / "fix.diff"
    patch.write_text("not a diff", encoding="utf-8")

    result = runner.invoke(app, ["apply", str(target), str(patch)])
    assert result.exit_code == 1


def test_diff_json(tmp_path):
    old = tmp_path / "old.txt"
    new = tmp_path / "new.txt"
    old.write_text("hello\nworld", encoding="utf-8")
    new.write_text("hello\nthere\nworld", encoding="utf-8")

    result = runner.invoke(app, ["diff", str(old), str(new), "--json"])
    assert result.exit_code == 0
    assert '"header": "@@ -1,2 +1,3 @@"' in result.stdout
