# tests/test_workspace.py
import pytest

from chatpatch.core.workspace import Workspace, is_excluded, number_lines, unified_diff


def test_list_files_skips_git_and_ignored(project_dir):
    (project_dir / ".git").mkdir()
    (project_dir / ".git" / "HEAD").write_text("ref", encoding="utf-8")
    (project_dir / ".gitignore").write_text("# logs\n*.log\nbuild/\n", encoding="utf-8")
    (project_dir / "debug.log").write_text("x", encoding="utf-8")
    (project_dir / "build").mkdir()
    (project_dir / "build" / "out.bin").write_text("x", encoding="utf-8")
    (project_dir / "node_modules").mkdir()
    (project_dir / "node_modules" / "dep.js").write_text("x", encoding="utf-8")

    files = Workspace(project_dir, exclude_patterns=["node_modules"]).list_files()

    assert files == [".gitignore", "src/main.py", "test.txt"]


def test_snapshot(workspace):
    snapshot = workspace.snapshot()
    assert "src/main.py" in snapshot
    assert "./test.txt" in snapshot
    assert "missing.txt" not in snapshot
    assert len(snapshot) == 2


def test_is_excluded():
    assert is_excluded("a/b/c.pyc", ["*.pyc"])
    assert is_excluded("docs/api/index.md", ["docs/api"])
    assert not is_excluded("src/docs.py", ["docs"])
    assert not is_excluded("src/main.py", [])


def test_read_file_with_line_numbers(workspace):
    assert workspace.read_file("test.txt") == "const foo = 2"
    assert workspace.read_file("src/main.py", line_numbers=True) == "0  print('hello')\n1  print('world')\n2  "


def test_number_lines_starts_at_zero():
    assert number_lines("This is a test file\nThis is the next line") == (
        "0  This is a test file\n1  This is the next line"
    )


def test_write_create_delete(workspace, project_dir):
    workspace.write_file("test.txt", "const foo = 3")
    assert (project_dir / "test.txt").read_text(encoding="utf-8") == "const foo = 3"

    workspace.create_file("docs/guide/intro.md", "# Intro")
    assert (project_dir / "docs" / "guide" / "intro.md").read_text(encoding="utf-8") == "# Intro"

    workspace.delete_file("./test.txt")
    assert not (project_dir / "test.txt").exists()


def test_delete_missing_file(workspace):
    with pytest.raises(FileNotFoundError):
        workspace.delete_file("nope.txt")


def test_diff(workspace):
    diff = workspace.diff("test.txt", "const foo = 3")
    assert "-const foo = 2" in diff
    assert "+const foo = 3" in diff
    assert "a/test.txt" in diff


def test_unified_diff_no_changes():
    assert unified_diff("same", "same", "a.txt") == ""


def test_read_binary_file_does_not_fail(workspace, project_dir):
    (project_dir / "logo.bin").write_bytes(b"\xff\xfe\x00binary")
    content = workspace.read_file("logo.bin")
    assert content.startswith("\ufffd\ufffd")
    assert content.endswith("binary")
    assert workspace.read_file("logo.bin", line_numbers=True).startswith("0  \ufffd")


@pytest.mark.parametrize("path", ["../escape.txt", "src/../../escape.txt"])
def test_paths_outside_root_are_refused(workspace, project_dir, path):
    with pytest.raises(PermissionError):
        workspace.create_file(path, "pwned")
    assert not (project_dir.parent / "escape.txt").exists()
