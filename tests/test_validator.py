# tests/test_validator.py
import pytest

from chatpatch.core.errors import FileAlreadyExists, FileNotFound, InvalidPath, InvalidRange
from chatpatch.core.models import ProjectSnapshot
from chatpatch.core.validator import parse_range, require_absent, require_existing, require_relative


@pytest.mark.parametrize("token, expected", [("0-0", (0, 0)), ("10-12", (10, 12)), ("3-3", (3, 3))])
def test_parse_range(token, expected):
    assert parse_range(token) == expected


@pytest.mark.parametrize("token", ["3-1", "-1-2", "1", "a-b", "1-x", "1.5-2"])
def test_parse_range_rejects(token):
    with pytest.raises(InvalidRange):
        parse_range(token, "a.txt")


def test_invalid_range_keeps_tokens():
    with pytest.raises(InvalidRange) as exc_info:
        parse_range("a-b", "a.txt")
    assert (exc_info.value.start, exc_info.value.end) == ("a", "b")
    assert exc_info.value.path == "a.txt"


def test_existence_checks_use_snapshot_only():
    snapshot = ProjectSnapshot.from_paths(["./src/a.py"])
    require_existing("src/a.py", snapshot)
    require_existing("./src/a.py", snapshot)
    require_absent("src/b.py", snapshot)
    with pytest.raises(FileNotFound):
        require_existing("src/b.py", snapshot)
    with pytest.raises(FileAlreadyExists):
        require_absent("src/a.py", snapshot)


@pytest.mark.parametrize("path", ["../x.txt", "/etc/passwd", "a/../../x.txt", "..\\x.txt", "C:\\x.txt"])
def test_require_relative_rejects_paths_outside_project(path):
    with pytest.raises(InvalidPath):
        require_relative(path)
    with pytest.raises(InvalidPath):
        require_absent(path, ProjectSnapshot())


@pytest.mark.parametrize("path", ["a.txt", "./src/a.py", "notes..md", "docs/v1..2/a.md"])
def test_require_relative_accepts_project_paths(path):
    require_relative(path)
