"""
ChatPatch 测试配置和共享 fixtures
"""

import pytest
from pathlib import Path

from chatpatch.core.models import ProjectSnapshot
from chatpatch.core.workspace import Workspace


@pytest.fixture(scope="function")
def project_dir(tmp_path) -> Path:
    """
    提供一个包含少量文件的临时项目目录。
    """
    (tmp_path / "test.txt").write_text("const foo = 2", encoding="utf-8")
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "main.py").write_text("print('hello')\nprint('world')\n", encoding="utf-8")
    return tmp_path


@pytest.fixture
def workspace(project_dir) -> Workspace:
    return Workspace(project_dir)


@pytest.fixture
def snapshot() -> ProjectSnapshot:
    """与原始测试一致的单文件快照"""
    return ProjectSnapshot.from_paths(["test.txt"])


@pytest.fixture
def runner():
    """提供一个 Click CliRunner 实例用于测试 CLI 命令"""
    from click.testing import CliRunner
    return CliRunner()
