# chatpatch/core/workspace.py
"""
工作区：命令解析之外的文件系统协作者。
负责项目快照（遵循 .gitignore 和配置中的排除模式）、带行号读取、写入/创建/删除以及差异生成。
"""

import difflib
import fnmatch
import os
from pathlib import Path, PurePosixPath
from typing import Iterable, List, Optional

from .models import ProjectSnapshot, normalize_path

ALWAYS_EXCLUDED = [".git"]


def load_ignore_patterns(root: Path) -> List[str]:
    """读取根目录下的 .gitignore（如果存在），忽略空行和注释"""
    gitignore = root / ".gitignore"
    if not gitignore.is_file():
        return []
    patterns = []
    for line in gitignore.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or line.startswith("!"):
            continue
        patterns.append(line.rstrip("/").lstrip("/"))
    return patterns


def is_excluded(rel_path: str, patterns: Iterable[str]) -> bool:
    """
    Match a relative POSIX path against glob patterns.

    A pattern containing '/' is matched against the whole path; otherwise it is
    matched against every component, so ``node_modules`` or ``*.log`` hide
    entries at any depth.
    """
    parts = PurePosixPath(rel_path).parts
    for pattern in patterns:
        if "/" in pattern:
            if fnmatch.fnmatch(rel_path, pattern) or rel_path.startswith(pattern.rstrip("/") + "/"):
                return True
        elif any(fnmatch.fnmatch(part, pattern) for part in parts):
            return True
    return False


def number_lines(content: str) -> str:
    """每行加上从 0 开始的行号，REPLACE 的行号就是以此为准"""
    return "\n".join(f"{index}  {line}" for index, line in enumerate(content.split("\n")))


def unified_diff(old_content: str, new_content: str, path: str, context_lines: int = 3) -> str:
    diff = difflib.unified_diff(
        old_content.splitlines(),
        new_content.splitlines(),
        fromfile=f"a/{path}",
        tofile=f"b/{path}",
        lineterm="",
        n=context_lines,
    )
    return "\n".join(diff)


class Workspace:
    """
    Workspace 类，负责与项目目录直接交互的所有操作。
    """
    def __init__(self, root: Path = Path("."), exclude_patterns: Optional[List[str]] = None):
        self.root = Path(root)
        self.exclude_patterns = list(exclude_patterns or [])

    def _resolve(self, path: str) -> Path:
        """项目内的绝对路径；解析后落在根目录之外时抛出 PermissionError"""
        root = self.root.resolve()
        file_path = (root / normalize_path(path)).resolve()
        try:
            file_path.relative_to(root)
        except ValueError:
            raise PermissionError(f"Path {path} is outside the project root")
        return file_path

    def list_files(self) -> List[str]:
        """返回项目中所有未被忽略的文件（相对路径，已排序）"""
        patterns = ALWAYS_EXCLUDED + load_ignore_patterns(self.root) + self.exclude_patterns
        files = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            rel_dir = Path(dirpath).relative_to(self.root).as_posix()
            rel_dir = "" if rel_dir == "." else rel_dir + "/"
            # 原地修改 dirnames，被忽略的目录不再递归
            dirnames[:] = sorted(d for d in dirnames if not is_excluded(rel_dir + d, patterns))
            for name in filenames:
                rel_path = rel_dir + name
                if not is_excluded(rel_path, patterns):
                    files.append(rel_path)
        return sorted(files)

    def snapshot(self) -> ProjectSnapshot:
        """获取当前时刻的项目快照，单次解析期间只使用它"""
        return ProjectSnapshot.from_paths(self.list_files())

    def read_file(self, path: str, line_numbers: bool = False) -> str:
        # 非 UTF-8 字节替换为 U+FFFD，二进制文件也能读取
        content = self._resolve(path).read_text(encoding="utf-8", errors="replace")
        return number_lines(content) if line_numbers else content

    def write_file(self, path: str, content: str) -> None:
        self._resolve(path).write_text(content, encoding="utf-8")

    def create_file(self, path: str, content: str) -> None:
        file_path = self._resolve(path)
        # 确保父目录存在
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")

    def delete_file(self, path: str) -> None:
        file_path = self._resolve(path)
        if not file_path.exists():
            raise FileNotFoundError(f"File {path} does not exist")
        file_path.unlink()

    def diff(self, path: str, new_content: str) -> str:
        """磁盘上的文件与提议内容之间的 unified diff"""
        return unified_diff(self.read_file(path), new_content, normalize_path(path))
