# chatpatch/core/validator.py
"""
命令校验：在提取时立即执行，只读取项目快照，不访问实时文件系统。
"""

import re
from pathlib import PurePosixPath, PureWindowsPath
from typing import Tuple

from .errors import FileAlreadyExists, FileNotFound, InvalidPath, InvalidRange
from .models import ProjectSnapshot, normalize_path

RANGE_PATTERN = re.compile(r"^(?P<start>\d+)-(?P<end>\d+)$")


def require_relative(path: str) -> None:
    """拒绝绝对路径和包含 '..' 的路径，命令只能作用于项目根目录之内"""
    posix = PurePosixPath(normalize_path(path))
    if posix.is_absolute() or PureWindowsPath(path).drive or ".." in posix.parts:
        raise InvalidPath(path)


def require_existing(path: str, snapshot: ProjectSnapshot) -> None:
    """ACCESS / REPLACE / DELETE 的目标必须存在"""
    require_relative(path)
    if path not in snapshot:
        raise FileNotFound(path)


def require_absent(path: str, snapshot: ProjectSnapshot) -> None:
    """CREATE 的目标必须不存在"""
    require_relative(path)
    if path in snapshot:
        raise FileAlreadyExists(path)


def parse_range(token: str, path: str = None) -> Tuple[int, int]:
    """
    解析 "<start>-<end>"，两端都必须是非负整数且 start <= end。

    Raises:
        InvalidRange: 任一端无法解析，或 start > end。
    """
    match = RANGE_PATTERN.match(token)
    if not match:
        start, _, end = token.partition("-")
        raise InvalidRange(start, end, path=path)

    start, end = int(match.group("start")), int(match.group("end"))
    if start > end:
        raise InvalidRange(match.group("start"), match.group("end"), path=path)
    return start, end
