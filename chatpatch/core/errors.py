# chatpatch/core/errors.py
"""
解析模型回复时可能出现的错误。
任何一种错误都会中止本次回复的解析，调用方应把错误信息回传给模型重新提示。
"""

from typing import Optional


class ParseError(Exception):
    """Base class for every error raised while extracting commands from a reply."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.path = path


class FileNotFound(ParseError):
    """ACCESS / REPLACE / DELETE 引用了快照中不存在的路径"""

    def __init__(self, path: str):
        super().__init__(f"File {path} does not exist", path=path)


class FileAlreadyExists(ParseError):
    """CREATE 引用了快照中已存在的路径"""

    def __init__(self, path: str):
        super().__init__(f"File {path} already exists", path=path)


class InvalidPath(ParseError):
    """路径必须是项目内的相对路径：不能是绝对路径，也不能包含 '..'"""

    def __init__(self, path: str):
        super().__init__(f"Invalid path {path}, paths must be relative to the project root", path=path)


class FileUnreadable(ParseError):
    def __init__(self, path: str, reason: str):
        super().__init__(f"Failed to read file {path}: {reason}", path=path)


class InvalidRange(ParseError):
    def __init__(self, start: str, end: str, path: Optional[str] = None):
        super().__init__(f"Invalid line numbers {start}-{end}", path=path)
        self.start = start
        self.end = end


class NoCodeBlockFound(ParseError):
    def __init__(self, keyword: str, path: str):
        super().__init__(f"No code block found for {keyword} {path}", path=path)
        self.keyword = keyword


class UnrecognizedFormat(ParseError):
    def __init__(self):
        super().__init__("Invalid response format")


class ConfigError(Exception):
    """.chatpatch/config.yaml 缺失或内容不合法"""
    pass
