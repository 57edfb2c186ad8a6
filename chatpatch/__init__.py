"""
ChatPatch 库 - 把模型回复中的文本命令解析为经过校验的文件编辑命令。
"""

# 从 core 模块导入主要接口
from .core.errors import (
    FileAlreadyExists, FileNotFound, FileUnreadable, InvalidPath, InvalidRange,
    NoCodeBlockFound, ParseError, UnrecognizedFormat
)
from .core.extractor import parse_response
from .core.models import (
    AccessCommand, ChangeCommand, Command, CommandKind, CompleteCommand,
    CreateCommand, DeleteCommand, FollowupCommand, ModelReply, ProjectSnapshot
)
from .core.session import ModelClient, Session

__version__ = "0.1.0"

__all__ = [
    'parse_response', 'ProjectSnapshot', 'Command', 'CommandKind',
    'AccessCommand', 'ChangeCommand', 'CreateCommand', 'DeleteCommand',
    'FollowupCommand', 'CompleteCommand',
    'ModelClient', 'ModelReply', 'Session',
    'ParseError', 'FileNotFound', 'FileAlreadyExists', 'InvalidPath', 'InvalidRange',
    'FileUnreadable', 'NoCodeBlockFound', 'UnrecognizedFormat',
]
