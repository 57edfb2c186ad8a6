# chatpatch/core/models.py
"""
定义 ChatPatch 核心数据结构：命令关键字、各类命令以及项目快照。
这些模型在响应解析、命令应用和会话循环之间传递数据。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, FrozenSet, Iterable, List, Optional


class CommandKind(Enum):
    """模型回复中可识别的命令关键字（封闭集合）"""
    ACCESS = "ACCESS"
    REPLACE = "REPLACE"
    CREATE = "CREATE"
    DELETE = "DELETE"
    FOLLOWUP = "FOLLOWUP"
    COMPLETE = "COMPLETE"

# 围栏规范化的前瞻与命令提取共用同一组关键字
COMMAND_KEYWORDS: FrozenSet[str] = frozenset(kind.value for kind in CommandKind)


@dataclass(frozen=True)
class Command:
    """ 所有命令的基类，raw 保存提取该命令的原始回复文本。 """
    raw: str

    kind: ClassVar[CommandKind]


@dataclass(frozen=True)
class AccessCommand(Command):
    path: str

    kind: ClassVar[CommandKind] = CommandKind.ACCESS


@dataclass(frozen=True)
class ChangeCommand(Command):
    """
    替换 [start_line, end_line]（闭区间，0 起始）的行。
    replacement 是代码块内容，content 是打补丁后的完整文件内容。
    """
    path: str
    start_line: int
    end_line: int
    replacement: str
    content: str

    kind: ClassVar[CommandKind] = CommandKind.REPLACE


@dataclass(frozen=True)
class CreateCommand(Command):
    path: str
    content: str

    kind: ClassVar[CommandKind] = CommandKind.CREATE


@dataclass(frozen=True)
class DeleteCommand(Command):
    path: str

    kind: ClassVar[CommandKind] = CommandKind.DELETE


@dataclass(frozen=True)
class FollowupCommand(Command):
    text: str

    kind: ClassVar[CommandKind] = CommandKind.FOLLOWUP


@dataclass(frozen=True)
class CompleteCommand(Command):
    kind: ClassVar[CommandKind] = CommandKind.COMPLETE


def normalize_path(path: str) -> str:
    """统一为不带 './' 前缀的 POSIX 相对路径"""
    path = path.strip().replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    return path


@dataclass(frozen=True)
class ProjectSnapshot:
    """
    单次解析使用的项目文件快照（只读）。
    解析期间的存在性检查只查询快照，不访问实时文件系统。
    """
    paths: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_paths(cls, paths: Iterable[str]) -> 'ProjectSnapshot':
        return cls(frozenset(normalize_path(p) for p in paths))

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, str):
            return False
        return normalize_path(path) in self.paths

    def __len__(self) -> int:
        return len(self.paths)


@dataclass(frozen=True)
class ModelReply:
    """ModelClient 返回的一次回复"""
    text: str
    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


@dataclass
class Usage:
    """会话累计的 token 用量"""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def add(self, reply: ModelReply) -> None:
        self.prompt_tokens += reply.prompt_tokens
        self.completion_tokens += reply.completion_tokens
        self.total_tokens += reply.total_tokens


@dataclass(frozen=True)
class Decision:
    """确认提示的结果"""
    confirmed: bool
    comment: Optional[str] = None


@dataclass
class ApplyResult:
    """
    应用循环的结果：需要回传给模型的消息，以及是否收到 COMPLETE。
    """
    messages: List[str] = field(default_factory=list)
    completed: bool = False
