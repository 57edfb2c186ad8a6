# chatpatch/core/extractor.py
"""
命令提取：在规范化后的文本上分别匹配六种命令语法。

每一种命令单独扫描全部出现位置，结果按类别分组返回
（ACCESS, CREATE, REPLACE, DELETE, FOLLOWUP, COMPLETE），同类命令保持回复中的顺序。
关键字只在行首、且在代码块正文之外被识别。
"""

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .errors import FileUnreadable, NoCodeBlockFound, UnrecognizedFormat
from .fence import CLOSE, OPEN, denormalize_line, leading_keyword, normalize_fences
from .models import (
    AccessCommand, ChangeCommand, Command, CommandKind, CompleteCommand,
    CreateCommand, DeleteCommand, FollowupCommand, ProjectSnapshot
)
from .patcher import patch_content
from .validator import parse_range, require_absent, require_existing

ReadFile = Callable[[str], str]

ACCESS_PATTERN = re.compile(r"^[ \t]*ACCESS[ \t]+(?P<path>\S.*?)[ \t]*$", re.MULTILINE)
REPLACE_PATTERN = re.compile(
    r"^[ \t]*REPLACE[ \t]+(?P<range>\S+)[ \t]+(?P<path>\S.*?)[ \t]*$", re.MULTILINE
)
CREATE_PATTERN = re.compile(r"^[ \t]*CREATE[ \t]+(?P<path>\S.*?)[ \t]*$", re.MULTILINE)
DELETE_PATTERN = re.compile(r"^[ \t]*DELETE[ \t]+(?P<path>\S.*?)[ \t]*$", re.MULTILINE)
FOLLOWUP_PATTERN = re.compile(r"^[ \t]*FOLLOWUP(?=[ \t]|$)[ \t]*(?P<text>.*)$", re.MULTILINE)
COMPLETE_PATTERN = re.compile(r"^[ \t]*COMPLETE[ \t]*$", re.MULTILINE)


@dataclass(frozen=True)
class NormalizedResponse:
    """
    一次解析的只读输入：原始回复、规范化后的行，以及屏蔽正文后的文本。
    每次调用 parse_response 都会新建，不在调用之间共享。
    """
    raw: str
    lines: Tuple[str, ...]
    masked: str

    @classmethod
    def from_text(cls, raw: str) -> 'NormalizedResponse':
        lines = tuple(normalize_fences(raw).split("\n"))
        return cls(raw=raw, lines=lines, masked="\n".join(_mask_bodies(lines)))

    def line_index(self, offset: int) -> int:
        return self.masked.count("\n", 0, offset)


def _mask_bodies(lines: Tuple[str, ...]) -> List[str]:
    """正文行替换为空行（保持行号不变），避免正文中的关键字被当作命令"""
    masked = []
    in_body = False
    for line in lines:
        if line.startswith(OPEN):
            in_body = True
            masked.append(line)
        elif line == CLOSE:
            in_body = False
            masked.append(line)
        else:
            masked.append("" if in_body else line)
    return masked


def extract_body(response: NormalizedResponse, header_index: int, keyword: str, path: str) -> str:
    """
    取命令行之后的代码块正文：丢弃 OPEN 行（及其语言标记）和 CLOSE 行，
    首尾各去掉一个空行（如果有）。
    """
    lines = response.lines
    index = header_index + 1
    while index < len(lines) and not lines[index].strip():
        index += 1
    if index >= len(lines) or not lines[index].startswith(OPEN):
        raise NoCodeBlockFound(keyword, path)

    body: List[str] = []
    for line in lines[index + 1:]:
        if line == CLOSE:
            break
        body.append(line)

    if body and not body[0].strip():
        body = body[1:]
    if body and not body[-1].strip():
        body = body[:-1]
    return "\n".join(body)


def extract_access(response: NormalizedResponse, snapshot: ProjectSnapshot) -> List[AccessCommand]:
    commands = []
    for match in ACCESS_PATTERN.finditer(response.masked):
        path = match.group("path")
        require_existing(path, snapshot)
        commands.append(AccessCommand(raw=response.raw, path=path))
    return commands


def extract_create(response: NormalizedResponse, snapshot: ProjectSnapshot) -> List[CreateCommand]:
    commands = []
    for match in CREATE_PATTERN.finditer(response.masked):
        path = match.group("path")
        require_absent(path, snapshot)
        content = extract_body(response, response.line_index(match.start()), CommandKind.CREATE.value, path)
        commands.append(CreateCommand(raw=response.raw, path=path, content=content))
    return commands


def extract_change(
    response: NormalizedResponse,
    snapshot: ProjectSnapshot,
    read_file: Optional[ReadFile]
) -> List[ChangeCommand]:
    commands = []
    for match in REPLACE_PATTERN.finditer(response.masked):
        path = match.group("path")
        require_existing(path, snapshot)
        start, end = parse_range(match.group("range"), path)
        replacement = extract_body(response, response.line_index(match.start()), CommandKind.REPLACE.value, path)

        if read_file is None:
            raise ValueError("read_file is required to patch REPLACE commands")
        try:
            original = read_file(path)
        except (OSError, ValueError) as e:
            raise FileUnreadable(path, str(e))
        content = patch_content(original, start, end, replacement)
        commands.append(ChangeCommand(
            raw=response.raw,
            path=path,
            start_line=start,
            end_line=end,
            replacement=replacement,
            content=content,
        ))
    return commands


def extract_delete(response: NormalizedResponse, snapshot: ProjectSnapshot) -> List[DeleteCommand]:
    commands = []
    for match in DELETE_PATTERN.finditer(response.masked):
        path = match.group("path")
        require_existing(path, snapshot)
        commands.append(DeleteCommand(raw=response.raw, path=path))
    return commands


def extract_followup(response: NormalizedResponse) -> List[FollowupCommand]:
    """FOLLOWUP 的文本一直延续到下一个以命令关键字开头的行或回复结尾"""
    commands = []
    masked_lines = response.masked.split("\n")
    for match in FOLLOWUP_PATTERN.finditer(response.masked):
        header_index = response.line_index(match.start())
        text_lines = [match.group("text")]
        for index in range(header_index + 1, len(response.lines)):
            if leading_keyword(masked_lines[index]) is not None:
                break
            text_lines.append(denormalize_line(response.lines[index]))
        commands.append(FollowupCommand(raw=response.raw, text="\n".join(text_lines).strip()))
    return commands


def extract_complete(response: NormalizedResponse) -> List[CompleteCommand]:
    return [CompleteCommand(raw=response.raw) for _ in COMPLETE_PATTERN.finditer(response.masked)]


def parse_response(
    response: str,
    snapshot: ProjectSnapshot,
    read_file: Optional[ReadFile] = None
) -> List[Command]:
    """
    把一次模型回复解析为经过校验的命令列表。

    Args:
        response (str): 模型的原始回复。
        snapshot (ProjectSnapshot): 本次解析使用的项目文件快照。
        read_file (Callable[[str], str], optional): 返回文件原始内容，REPLACE 命令需要。

    Returns:
        List[Command]: 按类别分组的命令。

    Raises:
        ParseError: 遇到的第一个校验失败；没有任何命令时为 UnrecognizedFormat。
    """
    normalized = NormalizedResponse.from_text(response)

    commands: List[Command] = []
    commands.extend(extract_access(normalized, snapshot))
    commands.extend(extract_create(normalized, snapshot))
    commands.extend(extract_change(normalized, snapshot, read_file))
    commands.extend(extract_delete(normalized, snapshot))
    commands.extend(extract_followup(normalized))
    commands.extend(extract_complete(normalized))

    if not commands:
        raise UnrecognizedFormat()
    return commands
