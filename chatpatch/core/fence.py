# chatpatch/core/fence.py
"""
围栏规范化：把模型回复中真正界定命令正文的 ``` 替换为 OPEN / CLOSE 哨兵，
正文内部的示例围栏（例如 README 里的代码示例）保持原样。

只有紧挨着下一个命令关键字（或文本结尾）之前的 ``` 才被当作真正的闭合。
"""

from typing import List, Optional, Sequence

from .models import COMMAND_KEYWORDS, CommandKind

FENCE = "```"
OPEN = "\x02"
CLOSE = "\x03"


def leading_keyword(line: str) -> Optional[CommandKind]:
    """返回行首的命令关键字（如果有）"""
    tokens = line.split(None, 1)
    if tokens and tokens[0] in COMMAND_KEYWORDS:
        return CommandKind(tokens[0])
    return None


def _is_closing_fence(lines: Sequence[str], index: int) -> bool:
    """向后跳过空行：下一行是命令关键字，或者后面已经没有内容，才算闭合"""
    for line in lines[index + 1:]:
        if not line.strip():
            continue
        return leading_keyword(line) is not None
    return True


def normalize_fences(text: str) -> str:
    """
    Rewrite command-body fences into OPEN/CLOSE sentinels.

    An opening line becomes ``OPEN + <language tag>``. A closing line becomes
    ``CLOSE``; text in front of its final marker (a nested fence closed on the
    same line, e.g. six backticks) is kept as a body line. An unterminated
    fence gets a synthetic CLOSE at the end.
    """
    lines = text.replace("\r\n", "\n").split("\n")
    normalized: List[str] = []
    in_fence = False

    for index, line in enumerate(lines):
        stripped = line.strip()
        if not stripped.startswith(FENCE):
            normalized.append(line)
            continue

        if not in_fence:
            normalized.append(OPEN + stripped[len(FENCE):])
            in_fence = True
        elif _is_closing_fence(lines, index):
            if len(stripped) > len(FENCE) and stripped.endswith(FENCE):
                normalized.append(stripped[:-len(FENCE)])
            normalized.append(CLOSE)
            in_fence = False
        else:
            normalized.append(line)

    if in_fence:
        normalized.append(CLOSE)
    return "\n".join(normalized)


def denormalize_line(line: str) -> str:
    """把哨兵还原成 ```，用于需要原样展示的文本（例如 FOLLOWUP）"""
    if line.startswith(OPEN):
        return FENCE + line[len(OPEN):]
    if line == CLOSE:
        return FENCE
    return line
