# chatpatch/core/patcher.py
"""Line-range splicing for REPLACE commands. Pure functions, no file access."""

from typing import List, Sequence


def splice_lines(lines: Sequence[str], start: int, end: int, replacement: Sequence[str]) -> List[str]:
    """
    Return ``lines[:start] + replacement + lines[end + 1:]``.

    An ``end`` past the last line is clamped ("through end of file"), and a
    ``start`` past the last line appends after the final line. Nothing is
    padded in between.
    """
    return list(lines[:start]) + list(replacement) + list(lines[end + 1:])


def patch_content(original: str, start: int, end: int, replacement: str) -> str:
    """对完整文件文本执行 splice_lines，按 '\\n' 拆分与拼接"""
    patched = splice_lines(original.split("\n"), start, end, replacement.split("\n"))
    return "\n".join(patched)
