# chatpatch/core/applier.py
from typing import Callable, List, Optional

from .models import (
    AccessCommand, ApplyResult, ChangeCommand, Command, CommandKind,
    CreateCommand, Decision, DeleteCommand, FollowupCommand
)
from .workspace import Workspace
from ..utils.console import console, error, prompt_input, show_code, show_diff, show_raw, success, warning

# (command, request, preview) -> Decision
ConfirmFn = Callable[[Command, Optional[str], Optional[Callable[[], None]]], Decision]
AskFn = Callable[[str], str]

VERBS = {
    CommandKind.ACCESS: "access",
    CommandKind.REPLACE: "change",
    CommandKind.CREATE: "create",
    CommandKind.DELETE: "delete",
}


def interactive_confirm(
    command: Command,
    request: Optional[str] = None,
    preview: Optional[Callable[[], None]] = None,
    prefix: str = ""
) -> Decision:
    """
    询问用户是否执行命令：(y)es, (n)o, (c)omment, (v)iew response, view (r)equest。
    输入 '?' 时重新显示预览（diff 或新文件内容）。
    """
    question = (
        f"{prefix} Do you want to {VERBS[command.kind]} file {command.path}? "
        "(y)es, (n)o, (c)omment, (v)iew response or view (r)equest "
    ).lstrip()
    while True:
        answer = console.input(question).strip().lower()
        if answer in ("y", "yes"):
            return Decision(confirmed=True)
        if answer in ("n", "no"):
            return Decision(confirmed=False)
        if answer in ("c", "comment"):
            return Decision(confirmed=False, comment=console.input("Enter your comment: "))
        if answer in ("v", "view"):
            show_raw(command.raw)
        elif answer in ("r", "request"):
            show_raw(request or "(no request)")
        elif answer == "?" and preview is not None:
            preview()
        else:
            warning("Invalid answer. Please respond with 'y', 'yes', 'n', 'no', 'c' or 'comment'.")


class Applier:
    """
    Applier 类，依次确认并执行解析出的命令，收集需要回传给模型的消息。
    """
    def __init__(
        self,
        workspace: Workspace,
        auto_confirm: bool = False,
        confirm_fn: Optional[ConfirmFn] = None,
        ask_fn: Optional[AskFn] = None
    ):
        """
        Args:
            workspace (Workspace): 执行读写删的工作区。
            auto_confirm (bool): 为 True 时 ACCESS 无需确认；修改类命令始终需要确认。
            confirm_fn: 替换交互式确认（测试或非交互场景）。
            ask_fn: 替换 FOLLOWUP 的用户输入。
        """
        self.workspace = workspace
        self.auto_confirm = auto_confirm
        self.confirm_fn = confirm_fn
        self.ask_fn = ask_fn or (lambda question: prompt_input(question, default=""))
        self.prefix = ""

        self.handlers = {
            CommandKind.ACCESS: self._apply_access,
            CommandKind.REPLACE: self._apply_change,
            CommandKind.CREATE: self._apply_create,
            CommandKind.DELETE: self._apply_delete,
            CommandKind.FOLLOWUP: self._apply_followup,
            CommandKind.COMPLETE: self._apply_complete,
        }
        missing = set(CommandKind) - set(self.handlers)
        if missing:
            raise RuntimeError(f"No handler for command kinds: {sorted(k.value for k in missing)}")

    def apply(self, commands: List[Command], request: Optional[str] = None) -> ApplyResult:
        """
        执行命令列表。遇到 COMPLETE 时停止处理剩余命令。

        Args:
            commands: parse_response 返回的命令。
            request: 触发本次回复的上一条消息，供 'r' 选项查看。
        """
        result = ApplyResult()
        for command in commands:
            self.handlers[command.kind](command, request, result)
            if result.completed:
                break
        return result

    def _confirm(
        self,
        command: Command,
        request: Optional[str],
        strict: bool,
        preview: Optional[Callable[[], None]] = None
    ) -> Decision:
        if not strict and self.auto_confirm:
            return Decision(confirmed=True)
        if preview is not None:
            preview()
        if self.confirm_fn is not None:
            return self.confirm_fn(command, request, preview)
        return interactive_confirm(command, request, preview, prefix=self.prefix)

    def _apply_access(self, command: AccessCommand, request: Optional[str], result: ApplyResult) -> None:
        decision = self._confirm(command, request, strict=False)
        if not decision.confirmed:
            result.messages.append(f"[{command.path}] {decision.comment or 'Access denied'}")
            return
        try:
            contents = self.workspace.read_file(command.path, line_numbers=True)
        except OSError as e:
            error(f"Failed to read '{command.path}': {e}")
            result.messages.append(f"[{command.path}] Failed to read file: {e}")
            return
        result.messages.append(f"[{command.path}]\n{contents}")

    def _preview_diff(self, command: ChangeCommand) -> None:
        try:
            show_diff(self.workspace.diff(command.path, command.content))
        except OSError as e:
            error(f"Failed to read '{command.path}': {e}")

    def _apply_change(self, command: ChangeCommand, request: Optional[str], result: ApplyResult) -> None:
        prefix = f"[{command.path} {command.start_line}-{command.end_line}]"
        decision = self._confirm(
            command, request, strict=True,
            preview=lambda: self._preview_diff(command)
        )
        if not decision.confirmed:
            result.messages.append(f"{prefix} {decision.comment or 'Update request denied'}")
            return
        try:
            self.workspace.write_file(command.path, command.content)
        except OSError as e:
            error(f"Failed to write '{command.path}': {e}")
            result.messages.append(f"{prefix} Failed to update file: {e}")
            return
        success(f"Updated '{command.path}' (lines {command.start_line}-{command.end_line}).")
        result.messages.append(f"{prefix} File updated")

    def _apply_create(self, command: CreateCommand, request: Optional[str], result: ApplyResult) -> None:
        prefix = f"[{command.path}]"
        decision = self._confirm(
            command, request, strict=True,
            preview=lambda: show_code(command.content, title=command.path)
        )
        if not decision.confirmed:
            result.messages.append(f"{prefix} {decision.comment or 'Create request denied'}")
            return
        try:
            self.workspace.create_file(command.path, command.content)
        except OSError as e:
            error(f"Failed to create '{command.path}': {e}")
            result.messages.append(f"{prefix} Failed to create file: {e}")
            return
        success(f"Created '{command.path}'.")
        result.messages.append(f"{prefix} File created")

    def _apply_delete(self, command: DeleteCommand, request: Optional[str], result: ApplyResult) -> None:
        prefix = f"[{command.path}]"
        decision = self._confirm(command, request, strict=True)
        if not decision.confirmed:
            result.messages.append(f"{prefix} {decision.comment or 'Delete request denied'}")
            return
        try:
            self.workspace.delete_file(command.path)
        except OSError as e:
            error(f"Failed to delete '{command.path}': {e}")
            result.messages.append(f"{prefix} Failed to delete file: {e}")
            return
        success(f"Deleted '{command.path}'.")
        result.messages.append(f"{prefix} File deleted")

    def _apply_followup(self, command: FollowupCommand, request: Optional[str], result: ApplyResult) -> None:
        answer = self.ask_fn(f"{self.prefix} {command.text}".strip())
        result.messages.append(answer or "")

    def _apply_complete(self, command: Command, request: Optional[str], result: ApplyResult) -> None:
        result.completed = True
