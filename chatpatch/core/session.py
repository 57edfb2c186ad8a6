# chatpatch/core/session.py
"""
会话循环：向模型请求回复 → 解析命令 → 确认并执行 → 把结果回传给模型，
直到收到 COMPLETE 或达到最大迭代次数。
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from .applier import Applier, AskFn, ConfirmFn
from .errors import ParseError
from .extractor import parse_response
from .models import ModelReply, Usage
from .prompt import build_initial_messages, render_correction
from .workspace import Workspace
from ..utils.console import console, info, warning


class ModelClient(ABC):
    """模型调用接口，网络请求由实现方负责"""

    @abstractmethod
    def complete(self, messages: List[Dict[str, str]]) -> ModelReply:
        """
        根据完整的消息历史返回模型的下一条回复。
        """
        pass


class Session:
    def __init__(
        self,
        model: ModelClient,
        workspace: Workspace,
        applier: Applier,
        max_iter: int = 10,
        project_name: str = ""
    ):
        self.model = model
        self.workspace = workspace
        self.applier = applier
        self.max_iter = max_iter
        self.project_name = project_name
        self.messages: List[Dict[str, str]] = []
        self.usage = Usage()

    @classmethod
    def from_config(
        cls,
        model: ModelClient,
        workspace: Workspace,
        config: Dict[str, Any],
        confirm_fn: Optional[ConfirmFn] = None,
        ask_fn: Optional[AskFn] = None
    ) -> 'Session':
        """按 load_config() 的结果创建会话：max_iter、auto_confirm 和项目名都取自配置"""
        applier = Applier(
            workspace,
            auto_confirm=config.get("auto_confirm", False),
            confirm_fn=confirm_fn,
            ask_fn=ask_fn,
        )
        return cls(
            model,
            workspace,
            applier,
            max_iter=config.get("max_iter", 10),
            project_name=(config.get("project") or {}).get("name", ""),
        )

    def run(self, prompt: str) -> Usage:
        """
        运行一次完整的会话。

        Args:
            prompt (str): 用户的初始请求。

        Returns:
            Usage: 累计的 token 用量。
        """
        self.messages = build_initial_messages(prompt, self.workspace.list_files(), self.project_name)

        for iteration in range(1, self.max_iter + 1):
            reply = self.model.complete(list(self.messages))
            self.usage.add(reply)
            prefix = f"[{iteration} / {self.max_iter}, tokens {self.usage.total_tokens:,}]"
            self.applier.prefix = prefix

            request = self.messages[-1]["content"]
            self.messages.append({"role": "assistant", "content": reply.text})

            # 每次回复使用新的快照，解析期间不再变化
            snapshot = self.workspace.snapshot()
            try:
                commands = parse_response(reply.text, snapshot, self.workspace.read_file)
            except ParseError as e:
                warning(f"{prefix} Invalid response: {e.message}")
                self.messages.append({"role": "user", "content": render_correction(e.message)})
                continue

            result = self.applier.apply(commands, request)
            for message in result.messages:
                self.messages.append({"role": "user", "content": message})
            if result.completed:
                info(f"{prefix} Task completed.")
                break
        else:
            warning(f"Reached the maximum of {self.max_iter} iterations.")

        console.print(f"[counter]Total tokens used: {self.usage.total_tokens:,}[/counter]")
        return self.usage
