"""
统一的控制台输出工具，基于 rich 实现美观、结构化的 CLI 交互。
"""
from rich.console import Console as RichConsole
from rich.syntax import Syntax
from rich.theme import Theme
from typing import Optional

# 自定义主题
CUSTOM_THEME = Theme({
    "info": "cyan bold",
    "success": "green bold",
    "warning": "yellow bold",
    "error": "red bold",
    "heading": "bold underline",
    "path": "magenta",
    "prompt": "green",
    "counter": "bright_magenta",
})

# 全局控制台实例（单例）
console = RichConsole(theme=CUSTOM_THEME, soft_wrap=True)


# --- 便捷输出函数 ---

# 级别 -> (图标, 标签)，标签的样式取自同名主题
_LEVELS = {
    "info": ("💡", "INFO"),
    "success": ("✅", "SUCCESS"),
    "warning": ("⚠️ ", "WARNING"),
    "error": ("❌", "ERROR"),
}


def _status(level: str, message: str):
    icon, label = _LEVELS[level]
    console.print(f"{icon} [{level}]{label}[/{level}]: {message}")


def info(message: str):
    _status("info", message)


def success(message: str):
    _status("success", message)


def warning(message: str):
    _status("warning", message)


def error(message: str):
    _status("error", message)


def heading(title: str):
    console.rule(f"[heading]{title}[/heading]")


def show_code(code: str, language: str = "text", title: Optional[str] = None):
    """高亮输出代码块（CREATE 的新文件内容等）"""
    if title:
        console.print(f"\n[bold]{title}[/bold]")
    console.print(Syntax(code, language, line_numbers=False, word_wrap=True))


def show_diff(diff_text: str):
    """输出 unified diff，新增行绿色、删除行红色"""
    if not diff_text:
        console.print("[dim](no changes)[/dim]")
        return
    console.print(Syntax(diff_text, "diff", word_wrap=True))


def show_raw(text: str):
    """原样输出文本，不解析 rich 标记"""
    console.print(text, markup=False, highlight=False)


# --- 交互式输入 ---

def prompt_input(prompt: str, default: str = None) -> str:
    """读取一行输入，直接回车时返回 default"""
    suffix = f" ({default})" if default else ""
    return console.input(f"📝 [prompt]{prompt}{suffix}:[/prompt] ") or default


def confirm(prompt: str, default: bool = True) -> bool:
    """Y/N 确认，空输入取 default"""
    answer = console.input(f"❓ {prompt} {'[Y/n]' if default else '[y/N]'}: ").strip().lower()
    return answer in ("y", "yes") if answer else default


def print_table(rows: list, headers: list, title: str = None):
    """打印简单表格"""
    from rich.table import Table

    table = Table(title=title, show_header=True, header_style="bold magenta")
    for h in headers:
        table.add_column(h)
    for row in rows:
        table.add_row(*[str(cell) for cell in row])
    console.print(table)


def show_welcome():
    """显示欢迎横幅"""
    console.print("\n" + "═" * 50, style="bold blue")
    console.print("🩹 [bold green]ChatPatch CLI[/bold green] - 模型驱动的文件编辑", end="")
    console.print(" 🤖", emoji=True)
    console.print("═" * 50 + "\n", style="bold blue")
