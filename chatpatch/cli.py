# chatpatch/cli
"""
ChatPatch CLI 主入口
"""
import click
from pathlib import Path

from rich.panel import Panel
from rich.text import Text

from chatpatch.core.applier import Applier
from chatpatch.core.config import STATE_DIR, load_config, render_default_config, validate_config_content
from chatpatch.core.errors import ConfigError, ParseError
from chatpatch.core.extractor import parse_response
from chatpatch.core.models import (
    ChangeCommand, Command, CreateCommand, FollowupCommand
)
from chatpatch.core.prompt import build_initial_messages, render_correction
from chatpatch.core.workspace import Workspace
from chatpatch.utils.console import (
    console, info, success, warning, error,
    heading, show_welcome, confirm, print_table, show_raw
)

# ------------------------------
# CLI 主入口
# ------------------------------

@click.group(invoke_without_command=True)
@click.version_option("0.1.0", message="ChatPatch CLI v%(version)s")
@click.option("--dir", "project_dir", default=".", type=click.Path(file_okay=False), help="The directory of the project")
@click.pass_context
def cli(ctx, project_dir: str):
    """🩹 ChatPatch - turn model replies into validated file edits"""
    ctx.ensure_object(dict)
    ctx.obj['PROJECT_DIR'] = Path(project_dir)
    show_welcome()
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())

# ------------------------------
# 辅助函数：加载配置和工作区
# ------------------------------

def _load_config(ctx) -> dict:
    config_file = ctx.obj['PROJECT_DIR'] / STATE_DIR / "config.yaml"
    try:
        return load_config(config_file)
    except ConfigError as e:
        error(f"Invalid {config_file}: {e}")
        raise click.Abort()


def _load_workspace(ctx, config: dict) -> Workspace:
    return Workspace(ctx.obj['PROJECT_DIR'], exclude_patterns=config.get("exclude_patterns"))


def _read_response(response_file: str) -> str:
    try:
        return Path(response_file).read_text(encoding='utf-8')
    except Exception as e:
        error(f"Failed to read response file '{response_file}': {e}")
        raise click.Abort()


def _parse_or_abort(response: str, workspace: Workspace):
    snapshot = workspace.snapshot()
    try:
        return parse_response(response, snapshot, workspace.read_file)
    except ParseError as e:
        error(f"Invalid response: {e.message}")
        console.print("\n[bold]Corrective message for the model:[/bold]")
        show_raw(render_correction(e.message))
        raise click.Abort()


def _describe(command: Command) -> str:
    if isinstance(command, ChangeCommand):
        return f"lines {command.start_line}-{command.end_line}"
    if isinstance(command, CreateCommand):
        return f"{len(command.content.splitlines())} lines"
    if isinstance(command, FollowupCommand):
        text = command.text.replace("\n", " ")
        return text if len(text) <= 60 else text[:57] + "..."
    return ""

# ------------------------------
# 命令 1: init
# ------------------------------

@cli.command()
@click.pass_context
def init(ctx):
    """🔧 Initialize project configuration"""
    heading("Project Initialization")
    project_dir = ctx.obj['PROJECT_DIR']
    config_file = project_dir / STATE_DIR / "config.yaml"

    if config_file.exists():
        if not confirm(f"{config_file} already exists. Overwrite?", default=False):
            info("Cancelled.")
            return
    try:
        config_content = render_default_config(project_dir.resolve().name)
        config_file.parent.mkdir(parents=True, exist_ok=True)
        config_file.write_text(config_content, encoding="utf-8")
        success(f"Generated: {config_file}")
    except Exception as e:
        error(f"Initialization failed: {e}")
        raise click.Abort()

# ------------------------------
# 命令 2: validate
# ------------------------------

@cli.command(name="validate")
@click.pass_context
def config_validate(ctx):
    """✅ Validate .chatpatch/config.yaml"""
    heading("Validating Configuration")
    config_file = ctx.obj['PROJECT_DIR'] / STATE_DIR / "config.yaml"
    if not config_file.exists():
        error("Configuration file missing. Please run `chatpatch init` first.")
        raise click.Abort()
    try:
        data = validate_config_content(config_file.read_text(encoding="utf-8"))
    except ConfigError as e:
        error(f"Validation failed: {e}")
        raise click.Abort()
    if not data:
        warning("config.yaml is empty, defaults will be used.")
    success("Configuration file validated successfully!")

# ------------------------------
# 命令 3: files
# ------------------------------

@cli.command(name="files")
@click.pass_context
def list_files(ctx):
    """📋 List the files the model is allowed to reference"""
    config = _load_config(ctx)
    workspace = _load_workspace(ctx, config)
    heading("Project Files")
    files = workspace.list_files()
    if not files:
        console.print("No files found.", style="yellow")
        return
    for path in files:
        console.print(path, style="path")
    info(f"{len(files)} files")

# ------------------------------
# 命令 4: prompt
# ------------------------------

@cli.command(name="prompt")
@click.option("--prompt", "-p", "user_prompt", required=True, help="The prompt for the AI")
@click.pass_context
def show_prompt(ctx, user_prompt: str):
    """🧾 Render the system prompt and the initial request"""
    config = _load_config(ctx)
    workspace = _load_workspace(ctx, config)
    project_name = (config.get("project") or {}).get("name", "")
    for message in build_initial_messages(user_prompt, workspace.list_files(), project_name):
        console.print(Panel(Text(message["content"]), title=f"📋 {message['role']}", border_style="blue"))

# ------------------------------
# 命令 5: parse
# ------------------------------

@cli.command(name="parse")
@click.argument("response_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def parse_command(ctx, response_file: str):
    """🔍 Parse a saved model reply and list its commands (no side effects)"""
    config = _load_config(ctx)
    workspace = _load_workspace(ctx, config)
    heading(f"Parsing reply: {response_file}")
    commands = _parse_or_abort(_read_response(response_file), workspace)

    rows = [
        (index, command.kind.value, getattr(command, "path", "-"), _describe(command))
        for index, command in enumerate(commands, start=1)
    ]
    print_table(rows, headers=["#", "Command", "Path", "Details"], title="Commands")
    success(f"Parsed {len(commands)} command(s).")

# ------------------------------
# 命令 6: apply
# ------------------------------

@cli.command(name="apply")
@click.argument("response_file", type=click.Path(exists=True, dir_okay=False))
@click.option("-y", "auto_confirm", is_flag=True, default=False, help="Automatically confirm all file access requests")
@click.pass_context
def apply_command(ctx, response_file: str, auto_confirm: bool):
    """💾 Parse a saved model reply and apply its commands"""
    config = _load_config(ctx)
    workspace = _load_workspace(ctx, config)
    heading(f"Applying reply: {response_file}")
    commands = _parse_or_abort(_read_response(response_file), workspace)

    applier = Applier(workspace, auto_confirm=auto_confirm or config.get("auto_confirm", False))
    result = applier.apply(commands)

    if result.messages:
        console.print("\n[bold]Messages for the model:[/bold]")
        for message in result.messages:
            show_raw(message)
    if result.completed:
        success("The model reported the task as complete.")

# ------------------------------
# 主入口
# ------------------------------
if __name__ == '__main__':
    cli(obj={})
