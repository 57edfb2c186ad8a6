# chatpatch/core/prompt.py
from pathlib import Path
from typing import Any, Dict, List

import jinja2

# 📁 模板根目录（相对于当前文件）
TEMPLATES_DIR = Path(__file__).parent.parent / "templates"

ALIASES = {
    'system': 'prompts/system.md.j2',
    'initial': 'prompts/initial.md.j2',
    'correction': 'prompts/correction.md.j2',
    'config': 'config.yaml.j2',
}


def create_jinja_env() -> jinja2.Environment:
    loader = jinja2.FileSystemLoader(str(TEMPLATES_DIR))
    env = jinja2.Environment(
        loader=loader,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    return env


def resolve_template_path(template: str) -> str:
    """解析模板路径：支持别名 + 自动补全"""
    if template in ALIASES:
        template = ALIASES[template]

    # 自动补全 .j2 扩展名
    if not template.endswith(('.j2', '.md')):
        template += '.j2'
    return template


def render_prompt(template: str, **context: Any) -> str:
    """渲染指定模板，模板不存在时抛出 FileNotFoundError"""
    template_path = resolve_template_path(template)
    try:
        tmpl = create_jinja_env().get_template(template_path)
    except jinja2.TemplateNotFound:
        raise FileNotFoundError(f"Template not found: {template_path}")
    return tmpl.render(**context).strip()


def build_initial_messages(prompt: str, files: List[str], project_name: str = "") -> List[Dict[str, str]]:
    """会话开始时的 system + user 消息"""
    return [
        {"role": "system", "content": render_prompt("system", project_name=project_name)},
        {"role": "user", "content": render_prompt("initial", prompt=prompt, files=files)},
    ]


def render_correction(message: str) -> str:
    """解析失败时回传给模型的纠正提示"""
    return render_prompt("correction", message=message)
