# chatpatch/core/config.py
"""
项目配置：读取并校验 .chatpatch/config.yaml
"""
from pathlib import Path
from typing import Any, Dict

import yaml

from .errors import ConfigError
from .prompt import render_prompt

STATE_DIR = Path(".chatpatch")
CONFIG_FILE = STATE_DIR / "config.yaml"

DEFAULT_CONFIG: Dict[str, Any] = {
    "max_iter": 10,
    "auto_confirm": False,
    "exclude_patterns": [".chatpatch", "node_modules", "__pycache__"],
}


def render_default_config(project_name: str) -> str:
    """用模板生成默认的 config.yaml 内容"""
    return render_prompt("config", project_name=project_name, **DEFAULT_CONFIG)


def validate_config_content(content: str) -> Dict[str, Any]:
    """
    校验 config.yaml 的内容并返回解析后的字典。

    Raises:
        ConfigError: YAML 语法错误或字段类型不正确。
    """
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"YAML syntax error: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("config.yaml must be a YAML mapping")

    if "max_iter" in data:
        max_iter = data["max_iter"]
        if isinstance(max_iter, bool) or not isinstance(max_iter, int) or max_iter < 1:
            raise ConfigError(f"max_iter must be a positive integer, got {max_iter!r}")

    if "auto_confirm" in data and not isinstance(data["auto_confirm"], bool):
        raise ConfigError("auto_confirm must be true or false")

    if "exclude_patterns" in data:
        patterns = data["exclude_patterns"]
        if not isinstance(patterns, list) or not all(isinstance(p, str) for p in patterns):
            raise ConfigError("exclude_patterns must be a list of strings")

    return data


def load_config(config_file: Path = CONFIG_FILE) -> Dict[str, Any]:
    """读取配置并合并默认值；文件不存在时直接返回默认值"""
    config = dict(DEFAULT_CONFIG)
    config_file = Path(config_file)
    if not config_file.exists():
        return config
    config.update(validate_config_content(config_file.read_text(encoding="utf-8")))
    return config
