# tests/test_session.py
import pytest
from unittest.mock import patch

from chatpatch.core.applier import Applier
from chatpatch.core.models import Decision, ModelReply
from chatpatch.core.config import load_config
from chatpatch.core.session import ModelClient, Session


class ScriptedModel(ModelClient):
    """按顺序返回预设回复的模型；回复用完后返回 COMPLETE"""

    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    def complete(self, messages):
        self.calls.append(messages)
        text = self.replies.pop(0) if self.replies else "COMPLETE"
        return ModelReply(text=text, prompt_tokens=10, completion_tokens=5)


@pytest.fixture(autouse=True)
def quiet_console():
    with patch('chatpatch.core.session.info'), \
         patch('chatpatch.core.session.warning'), \
         patch('chatpatch.core.session.console'), \
         patch('chatpatch.core.applier.success'), \
         patch('chatpatch.core.applier.show_code'), \
         patch('chatpatch.core.applier.show_diff'):
        yield


@pytest.fixture
def applier(workspace):
    return Applier(
        workspace,
        auto_confirm=True,
        confirm_fn=lambda command, request, preview: Decision(confirmed=True),
        ask_fn=lambda question: "ok",
    )


def test_access_then_complete(workspace, applier):
    model = ScriptedModel(["ACCESS test.txt", "COMPLETE"])
    session = Session(model, workspace, applier, max_iter=5)

    usage = session.run("Bump foo")

    assert len(model.calls) == 2
    roles = [m["role"] for m in session.messages]
    assert roles == ["system", "user", "assistant", "user", "assistant"]
    assert session.messages[3]["content"] == "[test.txt]\n0  const foo = 2"
    assert usage.total_tokens == 30
    assert usage.prompt_tokens == 20


def test_initial_request_lists_files(workspace, applier):
    model = ScriptedModel(["COMPLETE"])
    session = Session(model, workspace, applier)
    session.run("Bump foo")

    initial = model.calls[0][1]["content"]
    assert initial.startswith("Bump foo\nBelow is my current folder structure:")
    assert "src/main.py" in initial
    assert "test.txt" in initial
    assert "REPLACE <start>-<end> <path>" in model.calls[0][0]["content"]


def test_invalid_reply_gets_corrective_message(workspace, applier):
    model = ScriptedModel(["ACCESS missing.txt", "COMPLETE"])
    session = Session(model, workspace, applier)
    session.run("Read the config")

    assert session.messages[3] == {
        "role": "user",
        "content": "File missing.txt does not exist. "
                   "Please make sure responses are restricted to those listed in the system prompt",
    }
    assert len(model.calls) == 2


def test_stops_after_max_iter(workspace, applier):
    model = ScriptedModel(["FOLLOWUP Which one?"] * 10)
    session = Session(model, workspace, applier, max_iter=3)
    session.run("Do something")

    assert len(model.calls) == 3
    assert session.messages[-1] == {"role": "user", "content": "ok"}


def test_snapshot_is_refreshed_each_reply(workspace, applier, project_dir):
    model = ScriptedModel([
        "CREATE notes.md\n```\n# Notes\n```",
        "REPLACE 0-0 notes.md\n```\n# Better notes\n```",
        "COMPLETE",
    ])
    session = Session(model, workspace, applier)
    session.run("Write notes")

    assert (project_dir / "notes.md").read_text(encoding="utf-8") == "# Better notes"
    contents = [m["content"] for m in session.messages if m["role"] == "user"]
    assert "[notes.md] File created" in contents
    assert "[notes.md 0-0] File updated" in contents


def test_replace_on_binary_file(workspace, applier, project_dir):
    (project_dir / "logo.bin").write_bytes(b"\xff\xfe\x00binary")
    model = ScriptedModel(["REPLACE 0-0 logo.bin\n```\nx\n```", "COMPLETE"])
    session = Session(model, workspace, applier)

    session.run("edit")

    assert session.messages[3] == {"role": "user", "content": "[logo.bin 0-0] File updated"}
    assert (project_dir / "logo.bin").read_text(encoding="utf-8") == "x"


def test_unreadable_file_gets_corrective_message(workspace, applier, monkeypatch):
    def unreadable(path, line_numbers=False):
        raise PermissionError("permission denied")

    monkeypatch.setattr(workspace, "read_file", unreadable)
    model = ScriptedModel(["REPLACE 0-0 test.txt\n```\nx\n```", "COMPLETE"])
    session = Session(model, workspace, applier)

    session.run("edit")

    assert session.messages[3]["content"].startswith("Failed to read file test.txt: permission denied. ")
    assert len(model.calls) == 2


def test_from_config(workspace, tmp_path):
    config = load_config(tmp_path / "missing.yaml")
    config.update({"max_iter": 2, "auto_confirm": True, "project": {"name": "demo"}})
    model = ScriptedModel(["FOLLOWUP Which one?"] * 5)

    session = Session.from_config(model, workspace, config, ask_fn=lambda question: "the first")
    session.run("Pick one")

    assert session.max_iter == 2
    assert session.project_name == "demo"
    assert session.applier.auto_confirm is True
    assert len(model.calls) == 2
    assert session.messages[-1] == {"role": "user", "content": "the first"}
