"""Tests for the polytokenizer CLI."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, patch

import pytest

from polytokenizer._models import EmbeddingResult, EmbeddingUsage, Message, TrimStrategy
from polytokenizer.run import main

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture(autouse=True)
def _no_logging_setup():
    with patch("polytokenizer.run.configure_logging") as configure_logging:
        yield configure_logging


class TestCount:
    def test_prints_json(self, capsys) -> None:
        with patch("polytokenizer.run.count_tokens", AsyncMock(return_value=3)) as count:
            main(["count", "openai/gpt-4o", "hello there you"])

        count.assert_awaited_once_with("openai/gpt-4o", "hello there you")
        assert json.loads(capsys.readouterr().out) == {"model": "openai/gpt-4o", "tokens": 3}

    def test_invalid_model_exits_1(self, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["count", "gpt-4o", "hi"])
        assert exc_info.value.code == 1
        assert "Invalid model format" in capsys.readouterr().err

    def test_logging_flags(self, _no_logging_setup) -> None:
        with patch("polytokenizer.run.count_tokens", AsyncMock(return_value=1)):
            main(["--log-level", "DEBUG", "--console-log", "count", "openai/gpt-4o", "x"])
        _no_logging_setup.assert_called_once_with(log_level="DEBUG", json_output=False)


class TestEmbed:
    def test_dimensions_passed(self, capsys) -> None:
        result = EmbeddingResult(
            vector=[0.5], model="openai/text-embedding-3-small", usage=EmbeddingUsage(tokens=1)
        )
        with patch("polytokenizer.run.embed_text", AsyncMock(return_value=result)) as embed:
            main(["embed", "openai/text-embedding-3-small", "hi", "--dimensions", "8"])

        embed.assert_awaited_once_with("openai/text-embedding-3-small", "hi", 8)
        assert json.loads(capsys.readouterr().out)["vector"] == [0.5]


class TestSplit:
    def test_reads_file(self, tmp_path: Path, capsys) -> None:
        src = tmp_path / "notes.txt"
        src.write_text("a b c", encoding="utf-8")
        split = AsyncMock(return_value=["a b", "c"])
        with patch("polytokenizer.run.split_text_max_tokens", split):
            main(["split", "openai/gpt-4o", "2", "--file", str(src), "--no-preserve-words"])

        text, model, max_tokens, options = split.await_args.args
        assert (text, model, max_tokens) == ("a b c", "openai/gpt-4o", 2)
        assert options.preserve_words is False
        assert options.preserve_sentences is True
        assert json.loads(capsys.readouterr().out) == ["a b", "c"]

    def test_inline_text(self) -> None:
        split = AsyncMock(return_value=["x"])
        with patch("polytokenizer.run.split_text_max_tokens", split):
            main(["split", "openai/gpt-4o", "10", "x"])
        assert split.await_args.args[0] == "x"

    def test_requires_text_or_file(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["split", "openai/gpt-4o", "10"])
        assert exc_info.value.code == 2


class TestTrim:
    def test_reads_messages(self, tmp_path: Path, capsys) -> None:
        chat = tmp_path / "chat.json"
        chat.write_text(
            json.dumps([{"role": "system", "content": "s"}, {"role": "user", "content": "u"}]),
            encoding="utf-8",
        )
        trim = AsyncMock(return_value=[Message(role="user", content="u")])
        with patch("polytokenizer.run.trim_messages", trim):
            main(
                [
                    "trim",
                    "openai/gpt-4o",
                    "100",
                    "--file",
                    str(chat),
                    "--strategy",
                    "late",
                    "--no-preserve-system",
                ]
            )

        messages, model, max_tokens, options = trim.await_args.args
        assert len(messages) == 2
        assert (model, max_tokens) == ("openai/gpt-4o", 100)
        assert options.strategy is TrimStrategy.LATE
        assert options.preserve_system is False
        assert json.loads(capsys.readouterr().out) == [{"role": "user", "content": "u"}]


class TestConfigFlag:
    def test_missing_config_exits_1(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--config", str(tmp_path / "nope.yaml"), "count", "openai/gpt-4o", "x"])
        assert exc_info.value.code == 1


class TestBadInput:
    def _trim(self, path: Path) -> None:
        main(["trim", "openai/gpt-4o", "100", "--file", str(path)])

    def test_unknown_role_exits_1(self, tmp_path: Path, capsys) -> None:
        chat = tmp_path / "chat.json"
        chat.write_text(json.dumps([{"role": "robot", "content": "beep"}]), encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            self._trim(chat)
        assert exc_info.value.code == 1
        assert "Invalid message at index 0" in capsys.readouterr().err

    def test_malformed_json_exits_1(self, tmp_path: Path, capsys) -> None:
        chat = tmp_path / "chat.json"
        chat.write_text("[{not json", encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            self._trim(chat)
        assert exc_info.value.code == 1
        assert "Invalid JSON" in capsys.readouterr().err

    def test_non_array_exits_1(self, tmp_path: Path, capsys) -> None:
        chat = tmp_path / "chat.json"
        chat.write_text(json.dumps({"role": "user", "content": "hi"}), encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            self._trim(chat)
        assert exc_info.value.code == 1
        assert "Expected a JSON array" in capsys.readouterr().err

    def test_missing_file_exits_1(self, tmp_path: Path, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            self._trim(tmp_path / "absent.json")
        assert exc_info.value.code == 1
        assert "Cannot read" in capsys.readouterr().err

    def test_split_missing_file_exits_1(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["split", "openai/gpt-4o", "10", "--file", str(tmp_path / "absent.txt")])
        assert exc_info.value.code == 1
