"""Tests for CLI commands."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from autovoice.cli import main
from autovoice.content import ContentItem
from autovoice.errors import ConfigurationError, FetchError
from autovoice.podcast import EntryFailure, GenerationResult
from helpers import FIRST_UUID


def _result() -> GenerationResult:
    return GenerationResult(
        feed_url="https://example.com/rss",
        xml="<?xml version='1.0'?><rss/>",
        dropped=1,
        failures=[EntryFailure(index=2, guid="guid-2", reason="provider rejected text")],
    )


class TestMain:
    """Tests for the main CLI entry point."""

    def test_no_command_shows_help(self):
        with patch("sys.argv", ["autovoice"]):
            result = main()
        assert result == 1

    def test_unknown_command_exits(self):
        with patch("sys.argv", ["autovoice", "unknown-cmd"]):
            with pytest.raises(SystemExit):
                main()

    @patch("autovoice.cli.get_settings")
    def test_configuration_error_returns_1(self, mock_settings, capsys):
        mock_settings.side_effect = ConfigurationError("SERVER_ROOT must be set in env")

        with patch("sys.argv", ["autovoice", "generate-feed", "https://example.com/rss"]):
            result = main()

        assert result == 1
        assert "SERVER_ROOT" in capsys.readouterr().err


class TestGenerateFeed:
    @patch("autovoice.cli.setup_logging")
    @patch("autovoice.cli.get_settings")
    @patch("autovoice.cli.PodcastGenerator")
    def test_prints_xml_and_summary(self, mock_gen_cls, _settings, _logging, capsys):
        mock_gen_cls.from_settings.return_value.run = AsyncMock(return_value=_result())

        with patch("sys.argv", ["autovoice", "generate-feed", "https://example.com/rss"]):
            result = main()

        assert result == 0
        captured = capsys.readouterr()
        assert "<rss/>" in captured.out
        assert "Dropped: 1" in captured.err
        assert "provider rejected text" in captured.err

    @patch("autovoice.cli.setup_logging")
    @patch("autovoice.cli.get_settings")
    @patch("autovoice.cli.PodcastGenerator")
    def test_output_file_and_voice(self, mock_gen_cls, _settings, _logging, tmp_path):
        run = AsyncMock(return_value=_result())
        mock_gen_cls.from_settings.return_value.run = run
        out_file = tmp_path / "podcast.xml"

        argv = ["autovoice", "generate-feed", "-v", "Emma", "-o", str(out_file), "https://example.com/rss"]
        with patch("sys.argv", argv):
            result = main()

        assert result == 0
        assert out_file.read_text() == _result().xml
        run.assert_awaited_once_with("https://example.com/rss", voice_id="Emma")

    @patch("autovoice.cli.setup_logging")
    @patch("autovoice.cli.get_settings")
    @patch("autovoice.cli.PodcastGenerator")
    def test_fetch_error_returns_1(self, mock_gen_cls, _settings, _logging, capsys):
        mock_gen_cls.from_settings.return_value.run = AsyncMock(
            side_effect=FetchError("Upstream returned 500")
        )

        with patch("sys.argv", ["autovoice", "generate-feed", "https://example.com/rss"]):
            result = main()

        assert result == 1
        assert "Upstream returned 500" in capsys.readouterr().err


class TestContentCommands:
    @patch("autovoice.cli.setup_logging")
    @patch("autovoice.cli.get_settings")
    @patch("autovoice.cli.ContentClient")
    def test_article(self, mock_client_cls, _settings, _logging, capsys):
        mock_client_cls.return_value.article_as_item = AsyncMock(
            return_value=ContentItem(title="Headline", uuid=FIRST_UUID)
        )

        with patch("sys.argv", ["autovoice", "article", FIRST_UUID]):
            result = main()

        assert result == 0
        assert '"title": "Headline"' in capsys.readouterr().out

    @patch("autovoice.cli.setup_logging")
    @patch("autovoice.cli.get_settings")
    @patch("autovoice.cli.ContentClient")
    def test_rss_items(self, mock_client_cls, _settings, _logging, capsys):
        mock_client_cls.return_value.rss_items = AsyncMock(
            return_value=[
                ContentItem(title="Entry one", uuid=FIRST_UUID, author="Jane Doe"),
                ContentItem(title="Entry two"),
            ]
        )

        with patch("sys.argv", ["autovoice", "rss-items", "https://example.com/rss"]):
            result = main()

        output = capsys.readouterr().out
        assert result == 0
        assert "Entries found: 2" in output
        assert "Jane Doe" in output
        assert "UUID: N/A" in output

    @patch("autovoice.cli.setup_logging")
    @patch("autovoice.cli.get_settings")
    @patch("autovoice.cli.ContentClient")
    def test_firstft(self, mock_client_cls, _settings, _logging, capsys):
        mentioned = AsyncMock(return_value=[FIRST_UUID])
        mock_client_cls.return_value.get_last_few_first_ft_mentioned_uuids = mentioned

        with patch("sys.argv", ["autovoice", "firstft", "-n", "3", "--include-firstft"]):
            result = main()

        assert result == 0
        assert FIRST_UUID in capsys.readouterr().out
        mentioned.assert_awaited_once_with(3, include_first_ft_uuids=True)


class TestServe:
    @patch("autovoice.cli.get_settings", MagicMock())
    def test_runs_uvicorn(self):
        with patch("uvicorn.run") as mock_run:
            with patch("sys.argv", ["autovoice", "serve", "--port", "9000"]):
                result = main()

        assert result == 0
        mock_run.assert_called_once_with("autovoice.api:app", host="127.0.0.1", port=9000, reload=False)
