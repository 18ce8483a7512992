"""Tests for CLI main module."""

from unittest.mock import AsyncMock, MagicMock, patch

from click.testing import CliRunner

from lyric_studio.cli.main import cli, get_generator
from lyric_studio.core.exceptions import GenerationError
from lyric_studio.core.models import TimingEntry
from lyric_studio.services.lyric_generator import GeneratedLyric, LyricGenerator


class TestCli:
    """Tests for main CLI group."""

    def test_cli_help(self) -> None:
        """Test CLI shows help."""
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "Lyric Studio" in result.output

    def test_cli_version(self) -> None:
        """Test CLI shows version."""
        runner = CliRunner()
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "lyric-studio" in result.output

    def test_cli_verbose_option(self) -> None:
        """Test CLI accepts verbose option."""
        runner = CliRunner()
        result = runner.invoke(cli, ["-v", "--help"])

        assert result.exit_code == 0


class TestGetGenerator:
    """Tests for get_generator function."""

    def test_builds_generator(self) -> None:
        """Test a generator is built from settings."""
        assert isinstance(get_generator(), LyricGenerator)


class TestLanguagesCommand:
    """Tests for languages command."""

    def test_lists_codes(self) -> None:
        """Test supported languages are listed."""
        runner = CliRunner()
        result = runner.invoke(cli, ["languages"])

        assert result.exit_code == 0
        assert "Japanese" in result.output
        assert "zh" in result.output


class TestExpandCommand:
    """Tests for expand command."""

    def test_expand(self) -> None:
        """Test expansions are printed."""
        mock_generator = MagicMock()
        mock_generator.expand_keywords = AsyncMock(return_value={"ocean": "waves and salt"})

        with patch("lyric_studio.cli.main.get_generator", return_value=mock_generator):
            runner = CliRunner()
            result = runner.invoke(cli, ["expand", "ocean"])

        assert result.exit_code == 0
        assert "waves and salt" in result.output
        mock_generator.expand_keywords.assert_awaited_once_with(["ocean"])

    def test_requires_keyword(self) -> None:
        """Test at least one keyword is required."""
        runner = CliRunner()
        result = runner.invoke(cli, ["expand"])

        assert result.exit_code != 0


class TestGenerateCommand:
    """Tests for generate command."""

    def test_generate(self) -> None:
        """Test title, lyrics, translation and timing are printed."""
        mock_generator = MagicMock()
        mock_generator.generate_lyrics = AsyncMock(
            return_value=GeneratedLyric(
                title="City Rain",
                content="Rain on the glass",
                timing_data=[TimingEntry(line="Rain on the glass", start_time=0, duration=2800)],
                translation="玻璃上的雨",
            )
        )

        with patch("lyric_studio.cli.main.get_generator", return_value=mock_generator):
            runner = CliRunner()
            result = runner.invoke(
                cli,
                ["generate", "-k", "rain", "-k", "city", "--melody", "slow jazz", "-l", "EN", "--timing"],
            )

        assert result.exit_code == 0
        assert "City Rain" in result.output
        assert "玻璃上的雨" in result.output
        assert "2800" in result.output
        mock_generator.generate_lyrics.assert_awaited_once_with(["rain", "city"], "slow jazz", ["en"], False)

    def test_section_tags_printed_verbatim(self) -> None:
        """Test bracketed section tags in lyrics are not treated as markup."""
        mock_generator = MagicMock()
        mock_generator.generate_lyrics = AsyncMock(
            return_value=GeneratedLyric(
                title="[Intro] Sea",
                content="[Chorus]\nhello [/Chorus] world",
                timing_data=[],
                translation="[/bold] 海",
            )
        )

        with patch("lyric_studio.cli.main.get_generator", return_value=mock_generator):
            runner = CliRunner()
            result = runner.invoke(cli, ["generate", "-k", "sea", "-m", "slow", "-l", "en"])

        assert result.exit_code == 0
        assert "[Intro] Sea" in result.output
        assert "[Chorus]" in result.output
        assert "hello [/Chorus] world" in result.output
        assert "[/bold] 海" in result.output

    def test_generation_failure(self) -> None:
        """Test generation errors exit non-zero with a message."""
        mock_generator = MagicMock()
        mock_generator.generate_lyrics = AsyncMock(side_effect=GenerationError())

        with patch("lyric_studio.cli.main.get_generator", return_value=mock_generator):
            runner = CliRunner()
            result = runner.invoke(cli, ["generate", "-k", "rain", "--melody", "slow jazz"])

        assert result.exit_code == 1
        assert "Failed to generate lyrics" in result.output


class TestTranslateCommand:
    """Tests for translate command."""

    def test_translate_stdin(self) -> None:
        """Test lyrics are read from stdin and translated."""
        mock_generator = MagicMock()
        mock_generator.translate_lyrics = AsyncMock(return_value="你好")

        with patch("lyric_studio.cli.main.get_generator", return_value=mock_generator):
            runner = CliRunner()
            result = runner.invoke(cli, ["translate", "-"], input="hello\n")

        assert result.exit_code == 0
        assert "你好" in result.output
        mock_generator.translate_lyrics.assert_awaited_once_with("hello\n", "zh")

    def test_translation_printed_verbatim(self) -> None:
        """Test a translation containing a stray closing tag is printed as-is."""
        mock_generator = MagicMock()
        mock_generator.translate_lyrics = AsyncMock(return_value="[/Verse] 你好")

        with patch("lyric_studio.cli.main.get_generator", return_value=mock_generator):
            runner = CliRunner()
            result = runner.invoke(cli, ["translate", "-"], input="hello\n")

        assert result.exit_code == 0
        assert "[/Verse] 你好" in result.output
