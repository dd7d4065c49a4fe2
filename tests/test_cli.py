"""Tests for the command-line interface."""

import pytest

from hilal.cli import create_parser, main


class TestCli:
    def test_times(self, capsys: pytest.CaptureFixture[str]) -> None:
        code = main(
            ["times", "--lat", "21.4225", "--lng", "39.8262", "--timezone", "Asia/Riyadh", "-d", "3"]
        )
        out = capsys.readouterr().out
        assert code == 0
        assert "Asia/Riyadh" in out
        assert "Umm al-Qura" in out
        # header plus three rows between the rulers
        assert out.count(":") >= 3 * 6

    def test_times_invalid_coordinates(self, capsys: pytest.CaptureFixture[str]) -> None:
        code = main(["times", "--lat", "95", "--lng", "0", "--timezone", "UTC"])
        assert code == 2
        assert "latitude" in capsys.readouterr().err

    def test_unknown_method_rejected_by_parser(self) -> None:
        with pytest.raises(SystemExit):
            create_parser().parse_args(["times", "--lat", "0", "--lng", "0", "--method", "X"])


    def test_shafaq_option(self) -> None:
        args = create_parser().parse_args(
            ["times", "--lat", "51.5", "--lng", "0", "--method", "MoonsightingCommittee", "--shafaq", "abyad"]
        )
        assert args.shafaq == "abyad"
        assert create_parser().parse_args(["times", "--lat", "0", "--lng", "0"]).shafaq == "general"
