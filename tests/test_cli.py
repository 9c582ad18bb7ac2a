"""Tests for the command-line interface.

WHY: The CLI is how most users meet the converter. It must write the
right files with the right names, never overwrite earlier output, and
turn bad input into a one-line error instead of a traceback.

HOW: Each test writes a small SCC file into pytest's tmp_path, runs
main() with explicit argv, and inspects the files written (and, for
errors, the exit code and stderr via capsys).
"""

import json

import pytest

from scc_converter.cli import _resolve_output_path, build_parser, main

SCC_TEXT = (
    "Scenarist_SCC V1.0\n"
    "\n"
    "00:00:01:00\t9420 91d0 54e5 73f4 942f 94ae\n"
    "\n"
    "00:00:03:00\t942c\n"
)


@pytest.fixture
def scc_file(tmp_path):
    path = tmp_path / "episode.scc"
    path.write_text(SCC_TEXT, encoding="utf-8")
    return path


class TestParser:

    def test_defaults(self):
        args = build_parser().parse_args(["input.scc"])
        assert args.input_file == "input.scc"
        assert args.check_parity is True
        assert args.remove_color is False
        assert args.output_dir is None

    def test_no_check_parity(self):
        args = build_parser().parse_args(["input.scc", "--no-check-parity"])
        assert args.check_parity is False

    def test_rejects_non_positive_fps(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["input.scc", "--fps", "0"])


class TestConversion:

    def test_writes_webvtt(self, scc_file):
        main([str(scc_file), "--fps", "25", "--formats", "webvtt"])
        content = (scc_file.parent / "episode.vtt").read_text(encoding="utf-8")
        assert content.startswith("WEBVTT\n\n")
        assert "00:00:01.160 --> 00:00:03.000 align:start line:10.000% position:20.000%\nTest\n" in content

    def test_writes_all_formats(self, scc_file):
        main([str(scc_file), "--fps", "25", "--formats", "webvtt,timeline_json,plain_text"])
        names = sorted(p.name for p in scc_file.parent.iterdir())
        assert names == ["episode-captions.json", "episode-captions.txt", "episode.scc", "episode.vtt"]
        data = json.loads((scc_file.parent / "episode-captions.json").read_text(encoding="utf-8"))
        assert data["captions"][0]["text"] == "Test"
        assert (scc_file.parent / "episode-captions.txt").read_text(encoding="utf-8") == "Test\n"

    def test_filters_applied(self, scc_file):
        main([str(scc_file), "--fps", "25", "--simple-positions", "--formats", "webvtt"])
        content = (scc_file.parent / "episode.vtt").read_text(encoding="utf-8")
        assert "00:00:01.160 --> 00:00:03.000 line:5%\n" in content

    def test_output_dir(self, scc_file, tmp_path):
        out = tmp_path / "out"
        out.mkdir()
        main([str(scc_file), "--fps", "25", "--output-dir", str(out), "--formats", "webvtt"])
        assert (out / "episode.vtt").is_file()

    def test_does_not_overwrite(self, scc_file):
        main([str(scc_file), "--fps", "25", "--formats", "webvtt"])
        main([str(scc_file), "--fps", "25", "--formats", "webvtt"])
        assert (scc_file.parent / "episode.vtt").is_file()
        assert (scc_file.parent / "episode-2.vtt").is_file()

    def test_resolve_output_path_counter(self, tmp_path):
        (tmp_path / "ep-captions.json").write_text("{}")
        (tmp_path / "ep-captions-2.json").write_text("{}")
        assert _resolve_output_path("ep", "-captions.json", tmp_path).name == "ep-captions-3.json"


class TestErrors:

    def test_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main([str(tmp_path / "missing.scc")])
        assert exc.value.code == 1
        assert "Error: File not found" in capsys.readouterr().err

    def test_wrong_extension(self, tmp_path, capsys):
        path = tmp_path / "captions.srt"
        path.write_text(SCC_TEXT)
        with pytest.raises(SystemExit) as exc:
            main([str(path)])
        assert exc.value.code == 1
        assert "Unsupported file type" in capsys.readouterr().err

    def test_unknown_format(self, scc_file, capsys):
        with pytest.raises(SystemExit) as exc:
            main([str(scc_file), "--formats", "srt"])
        assert exc.value.code == 1
        assert "Unknown format 'srt'" in capsys.readouterr().err

    def test_invalid_scc(self, tmp_path, capsys):
        path = tmp_path / "broken.scc"
        path.write_text("not an scc file\n")
        with pytest.raises(SystemExit) as exc:
            main([str(path)])
        assert exc.value.code == 1
        assert "Error: File does not start with" in capsys.readouterr().err
        assert not (tmp_path / "broken.vtt").exists()

    def test_parity_error(self, tmp_path, capsys):
        path = tmp_path / "parity.scc"
        path.write_text("Scenarist_SCC V1.0\n\n00:00:00:00\t9420 11d0 942f\n")
        with pytest.raises(SystemExit) as exc:
            main([str(path), "--fps", "25"])
        assert exc.value.code == 1
        assert "even parity" in capsys.readouterr().err

    def test_parity_error_ignored_when_disabled(self, tmp_path):
        path = tmp_path / "parity.scc"
        path.write_text("Scenarist_SCC V1.0\n\n00:00:00:00\t9420 11d0 54e5 73f4 942f\n")
        main([str(path), "--fps", "25", "--no-check-parity", "--formats", "webvtt"])
        assert "Test" in (tmp_path / "parity.vtt").read_text(encoding="utf-8")
