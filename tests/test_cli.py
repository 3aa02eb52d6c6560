"""Tests for the command line interface."""

import json

import pytest

from xmi2conll.__main__ import EXIT_ALIGNMENT, EXIT_FAILURE, EXIT_OK, EXIT_USAGE, main
from xmi2conll.settings import read_config

XMI = """<?xml version="1.0" encoding="UTF-8"?>
<xmi:XMI xmlns:xmi="http://www.omg.org/XMI" xmlns:cas="http:///uima/cas.ecore"
         xmlns:api="http:///de/unistuttgart/ims/coref/annotator/api/v1.ecore" xmi:version="2.0">
  <cas:Sofa xmi:id="1" sofaString="Anna sees Bob. She waves."/>
  <api:Entity xmi:id="10" Label="Anna"/>
  <api:Entity xmi:id="11" Label="Bob"/>
  <api:Mention xmi:id="30" begin="0" end="4" Entity="10"/>
  <api:Mention xmi:id="31" begin="10" end="13" Entity="11"/>
  <api:Mention xmi:id="32" begin="15" end="18" Entity="10"/>
</xmi:XMI>
"""

TOKENS = "Anna\nsees\nBob\n.\n\nShe\nwaves\n.\n"


@pytest.fixture
def files(tmp_path, config_dir):
    xmi_path = tmp_path / "doc.xmi"
    xmi_path.write_text(XMI, encoding="utf-8")
    tokens_path = tmp_path / "doc.tok"
    tokens_path.write_text(TOKENS, encoding="utf-8")
    return {
        "xmi": xmi_path,
        "tokens": tokens_path,
        "conll": tmp_path / "doc.conll",
        "entities": tmp_path / "doc.entities",
    }


def _convert_args(files, *extra):
    return ["convert", *extra, str(files["xmi"]), str(files["tokens"]), str(files["conll"]), str(files["entities"])]


class TestConvert:
    def test_success(self, files) -> None:
        assert main(_convert_args(files, "--format", "ca")) == EXIT_OK
        conll = files["conll"].read_text(encoding="utf-8")
        assert conll.startswith("#begin document (doc); part 0\ndoc\t0\t1\tAnna\t")
        assert conll.endswith("\n#end document doc")
        assert "\tShe\t_\t_\t_\t_\t_\t_\t_\t(10)" in conll
        assert files["entities"].read_text(encoding="utf-8") == "10\tAnna\n\tAnna\t1\n\tShe\t1\n11\tBob\n\tBob\t1\n"

    def test_stats_table(self, files, capsys) -> None:
        assert main(_convert_args(files, "-f", "corefannotator", "--stats")) == EXIT_OK
        out = capsys.readouterr().out
        assert "Most frequent text" in out
        assert "Anna" in out

    def test_document_name_option(self, files) -> None:
        assert main(_convert_args(files, "-f", "ca", "--document-name", "story")) == EXIT_OK
        assert files["conll"].read_text(encoding="utf-8").startswith("#begin document (story); part 0")

    def test_default_format_from_settings(self, files) -> None:
        assert main(["config", "--set", "default_format=ca"]) == EXIT_OK
        assert main(_convert_args(files)) == EXIT_OK

    def test_tokenization_mismatch(self, files, capsys) -> None:
        files["tokens"].write_text("Anna\nsaw\n", encoding="utf-8")
        assert main(_convert_args(files, "-f", "ca")) == EXIT_ALIGNMENT
        assert "Document text written to" in capsys.readouterr().out
        assert files["conll"].read_text(encoding="utf-8") == "Anna sees Bob. She waves."
        assert not files["entities"].exists()

    def test_tokenization_mismatch_without_fallback(self, files, capsys) -> None:
        files["tokens"].write_text("Anna\nsaw\n", encoding="utf-8")
        assert main(_convert_args(files, "-f", "ca", "--no-fallback")) == EXIT_ALIGNMENT
        assert "Document text written to" not in capsys.readouterr().out

    def test_no_document_text(self, files) -> None:
        files["xmi"].write_text('<xmi:XMI xmlns:xmi="http://www.omg.org/XMI"/>', encoding="utf-8")
        assert main(_convert_args(files, "-f", "ca")) == EXIT_ALIGNMENT

    def test_unknown_format(self, files, capsys) -> None:
        assert main(_convert_args(files, "-f", "xyz")) == EXIT_USAGE
        assert "unknown XMI format" in capsys.readouterr().err

    def test_missing_format(self, files, capsys) -> None:
        assert main(_convert_args(files)) == EXIT_USAGE
        assert "No XMI format given" in capsys.readouterr().err

    def test_missing_xmi_file(self, files, capsys) -> None:
        files["xmi"].unlink()
        assert main(_convert_args(files, "-f", "ca")) == EXIT_FAILURE
        assert "IO error" in capsys.readouterr().err

    def test_tokens_file_not_utf8(self, files, capsys) -> None:
        files["tokens"].write_bytes(b"Anna\n\xff\xfe\n")
        assert main(_convert_args(files, "-f", "ca")) == EXIT_FAILURE
        assert "IO error (UnicodeDecodeError)" in capsys.readouterr().err

    def test_malformed_xmi(self, files) -> None:
        files["xmi"].write_text("<xmi:XMI><open></xmi:XMI>", encoding="utf-8")
        assert main(_convert_args(files, "-f", "ca")) == EXIT_FAILURE


def test_no_task_is_usage_error(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main([])
    assert excinfo.value.code == EXIT_USAGE
    assert "No task specified" in capsys.readouterr().err


def test_missing_arguments_is_usage_error() -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["convert", "only-one.xmi"])
    assert excinfo.value.code == EXIT_USAGE


class TestFormats:
    def test_table(self, capsys) -> None:
        assert main(["formats"]) == EXIT_OK
        out = capsys.readouterr().out
        assert out.splitlines()[0].split()[:3] == ["Format", "Aliases", "Description"]
        assert "corefannotator" in out
        assert "athen" in out

    def test_json(self, capsys) -> None:
        assert main(["formats", "--output-format", "json"]) == EXIT_OK
        payload = json.loads(capsys.readouterr().out)
        assert [entry["name"] for entry in payload] == ["ca", "at"]
        assert payload[1]["aliases"] == ["athen"]


class TestConfig:
    def test_set_and_show(self, config_dir, capsys) -> None:
        assert main(["config", "--set", "context_chars=12", "--set", "default_format=at"]) == EXIT_OK
        assert "Set context_chars = 12" in capsys.readouterr().out
        assert read_config() == {"context_chars": 12, "default_format": "at"}

        assert main(["config", "--show"]) == EXIT_OK
        out = capsys.readouterr().out
        assert f"Configuration file: {config_dir / 'config.json'}" in out
        assert "context_chars" in out

    def test_unknown_format_rejected(self, config_dir) -> None:
        with pytest.raises(SystemExit, match="Unknown XMI format"):
            main(["config", "--set", "default_format=xyz"])
        assert read_config() == {}

    def test_invalid_setting(self, config_dir) -> None:
        with pytest.raises(SystemExit, match="Unknown setting"):
            main(["config", "--set", "colour=red"])
        with pytest.raises(SystemExit, match="Expected KEY=VALUE"):
            main(["config", "--set", "colour"])
