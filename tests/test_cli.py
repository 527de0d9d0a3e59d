import os

import pytest
from click.testing import CliRunner

import wowcig.cli as cli_module
from wowcig.errors import ContentStoreError, StoreOpenError, UnknownTableError
from wowcig.extract import ExtractionResult
from wowcig.output import ExtractionStats


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))


def _capture_run(monkeypatch, calls, result=None, error=None):
    def _run(settings, log=None):  # type: ignore[no-untyped-def]
        calls.append(settings)
        if error is not None:
            raise error
        return result or ExtractionResult("1.0", ExtractionStats(written=3, skipped=1))

    monkeypatch.setattr(cli_module, "run_extraction", _run)


def test_cli_passes_options(monkeypatch) -> None:
    calls = []
    _capture_run(monkeypatch, calls)

    result = CliRunner().invoke(
        cli_module.cli,
        ["-p", "wow_classic", "-d", "Spell", "-d", "Map", "-x", "-z", "-e", "out"],
    )

    assert result.exit_code == 0, result.output
    settings = calls[0]
    assert settings.product == "wow_classic"
    assert settings.db2 == ("Spell", "Map")
    assert settings.skip_framexml is True
    assert settings.zip_output is True
    assert settings.extracts == "out"
    assert settings.cache == "cache"
    assert "Wrote 3 files (1 skipped) for wow_classic 1.0" in result.output


def test_cli_requires_known_product(monkeypatch) -> None:
    _capture_run(monkeypatch, [])

    assert CliRunner().invoke(cli_module.cli, []).exit_code != 0
    assert CliRunner().invoke(cli_module.cli, ["-p", "d3"]).exit_code != 0


def test_cli_reads_config_file(tmp_path, monkeypatch) -> None:
    calls = []
    _capture_run(monkeypatch, calls)
    config = tmp_path / "wowcig.yaml"
    config.write_text(
        "cache: /data/casc\nextracts: /data/extracts\nversion: 1.2.3\n"
        "tables:\n  spell: 1572924\n",
        encoding="utf-8",
    )

    result = CliRunner().invoke(
        cli_module.cli, ["-p", "wow", "--config", str(config), "-c", "local"]
    )

    assert result.exit_code == 0, result.output
    settings = calls[0]
    assert settings.cache == "local"
    assert settings.extracts == "/data/extracts"
    assert settings.version == "1.2.3"
    assert settings.tables == {"spell": 1572924}


def test_cli_store_failure(monkeypatch) -> None:
    _capture_run(monkeypatch, [], error=StoreOpenError("no archive mirror at x"))

    result = CliRunner().invoke(cli_module.cli, ["-p", "wowt"])

    assert result.exit_code == 1
    assert "unable to open wowt: no archive mirror at x" in result.output


def test_cli_fatal_error(monkeypatch) -> None:
    _capture_run(monkeypatch, [], error=UnknownTableError("Nope"))

    result = CliRunner().invoke(cli_module.cli, ["-p", "wow", "-d", "Nope"])

    assert result.exit_code == 1
    assert "error: unknown table: 'Nope'" in result.output


def test_cli_verbose_run(tmp_path, monkeypatch) -> None:
    mirror = tmp_path / "cache" / "wow"
    addon = mirror / "Interface" / "AddOns" / "A"
    addon.mkdir(parents=True)
    (addon / "A.toc").write_text("A.lua\n", encoding="utf-8")
    (addon / "A.lua").write_text("-- a\n", encoding="utf-8")
    tables = mirror / "DBFilesClient"
    tables.mkdir()
    (tables / "ManifestInterfaceData.csv").write_text(
        "ID,FilePath,FileName\n", encoding="utf-8"
    )
    (tables / "ManifestInterfaceTOCData.csv").write_text(
        "FilePath\nInterface\\AddOns\\A\\\n", encoding="utf-8"
    )
    (mirror / "listfile.csv").write_text(
        "1375801;DBFilesClient/ManifestInterfaceData.csv\n"
        "1267335;DBFilesClient/ManifestInterfaceTOCData.csv\n",
        encoding="utf-8",
    )
    config = tmp_path / "config.yaml"
    config.write_text("version: 1.15.0.1\n", encoding="utf-8")
    extracts = tmp_path / "extracts"

    result = CliRunner().invoke(
        cli_module.cli,
        [
            "-p", "wow",
            "-v",
            "--config", str(config),
            "-c", str(tmp_path / "cache"),
            "-e", str(extracts),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "loading 1.15.0.1" in result.output
    assert "writing  Interface/AddOns/A/A.lua" in result.output
    assert "skipping Interface/FrameXML/FrameXML.toc" in result.output
    assert (extracts / "1.15.0.1" / "Interface/AddOns/A/A.lua").exists()
    assert os.readlink(extracts / "wow") == "1.15.0.1"


def test_cli_read_failure_is_not_an_open_failure(monkeypatch) -> None:
    _capture_run(
        monkeypatch, [], error=ContentStoreError("reading cache/wow/a.lua: I/O error")
    )

    result = CliRunner().invoke(cli_module.cli, ["-p", "wow"])

    assert result.exit_code == 1
    assert "error: reading cache/wow/a.lua: I/O error" in result.output
    assert "unable to open" not in result.output
