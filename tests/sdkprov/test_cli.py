"""
Tests for the sdkprov command line entry point.
"""

import json
import logging

import pytest

from sdkprov import cli
from tests.sdkprov.conftest import catalogue_entry, make_zip


@pytest.fixture
def catalogue_path(tmp_path):
    def write(dependencies):
        path = tmp_path / "catalogue.json"
        path.write_text(json.dumps({"dependencies": dependencies}))
        return str(path)

    return write


def run(argv, monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    return cli.main(argv + ["--platform", "linux-x64"])


class TestMain:
    """Tests for exit status and output."""

    def test_success_prints_build_environment(self, tmp_path, monkeypatch, capsys, catalogue_path):
        """Test exit status 0 and KEY=path output with --print-env."""
        archive = make_zip(tmp_path / "foo.zip", {"foo/include/foo.h": ""})
        install_root = tmp_path / "install"
        path = catalogue_path(
            {"foo": catalogue_entry(str(install_root), urls=[archive.as_uri()], buildEnv="FOO_HOME")}
        )

        status = run(["--catalogue", path, "--print-env"], monkeypatch, tmp_path)

        assert status == 0
        assert f"FOO_HOME={install_root}" in capsys.readouterr().out

    def test_missing_source_prints_remediation(self, tmp_path, monkeypatch, capsys, catalogue_path):
        """Test exit status 1 and the remediation steps when nothing can be fetched."""
        path = catalogue_path(
            {"foo": catalogue_entry(str(tmp_path / "install"), overrideEnv="FOO_DOWNLOAD_URL")}
        )
        monkeypatch.delenv("FOO_DOWNLOAD_URL", raising=False)

        status = run(["--catalogue", path], monkeypatch, tmp_path)

        assert status == 1
        err = capsys.readouterr().err
        assert "Could not obtain foo" in err
        assert "1. Download foo 1.2.3 by hand" in err

    def test_verification_gap_is_not_fatal_by_default(self, tmp_path, monkeypatch, catalogue_path):
        """Test that a verification gap keeps exit status 0."""
        archive = make_zip(tmp_path / "foo.zip", {"include/other.h": ""})
        path = catalogue_path(
            {"foo": catalogue_entry(str(tmp_path / "install"), urls=[archive.as_uri()])}
        )

        assert run(["--catalogue", path], monkeypatch, tmp_path) == 0

    def test_strict_flag_makes_gaps_fatal(self, tmp_path, monkeypatch, catalogue_path):
        """Test that --strict turns a verification gap into exit status 1."""
        archive = make_zip(tmp_path / "foo.zip", {"include/other.h": ""})
        path = catalogue_path(
            {"foo": catalogue_entry(str(tmp_path / "install"), urls=[archive.as_uri()])}
        )

        assert run(["--catalogue", path, "--strict"], monkeypatch, tmp_path) == 1

    def test_provision_toml_in_working_directory_is_used(self, tmp_path, monkeypatch, catalogue_path):
        """Test that ./provision.toml is picked up without --config."""
        archive = make_zip(tmp_path / "foo.zip", {"include/foo.h": ""})
        path = catalogue_path(
            {
                "foo": catalogue_entry(str(tmp_path / "foo"), urls=[archive.as_uri()]),
                "bar": catalogue_entry(str(tmp_path / "bar")),
            }
        )
        (tmp_path / "provision.toml").write_text(
            f'[provision]\ndependencies = ["foo"]\ncatalogue = "{path}"\n'
        )

        assert run([], monkeypatch, tmp_path) == 0
        assert (tmp_path / "foo" / "include" / "foo.h").exists()
        assert not (tmp_path / "bar").exists()

    def test_unknown_dependency_is_a_configuration_error(self, tmp_path, monkeypatch, capsys, catalogue_path):
        """Test that --only with an unknown name exits with status 2."""
        path = catalogue_path({"foo": catalogue_entry(str(tmp_path / "foo"))})

        status = run(["--catalogue", path, "--only", "nope"], monkeypatch, tmp_path)

        assert status == 2
        assert "Unknown dependencies: nope" in capsys.readouterr().err

    def test_bad_url_placeholder_is_a_configuration_error(self, tmp_path, monkeypatch, capsys, catalogue_path):
        """Test that an unknown placeholder in a candidate url exits with status 2."""
        path = catalogue_path(
            {"foo": catalogue_entry(str(tmp_path / "foo"), urls=["https://example.com/foo-{arch}.zip"])}
        )

        status = run(["--catalogue", path], monkeypatch, tmp_path)

        assert status == 2
        assert "Bad placeholder" in capsys.readouterr().err
        assert not (tmp_path / "foo").exists()

    def test_install_error_exits_with_status_one(self, tmp_path, monkeypatch, capsys, caplog, catalogue_path):
        """Test that a filesystem error while installing is reported, not a traceback."""
        archive = make_zip(tmp_path / "foo.zip", {"include/foo.h": ""})
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        path = catalogue_path(
            {"foo": catalogue_entry(str(blocker / "foo"), urls=[archive.as_uri()])}
        )

        status = run(["--catalogue", path], monkeypatch, tmp_path)

        assert status == 1
        assert "error: Failed to install foo" in capsys.readouterr().err
        assert "1 failed" in caplog.text

    def test_verbose_enables_debug_logging(self, tmp_path, monkeypatch, caplog, catalogue_path):
        """Test that --verbose lets debug records through the sdkprov logger."""
        archive = make_zip(tmp_path / "foo.zip", {"include/foo.h": ""})
        path = catalogue_path(
            {"foo": catalogue_entry(str(tmp_path / "foo"), urls=[archive.as_uri()])}
        )

        assert run(["--catalogue", path], monkeypatch, tmp_path) == 0
        assert not [r for r in caplog.records if r.levelno == logging.DEBUG]

        caplog.clear()
        assert run(["--catalogue", path, "--verbose"], monkeypatch, tmp_path) == 0
        debug = [r.getMessage() for r in caplog.records if r.levelno == logging.DEBUG]
        assert any("Retrieval attempts for foo" in message for message in debug)

    def test_example_config_is_valid_toml(self, tmp_path, monkeypatch, capsys):
        """Test that the printed example config parses."""
        from sdkprov.sdkprov_config import ProvisionConfig

        assert run(["--example-config"], monkeypatch, tmp_path) == 0
        path = tmp_path / "provision.toml"
        path.write_text(capsys.readouterr().out)

        config = ProvisionConfig.from_toml(str(path))
        assert config.dependencies == ["cuda_toolkit", "cudnn", "tensorrt", "openvino"]
