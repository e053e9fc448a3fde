"""
Tests for the verifier.
"""

import pytest

from sdkprov.dependency_models import ManifestEntry
from sdkprov.sdkprov_exceptions import VerificationGap
from sdkprov.verifier import Verifier


@pytest.fixture
def install_root(tmp_path):
    (tmp_path / "include").mkdir()
    (tmp_path / "include" / "cudnn.h").write_text("")
    (tmp_path / "lib").mkdir()
    (tmp_path / "lib" / "libcudnn.so.9.1.0").write_text("")
    return tmp_path


class TestVerifier:
    """Tests for Verifier.verify."""

    def test_canonical_paths_present(self, logger, install_root):
        """Test a fully populated install root."""
        report = Verifier(logger).verify(str(install_root), [ManifestEntry(path="include/cudnn.h")])

        assert report.passed
        assert report.as_mapping() == {"include/cudnn.h": True}
        assert not report.entries["include/cudnn.h"].used_alternate

    def test_alternate_name_is_honored(self, logger, install_root):
        """Test that an alternate location satisfies an entry."""
        entry = ManifestEntry(path="lib/libcudnn.so", alternates=["lib/libcudnn.so.9*"])

        report = Verifier(logger).verify(str(install_root), [entry])

        result = report.entries["lib/libcudnn.so"]
        assert result.present
        assert result.used_alternate
        assert result.resolved_path == "lib/libcudnn.so.9.1.0"

    def test_canonical_wins_over_alternate(self, logger, install_root):
        """Test that the canonical path is reported when both exist."""
        (install_root / "lib" / "libcudnn.so").write_text("")
        entry = ManifestEntry(path="lib/libcudnn.so", alternates=["lib/libcudnn.so.9*"])

        report = Verifier(logger).verify(str(install_root), [entry])

        assert not report.entries["lib/libcudnn.so"].used_alternate

    def test_gap_is_a_warning_in_permissive_mode(self, logger, install_root):
        """Test that a gap is logged as a warning and reported."""
        manifest = [
            ManifestEntry(path="include/cudnn.h"),
            ManifestEntry(path="include/cudnn_version.h"),
        ]

        report = Verifier(logger).verify(str(install_root), manifest)

        assert not report.passed
        assert report.missing() == ["include/cudnn_version.h"]
        assert report.format_listing() == [
            "[OK] include/cudnn.h",
            "[MISSING] include/cudnn_version.h",
        ]

    def test_gap_raises_in_strict_mode(self, logger, install_root):
        """Test that a gap raises VerificationGap in strict mode."""
        manifest = [ManifestEntry(path="bin/cudnn64_9.dll")]

        with pytest.raises(VerificationGap) as exc_info:
            Verifier(logger, strict=True).verify(str(install_root), manifest)
        assert exc_info.value.missing == ["bin/cudnn64_9.dll"]

    def test_directories_and_globs(self, logger, install_root):
        """Test directory and glob entries."""
        manifest = [ManifestEntry(path="include"), ManifestEntry(path="lib/*.so*")]

        report = Verifier(logger).verify(str(install_root), manifest)

        assert report.passed
        assert report.entries["lib/*.so*"].resolved_path == "lib/libcudnn.so.9.1.0"

    def test_empty_manifest_passes(self, logger, tmp_path):
        """Test an empty manifest."""
        assert Verifier(logger).verify(str(tmp_path), []).passed
