"""Tests for artifact extraction."""

import stat
import zipfile

import pytest

from bgdeploy.artifacts import Extractor
from bgdeploy.core.exceptions import ExtractionError


@pytest.fixture
def artifact(tmp_path):
    path = tmp_path / "app.zip"
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("index.html", "<h1>hello</h1>")
        zf.writestr("lib/", "")
        zf.writestr("lib/app.js", "console.log('hi')")
        zf.writestr("tmp/", "")
        script = zipfile.ZipInfo("bin/start.sh")
        script.external_attr = 0o755 << 16
        zf.writestr(script, "#!/bin/sh\necho start\n")
    return path


class TestExtractor:
    """Tests for Extractor.unzip."""

    def test_unzip(self, artifact, tmp_path):
        destination = tmp_path / "out"

        result = Extractor().unzip(artifact, destination)

        assert result == destination
        assert (destination / "index.html").read_text() == "<h1>hello</h1>"
        assert (destination / "lib" / "app.js").read_text() == "console.log('hi')"
        assert not (destination / "manifest.yml").exists()

    def test_empty_directories_are_created(self, artifact, tmp_path):
        destination = tmp_path / "out"

        Extractor().unzip(artifact, destination)

        assert (destination / "tmp").is_dir()
        assert list((destination / "tmp").iterdir()) == []

    def test_file_mode_is_kept(self, artifact, tmp_path):
        destination = tmp_path / "out"
        Extractor().unzip(artifact, destination)

        mode = stat.S_IMODE((destination / "bin" / "start.sh").stat().st_mode)
        assert mode == 0o755

    def test_manifest_is_written(self, artifact, tmp_path):
        destination = tmp_path / "out"
        manifest = "applications:\n- name: foo\n  memory: 256M\n"

        Extractor().unzip(artifact, destination, manifest=manifest)

        assert (destination / "manifest.yml").read_text() == manifest

    def test_invalid_zip(self, tmp_path):
        bad = tmp_path / "bad.zip"
        bad.write_bytes(b"not a zip file")

        with pytest.raises(ExtractionError) as exc_info:
            Extractor().unzip(bad, tmp_path / "out")

        assert "cannot open zip file" in str(exc_info.value)
        assert "double check your zip compression method" in str(exc_info.value)

    def test_missing_source(self, tmp_path):
        with pytest.raises(ExtractionError):
            Extractor().unzip(tmp_path / "missing.zip", tmp_path / "out")

    def test_path_traversal_rejected(self, tmp_path):
        evil = tmp_path / "evil.zip"
        with zipfile.ZipFile(evil, "w") as zf:
            zf.writestr("../escaped.txt", "gotcha")

        with pytest.raises(ExtractionError) as exc_info:
            Extractor().unzip(evil, tmp_path / "out")

        assert "escapes destination" in str(exc_info.value)
        assert not (tmp_path / "escaped.txt").exists()
