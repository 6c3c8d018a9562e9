from __future__ import annotations

from pathlib import Path

import pytest

from transcriptlab.core.transcript import UploadedFile, owned_artifact


def test_extension_and_stem_follow_client_filename(tmp_path: Path) -> None:
    f = UploadedFile(filename="Lesson.Notes.CSV", path=tmp_path / "x")
    assert f.extension == "CSV"
    assert f.stem == "Lesson.Notes"

    bare = UploadedFile(filename="README", path=tmp_path / "y")
    assert bare.extension == ""
    assert bare.stem == "README"


def test_release_only_deletes_owned_files(tmp_path: Path) -> None:
    p = tmp_path / "keep.csv"
    p.write_text("x", encoding="utf-8")
    UploadedFile(filename="keep.csv", path=p).release()
    assert p.exists()

    UploadedFile(filename="keep.csv", path=p, owns_path=True).release()
    assert not p.exists()


def test_owned_artifact_releases_on_error(tmp_path: Path) -> None:
    src = tmp_path / "in.csv"
    src.write_text("x", encoding="utf-8")
    art = tmp_path / "out.txt"
    art.write_text("y", encoding="utf-8")

    original = UploadedFile(filename="in.csv", path=src)
    processed = UploadedFile(filename="in.txt", path=art, owns_path=True)

    with pytest.raises(RuntimeError):
        with owned_artifact(original, processed):
            raise RuntimeError("analysis blew up")

    assert not art.exists()
    assert src.exists()


def test_owned_artifact_keeps_original_when_unchanged(tmp_path: Path) -> None:
    src = tmp_path / "in.txt"
    src.write_text("x", encoding="utf-8")
    original = UploadedFile(filename="in.txt", path=src, owns_path=True)

    with owned_artifact(original, original) as f:
        assert f is original
    assert src.exists()
