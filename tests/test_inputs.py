"""Tests for slycer.inputs module."""

from __future__ import annotations

from pathlib import Path

import pytest

from slycer.exceptions import InputError
from slycer.inputs import classify_input, is_batch_input, read_batch_file


class TestClassifyInput:
    def test_single_url(self) -> None:
        items = list(classify_input("https://youtu.be/abc"))
        assert len(items) == 1
        assert items[0].url == "https://youtu.be/abc"
        assert items[0].position == 1

    def test_batch_file(self, tmp_path: Path) -> None:
        batch = tmp_path / "urls.txt"
        batch.write_text("https://a.example/1\n\n   \nhttps://a.example/2\n")
        items = list(classify_input(str(batch)))
        assert [i.url for i in items] == ["https://a.example/1", "https://a.example/2"]
        assert [i.position for i in items] == [1, 2]

    def test_batch_lines_are_not_validated(self, tmp_path: Path) -> None:
        batch = tmp_path / "urls.txt"
        batch.write_text("https://a.example/1\nnot a url\nhttps://a.example/3\n")
        items = list(classify_input(str(batch)))
        assert [i.url for i in items][1] == "not a url"

    def test_directory_is_treated_as_url(self, tmp_path: Path) -> None:
        assert not is_batch_input(str(tmp_path))
        items = list(classify_input(str(tmp_path)))
        assert items[0].url == str(tmp_path)

    def test_consumed_once(self) -> None:
        items = classify_input("https://youtu.be/abc")
        assert len(list(items)) == 1
        assert list(items) == []


class TestReadBatchFile:
    def test_trims_and_skips_comments(self, tmp_path: Path) -> None:
        batch = tmp_path / "urls.txt"
        batch.write_text("# my list\n  https://a.example/1  \r\n#https://skip\n")
        assert read_batch_file(batch) == ["https://a.example/1"]

    def test_empty_file_raises(self, tmp_path: Path) -> None:
        batch = tmp_path / "urls.txt"
        batch.write_text("\n\n# nothing\n")
        with pytest.raises(InputError, match="no URLs"):
            read_batch_file(batch)

    def test_unreadable_file_raises(self, tmp_path: Path) -> None:
        batch = tmp_path / "urls.txt"
        batch.write_bytes(b"\xff\xfe\xfa binary")
        with pytest.raises(InputError):
            read_batch_file(batch)
