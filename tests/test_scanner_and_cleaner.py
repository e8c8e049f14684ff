"""测试文件扫描与输出目录清理逻辑。"""

from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from image_resizer.core.cleaner import clean_directory
from image_resizer.core.exceptions import CleanupError, SourceNotFoundError
from image_resizer.core.scanner import find_images


def _save_image(path: Path, size: tuple[int, int] = (16, 16)) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, "blue").save(path)


def test_find_images_matches_fixed_extensions(tmp_path: Path) -> None:
    _save_image(tmp_path / "a.png")
    _save_image(tmp_path / "nested" / "b.png")
    _save_image(tmp_path / "c.jpg")
    _save_image(tmp_path / "deep" / "er" / "d.jpeg")
    (tmp_path / "notes.txt").write_text("hello")

    found = find_images(tmp_path)

    assert len(found) == 4
    assert {p.name for p in found} == {"a.png", "b.png", "c.jpg", "d.jpeg"}
    assert all(isinstance(p, Path) for p in found)


def test_find_images_is_case_insensitive(tmp_path: Path) -> None:
    _save_image(tmp_path / "PHOTO.JPG")
    _save_image(tmp_path / "Scan.PnG")
    (tmp_path / "image.gif").write_bytes(b"GIF89a")

    found = find_images(tmp_path)

    assert {p.name for p in found} == {"PHOTO.JPG", "Scan.PnG"}


def test_find_images_order_is_deterministic(tmp_path: Path) -> None:
    for name in ("b.png", "a.png", "c.jpg"):
        _save_image(tmp_path / name)

    assert find_images(tmp_path) == find_images(tmp_path)


def test_find_images_empty_directory(tmp_path: Path) -> None:
    assert find_images(tmp_path) == []


def test_find_images_missing_root_raises(tmp_path: Path) -> None:
    with pytest.raises(SourceNotFoundError):
        find_images(tmp_path / "missing")


def test_find_images_rejects_file_root(tmp_path: Path) -> None:
    target = tmp_path / "single.png"
    _save_image(target)

    with pytest.raises(SourceNotFoundError):
        find_images(target)


def test_clean_removes_files_and_keeps_subdirectories(tmp_path: Path) -> None:
    dest = tmp_path / "output"
    subdir = dest / "sub"
    subdir.mkdir(parents=True)
    (dest / "one.jpg").write_bytes(b"1")
    (dest / "two.jpg").write_bytes(b"2")
    (subdir / "three.jpg").write_bytes(b"3")

    deleted = clean_directory(dest)

    assert deleted == 3
    assert subdir.is_dir()
    assert [p for p in dest.rglob("*") if p.is_file()] == []


def test_clean_creates_missing_directory(tmp_path: Path) -> None:
    dest = tmp_path / "not" / "yet"

    deleted = clean_directory(dest)

    assert deleted == 0
    assert dest.is_dir()
    assert list(dest.iterdir()) == []


def test_clean_aborts_on_first_undeletable_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    dest = tmp_path / "output"
    dest.mkdir()
    for name in ("one.jpg", "two.jpg", "three.jpg"):
        (dest / name).write_bytes(b"x")

    original_unlink = Path.unlink
    calls: list[Path] = []

    def flaky_unlink(self: Path, *args, **kwargs) -> None:
        calls.append(self)
        if len(calls) == 2:
            raise PermissionError(f"locked: {self}")
        original_unlink(self, *args, **kwargs)

    monkeypatch.setattr(Path, "unlink", flaky_unlink)

    with pytest.raises(CleanupError) as excinfo:
        clean_directory(dest)

    assert isinstance(excinfo.value.__cause__, OSError)
    # 第一个文件已删除，失败的文件及其后的文件保留
    assert len(calls) == 2
    remaining = [p for p in dest.iterdir() if p.is_file()]
    assert len(remaining) == 2
    assert calls[1] in remaining
