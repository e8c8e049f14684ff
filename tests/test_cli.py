"""测试命令行入口。"""

from __future__ import annotations

from pathlib import Path

from PIL import Image
from typer.testing import CliRunner

from image_resizer.cli.main import app

runner = CliRunner()


def test_cli_resize_success(tmp_path: Path) -> None:
    source = tmp_path / "input"
    output = tmp_path / "output"
    source.mkdir()
    Image.new("RGB", (80, 60), "red").save(source / "photo.png")

    result = runner.invoke(app, ["resize", str(source), "--output", str(output), "--scale", "0.5"])

    assert result.exit_code == 0, result.output
    with Image.open(output / "photo.jpg") as img:
        assert img.size == (40, 30)


def test_cli_resize_reports_partial_failure(tmp_path: Path) -> None:
    source = tmp_path / "input"
    output = tmp_path / "output"
    source.mkdir()
    Image.new("RGB", (80, 60), "red").save(source / "photo.png")
    (source / "broken.jpg").write_text("broken")

    result = runner.invoke(
        app,
        ["resize", str(source), "-o", str(output), "-s", "0.5", "--report", "report.csv"],
    )

    assert result.exit_code == 1
    assert "broken.jpg" in result.output
    assert (output / "photo.jpg").exists()
    assert (output / "report.csv").exists()


def test_cli_resize_missing_source(tmp_path: Path) -> None:
    result = runner.invoke(
        app,
        ["resize", str(tmp_path / "missing"), "-o", str(tmp_path / "output"), "-s", "0.5", "--sequential"],
    )

    assert result.exit_code == 1


def test_cli_clean(tmp_path: Path) -> None:
    output = tmp_path / "output"
    (output / "sub").mkdir(parents=True)
    (output / "a.jpg").write_bytes(b"a")
    (output / "sub" / "b.jpg").write_bytes(b"b")

    result = runner.invoke(app, ["clean", str(output)])

    assert result.exit_code == 0, result.output
    assert (output / "sub").is_dir()
    assert not (output / "a.jpg").exists()
    assert not (output / "sub" / "b.jpg").exists()
