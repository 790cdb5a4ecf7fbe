from __future__ import annotations

import io
import zipfile
from pathlib import Path

from PIL import Image

from cover_image.document import DocumentHandle
from cover_image.fsops import copy_file, remove_file, write_image
from cover_image.imagesource import PillowCoverSource, PillowImageBuffer


def _png_bytes(color: str, size: tuple[int, int] = (3, 4)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


def test_image_file_cover(tmp_path: Path) -> None:
    doc_path = tmp_path / "page.png"
    doc_path.write_bytes(_png_bytes("red"))

    image = PillowCoverSource().get_cover_image(DocumentHandle(id="x", path=doc_path))

    assert image is not None
    assert image.image.size == (3, 4)


def test_cbz_uses_first_page(tmp_path: Path) -> None:
    doc_path = tmp_path / "comic.cbz"
    with zipfile.ZipFile(doc_path, "w") as zf:
        zf.writestr("002.png", _png_bytes("blue", (2, 2)))
        zf.writestr("001.png", _png_bytes("red", (9, 9)))
        zf.writestr("info.txt", "hello")

    image = PillowCoverSource().get_cover_image(DocumentHandle(id="x", path=doc_path))

    assert image is not None
    assert image.image.size == (9, 9)


def test_epub_prefers_named_cover(tmp_path: Path) -> None:
    doc_path = tmp_path / "book.epub"
    with zipfile.ZipFile(doc_path, "w") as zf:
        zf.writestr("OEBPS/images/a.png", _png_bytes("blue", (2, 2)))
        zf.writestr("OEBPS/images/cover.png", _png_bytes("red", (7, 5)))

    image = PillowCoverSource().get_cover_image(DocumentHandle(id="x", path=doc_path))

    assert image is not None
    assert image.image.size == (7, 5)


def test_no_cover_cases(tmp_path: Path) -> None:
    source = PillowCoverSource()
    text = tmp_path / "book.txt"
    text.write_text("plain")
    broken = tmp_path / "broken.png"
    broken.write_bytes(b"not an image")
    empty_zip = tmp_path / "empty.cbz"
    with zipfile.ZipFile(empty_zip, "w") as zf:
        zf.writestr("readme.txt", "no pages")

    assert source.get_cover_image(DocumentHandle(id="none")) is None
    assert source.get_cover_image(DocumentHandle(id="t", path=text)) is None
    assert source.get_cover_image(DocumentHandle(id="b", path=broken)) is None
    assert source.get_cover_image(DocumentHandle(id="z", path=empty_zip)) is None


def test_write_image_is_png(tmp_path: Path) -> None:
    buffer = PillowImageBuffer(Image.new("RGBA", (4, 4), (1, 2, 3, 4)))
    target = tmp_path / "cover.png"

    write_image(buffer, target)

    assert target.read_bytes() == buffer.encode("PNG")
    with Image.open(target) as img:
        assert img.format == "PNG"
        assert not img.info.get("interlace")


def test_copy_and_remove(tmp_path: Path) -> None:
    src = tmp_path / "fb.png"
    src.write_bytes(b"F")
    dst = tmp_path / "cover.png"
    dst.write_bytes(b"old")

    copy_file(src, dst)
    assert dst.read_bytes() == b"F"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["cover.png", "fb.png"]

    assert remove_file(dst)
    assert not remove_file(dst)


def test_corrupt_archive_member_has_no_cover(tmp_path: Path) -> None:
    doc_path = tmp_path / "damaged.cbz"
    name = "001.bmp"
    with zipfile.ZipFile(doc_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        buf = io.BytesIO()
        Image.new("RGB", (64, 64), "white").save(buf, format="BMP")
        zf.writestr(name, buf.getvalue())

    data = bytearray(doc_path.read_bytes())
    # Local header is 30 bytes plus the member name; clobber the deflate stream after it.
    start = 30 + len(name)
    data[start : start + 16] = b"\xff" * 16
    doc_path.write_bytes(bytes(data))

    assert PillowCoverSource().get_cover_image(DocumentHandle(id="x", path=doc_path)) is None


def test_oversized_image_has_no_cover(tmp_path: Path, monkeypatch) -> None:  # type: ignore[no-untyped-def]
    doc_path = tmp_path / "huge.png"
    doc_path.write_bytes(_png_bytes("red"))

    def _bomb(fp):  # type: ignore[no-untyped-def]
        raise Image.DecompressionBombError("too many pixels")

    monkeypatch.setattr("cover_image.imagesource._open_loaded", _bomb)

    assert PillowCoverSource().get_cover_image(DocumentHandle(id="x", path=doc_path)) is None
