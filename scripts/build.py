from __future__ import annotations

import argparse
import hashlib
import tomllib
import zipfile
from pathlib import Path

PACKAGE_DIR = "cover_image"
# Development-only files that never ship in the plugin ZIP.
_SKIP_PARTS = {"__pycache__"}


def _read_manifest(manifest_path: Path) -> tuple[str, str]:
    data = tomllib.loads(manifest_path.read_text(encoding="utf-8"))

    name = data.get("name")
    version = data.get("version")
    if not isinstance(name, str) or not name:
        raise RuntimeError("MANIFEST.toml missing name")
    if not isinstance(version, str) or not version:
        raise RuntimeError("MANIFEST.toml missing version")
    return name, version


def plugin_files(root: Path) -> list[Path]:
    entry = root / "__init__.py"
    if not entry.is_file():
        raise RuntimeError(f"Plugin entry point missing: {entry}")

    files = [root / "MANIFEST.toml", entry]
    pkg = root / PACKAGE_DIR
    files.extend(
        p for p in sorted(pkg.rglob("*.py")) if p.is_file() and not _SKIP_PARTS & set(p.parts)
    )
    return files


def build(repo_root: Path | None = None, dist: Path | None = None) -> Path:
    """Write a byte-for-byte reproducible plugin ZIP plus its SHA256SUMS."""

    repo_root = repo_root or Path(__file__).resolve().parents[1]
    name, version = _read_manifest(repo_root / "MANIFEST.toml")

    dist = dist or repo_root / "dist"
    dist.mkdir(parents=True, exist_ok=True)
    out_zip = dist / f"{name}_{version}.zip"

    fixed_time = (1980, 1, 1, 0, 0, 0)

    with zipfile.ZipFile(out_zip, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9) as zf:
        for file_path in plugin_files(repo_root):
            info = zipfile.ZipInfo(file_path.relative_to(repo_root).as_posix())
            info.date_time = fixed_time
            info.compress_type = zipfile.ZIP_DEFLATED
            info.external_attr = 0o644 << 16
            zf.writestr(info, file_path.read_bytes())

    sha256 = hashlib.sha256(out_zip.read_bytes()).hexdigest()
    (dist / "SHA256SUMS").write_text(f"{sha256}  {out_zip.name}\n", encoding="utf-8")

    return out_zip


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Build the Cover Image plugin ZIP")
    parser.add_argument("--dist", type=Path, default=None, help="Output directory (default: ./dist)")
    print(build(dist=parser.parse_args().dist))
