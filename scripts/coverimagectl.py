from __future__ import annotations

"""coverimagectl: companion CLI for the Cover Image plugin.

Drives the same engine the reader uses, against a JSON settings file:
- Check whether a path can hold the screensaver image
- Write the cover of a document file, or run the close-time cleanup
- Change paths and toggles the way the options page does

This is a development utility and is not included in the plugin ZIP.
"""

import argparse
import logging
import sys
from pathlib import Path

# Allow running as a script from the repo without installing a package.
_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))


from cover_image.config import ConfigError, JsonSettingsStore, default_settings_path
from cover_image.document import document_from_path
from cover_image.imagesource import PillowCoverSource
from cover_image.manager import CoverImageManager, SyncResult
from cover_image.notices import log_notifier
from cover_image.pathcheck import check_path


def _read_version(repo_root: Path) -> str:
    manifest = repo_root / "MANIFEST.toml"
    try:
        text = manifest.read_text(encoding="utf-8")
    except OSError:
        return "unknown"

    try:
        import tomllib

        data = tomllib.loads(text)
    except (ImportError, ValueError):
        return "unknown"
    v = data.get("version")
    return v if isinstance(v, str) and v else "unknown"


def _configure_logging(verbosity: int) -> logging.Logger:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(message)s",
        # Module loggers may already have installed a default handler.
        force=True,
    )
    return logging.getLogger("coverimagectl")


def _build_parser(version: str) -> argparse.ArgumentParser:
    desc = (
        f"coverimagectl {version} - keep a screensaver image file in step with a document cover. "
        "Writes covers, applies the fallback image and validates paths."
    )

    p = argparse.ArgumentParser(prog="coverimagectl", description=desc)
    p.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity")
    p.add_argument(
        "--version",
        action="version",
        version=f"coverimagectl {version}",
        help="Print version and exit",
    )
    p.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="JSON settings file (default: per-user config directory)",
    )
    p.add_argument(
        "--writable-root",
        action="append",
        type=Path,
        default=None,
        help="Directory the image may be written below (repeatable). Default: any writable directory.",
    )

    sub = p.add_subparsers(dest="cmd", required=True)

    c = sub.add_parser("check", help="Validate a path for the screensaver image")
    c.add_argument("path", help="Candidate image path")

    sub.add_parser("status", help="Print the current settings")

    o = sub.add_parser("open", help="Write the cover of a document, as when it is opened")
    o.add_argument("document", type=Path, help="Image, CBZ or EPUB file")

    sub.add_parser("close", help="Run the close-time cleanup (fallback image or delete)")

    sp = sub.add_parser("set-path", help="Change the screensaver image path")
    sp.add_argument("path", help="New image path")

    sf = sub.add_parser("set-fallback", help="Change the fallback image path (empty to delete instead)")
    sf.add_argument("path", help="New fallback image path")

    t = sub.add_parser("toggle", help="Flip the cover or fallback switch")
    t.add_argument("what", choices=["enabled", "fallback"])

    e = sub.add_parser("exclude", help="Flip the exclusion flag of a document")
    e.add_argument("document", type=Path, help="Document file")

    return p


def _report(logger: logging.Logger, result: SyncResult) -> int:
    logger.info("Done: action=%s path=%s", result.action, result.path)
    if not result.check.ok:
        print(result.check.message, file=sys.stderr)
    return 0 if result.ok else 1


def main(argv: list[str] | None = None) -> int:
    repo_root = Path(__file__).resolve().parents[1]
    version = _read_version(repo_root)

    args = _build_parser(version).parse_args(argv)
    logger = _configure_logging(args.verbose)

    if args.cmd == "check":
        check = check_path(args.path, args.writable_root)
        print("ok" if check.ok else check.message)
        return 0 if check.ok else 1

    try:
        store = JsonSettingsStore(args.settings or default_settings_path())
    except ConfigError as exc:
        logger.error("%s", exc)
        return 2

    manager = CoverImageManager(
        store,
        PillowCoverSource(),
        notify=log_notifier(logger),
        writable_roots=args.writable_root,
        logger=logger,
    )

    if args.cmd == "status":
        s = manager.settings
        print(f"enabled={s.enabled} fallback={s.fallback_enabled}")
        print(f"path={s.target_path!r} usable={manager.is_target_usable()}")
        print(f"fallback_path={s.fallback_path!r} usable={manager.is_fallback_usable()}")
        return 0

    if args.cmd in ("open", "exclude"):
        if not args.document.is_file():
            logger.error("Document does not exist: %s", args.document)
            return 2
        try:
            doc = document_from_path(args.document)
        except ConfigError as exc:
            logger.error("%s", exc)
            return 2
        if args.cmd == "open":
            return _report(logger, manager.on_document_opened(doc))
        return _report(logger, manager.toggle_exclusion(doc))

    if args.cmd == "close":
        return _report(logger, manager.on_document_closed())
    if args.cmd == "set-path":
        return _report(logger, manager.set_target_path(args.path))
    if args.cmd == "set-fallback":
        return _report(logger, manager.set_fallback_path(args.path))

    if args.what == "enabled":
        return _report(logger, manager.toggle_enabled())
    return _report(logger, manager.toggle_fallback())


if __name__ == "__main__":
    raise SystemExit(main())
