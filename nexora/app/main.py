from __future__ import annotations

import argparse
import logging
import os
import sys
import traceback
from pathlib import Path

from PySide6.QtCore import QtMsgType, qInstallMessageHandler
from PySide6.QtWidgets import QApplication

from nexora.app import config
from nexora.app.ui.page_editor_window import PageEditorWindow


logger = logging.getLogger(__name__)

# NEXORA_DEBUG_EDITOR=1 enables DEBUG logging without passing --debug.
DEBUG_ENV_VAR = "NEXORA_DEBUG_EDITOR"

_HARMLESS_QT_MESSAGES = (
    "QWindowsFontEngineDirectWrite::recalcAdvances",
    "GetDesignGlyphMetrics failed",
    "QTextCursor::setPosition",
    "Accessible invalid",
    "Could not find accessible on path",
)

_QT_LOG_LEVELS = {
    QtMsgType.QtDebugMsg: logging.DEBUG,
    QtMsgType.QtInfoMsg: logging.INFO,
    QtMsgType.QtWarningMsg: logging.WARNING,
    QtMsgType.QtCriticalMsg: logging.ERROR,
    QtMsgType.QtFatalMsg: logging.CRITICAL,
}


def _debug_enabled(var_name: str) -> bool:
    """Check if a debug flag is enabled."""
    return os.getenv(var_name, "0") not in ("0", "false", "False", "", None)


def _qt_message_handler(mode: QtMsgType, context, message: str) -> None:
    """Route Qt messages into logging, dropping known harmless warnings."""
    if any(marker in message for marker in _HARMLESS_QT_MESSAGES):
        return
    logging.getLogger("qt").log(_QT_LOG_LEVELS.get(mode, logging.WARNING), message)
    if mode == QtMsgType.QtFatalMsg:
        sys.exit(1)


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="nexora-editor", description="Nexora page editor.")
    parser.add_argument("page", help="Page file to open (.md, .markdown, .txt, .html, .htm).")
    parser.add_argument("--mode", choices=config.EDITOR_MODES, help="Editor mode to open the page in.")
    parser.add_argument("--lang", choices=config.LANGUAGES, help="UI language.")
    parser.add_argument("--read-only", action="store_true", help="Open the page without write access.")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    _configure_logging(args.debug or _debug_enabled(DEBUG_ENV_VAR))
    config.init_settings()
    qInstallMessageHandler(_qt_message_handler)

    qt_app = QApplication.instance() or QApplication(sys.argv[:1])
    page_path = Path(args.page).expanduser()
    logger.info("Opening %s", page_path)
    try:
        window = PageEditorWindow(
            page_path,
            mode=args.mode,
            language=args.lang,
            read_only=args.read_only,
        )
        window.show()
        rc = qt_app.exec()
    except Exception:
        traceback.print_exc()
        return 1
    logger.debug("Qt event loop exited with code %s", rc)
    return rc


if __name__ == "__main__":  # pragma: no cover - manual entry point
    sys.exit(main())
