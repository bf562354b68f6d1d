# main.py

from __future__ import annotations

import argparse
import sys

from PyQt6 import QtWidgets

from voicenav.core.config import Config
from voicenav.ui import VoiceNavWindow
from voicenav.controller import VoiceNavController


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Voice-driven article search and narration.")
    parser.add_argument("--config", default="config.json", help="Path to config.json")
    parser.add_argument("--language", help="Locale for speech and voice commands, e.g. en, it")
    parser.add_argument("--base-url", help="Backend root URL, e.g. http://127.0.0.1:35248")
    parser.add_argument("--ai", action="store_true", help="Enable semantic search")
    return parser.parse_args(argv)


def main():
    args = parse_args()

    config = Config(args.config)
    if args.language:
        config.set("language", args.language)
    if args.base_url:
        config.set("api.base_url", args.base_url)
    if args.ai:
        config.set("ai", True)

    app = QtWidgets.QApplication(sys.argv)

    window = VoiceNavWindow()
    controller = VoiceNavController(window, config=config)
    app.aboutToQuit.connect(controller.shutdown)

    window.show()

    # Make sure controller isn't garbage-collected
    window.controller = controller  # type: ignore

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
