import argparse
import sys
from pathlib import Path
from typing import List, Optional

from PySide6.QtWidgets import QApplication
from PySide6.QtGui import QIcon

from core.dashboard import DashboardCore
from ui.main_window import MainWindow
from ui.worker import SyncWorker


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Scrobble Dash - Last.fm recent tracks and top artists")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a lastfm.properties file (default: next to app.py)",
    )
    # Qt consumes its own flags (-style, -platform ...), so unknown ones are left alone.
    args, _ = parser.parse_known_args(argv)
    return args


def build_core(args: argparse.Namespace) -> DashboardCore:
    core = DashboardCore.from_config(args.config)
    if not core.enabled:
        print(f"[Config] {core.config_error}", file=sys.stderr)
    return core


def main():
    args = parse_args(sys.argv[1:])
    app = QApplication(sys.argv)
    app.setApplicationName("Scrobble Dash")
    icon_path = Path(__file__).resolve().parent / "logo.png"
    if icon_path.exists():
        app.setWindowIcon(QIcon(str(icon_path)))
    core = build_core(args)
    win = MainWindow(SyncWorker(core))
    win.show()
    app.aboutToQuit.connect(win._stop_worker)
    sys.exit(app.exec())

if __name__ == "__main__":
    main()
