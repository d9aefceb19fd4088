import logging
import sys

from PyQt6.QtWidgets import QApplication

from gui.tray import TrayApp


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # =========================
    # Avvio tray
    # =========================
    app = QApplication(sys.argv)
    app.setQuitOnLastWindowClosed(False)

    tray = TrayApp(app)
    if not tray.start():
        sys.exit(1)

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
