from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtGui import QAction, QDesktopServices
from PyQt6.QtWidgets import QApplication, QMenu, QMessageBox, QStyle, QSystemTrayIcon

from config.config_store import Profile
from gui.controller import AppController
from system.activator import ActivationResult, ActivationStatus
from system.errors import FatalError

ACTIVE_MARK = "✓ "


class TrayApp(QObject):
    """
    Icona nella barra di sistema con il menu dei profili.
    Il menu viene ricostruito a ogni apertura, se serve.
    """

    def __init__(self, app: QApplication, controller: AppController | None = None):
        super().__init__()
        self.app = app
        self.log_lines: list[str] = []
        self.controller = controller or AppController(self.append_log)

        # =========================
        # MENU
        # =========================
        self.menu = QMenu()
        self.menu.aboutToShow.connect(self.refresh_menu)
        self.profile_menus: dict[str, QMenu] = {}
        self.interface_menu: QMenu | None = None

        icon = app.style().standardIcon(QStyle.StandardPixmap.SP_DriveNetIcon)
        self.tray_icon = QSystemTrayIcon(icon, self)
        self.tray_icon.setToolTip("DNS Switcher")
        self.tray_icon.setContextMenu(self.menu)

    def start(self) -> bool:
        try:
            self.controller.startup()
        except FatalError as exc:
            self.fatal(exc)
            return False

        self.refresh_menu()
        self.tray_icon.show()
        return True

    # =========================
    # LOG
    # =========================
    def append_log(self, message: str):
        self.log_lines.append(message)

    # =========================
    # MESSAGGI
    # =========================
    def _show_error(self, title: str, message: str):
        box = QMessageBox()
        box.setIcon(QMessageBox.Icon.Critical)
        box.setWindowTitle(title)
        box.setText(message)
        box.setMinimumWidth(480)
        box.exec()

    def fatal(self, exc: Exception):
        self._show_error("Errore critico", str(exc))
        self.quit(1)

    # =========================
    # COSTRUZIONE MENU
    # =========================
    def refresh_menu(self):
        try:
            self.controller.check_and_maybe_reload()
            interfaces, active = self.controller.list_interfaces_for_display()
            views = self.controller.profiles_for_display()
        except FatalError as exc:
            self.fatal(exc)
            return

        self.menu.clear()
        self.profile_menus = {}

        for view in views:
            title = f"{ACTIVE_MARK}{view.profile.name}" if view.active else view.profile.name
            self._add_profile_menu(title, view.profile, active)

        self.menu.addSeparator()

        interface_menu = self.menu.addMenu(f"Interfaccia: {active}")
        self.interface_menu = interface_menu
        for name in interfaces:
            action = QAction(name, interface_menu)
            action.setCheckable(True)
            action.setChecked(name == active)
            action.triggered.connect(lambda _=False, n=name: self.select_interface(n))
            interface_menu.addAction(action)

        self.menu.addSeparator()
        edit_action = self.menu.addAction("Modifica configurazione")
        edit_action.triggered.connect(lambda _=False: self.edit_config())
        restore_action = self.menu.addAction("Ripristina configurazione di default")
        restore_action.triggered.connect(lambda _=False: self.restore_defaults())
        quit_action = self.menu.addAction("Esci")
        quit_action.triggered.connect(lambda _=False: self.quit(0))

    def _add_profile_menu(self, title: str, profile: Profile, interface: str):
        submenu = self.menu.addMenu(title)
        self.profile_menus[profile.name] = submenu

        load_action = submenu.addAction("Carica")
        load_action.triggered.connect(lambda _=False, p=profile: self.activate_profile(p))
        submenu.addSeparator()

        details = [f"Interfaccia: {interface}", "Server:"]
        details.extend(profile.servers)
        if profile.load_cmd:
            details.append(f"Pre-comando: {profile.load_cmd}")
        for text in details:
            item = submenu.addAction(text)
            item.setEnabled(False)

    # =========================
    # AZIONI
    # =========================
    def activate_profile(self, profile: Profile) -> ActivationResult | None:
        try:
            result = self.controller.activate_profile(profile)
        except FatalError as exc:
            self.fatal(exc)
            return None

        if result.status is ActivationStatus.PRE_COMMAND_FAILED:
            self._show_error(
                "Pre-comando fallito",
                f"Il comando di '{profile.name}' è terminato con codice "
                f"{result.exit_code}.\n\n{result.output.strip()}"
            )
        elif result.status is ActivationStatus.DNS_CHANGE_FAILED:
            self._show_error(
                "Cambio DNS fallito",
                f"Impossibile impostare i DNS di '{profile.name}' "
                f"(codice {result.exit_code}).\n\n{result.output.strip()}"
            )
        return result

    def select_interface(self, name: str):
        try:
            self.controller.select_interface(name)
        except ValueError as exc:
            self._show_error("Interfaccia", str(exc))
        except FatalError as exc:
            self.fatal(exc)

    def edit_config(self):
        # le modifiche vengono rilevate alla prossima apertura del menu
        QDesktopServices.openUrl(QUrl.fromLocalFile(str(self.controller.config_path)))

    def restore_defaults(self):
        try:
            self.controller.restore_defaults()
        except FatalError as exc:
            self.fatal(exc)

    def quit(self, code: int = 0):
        self.tray_icon.hide()
        self.app.exit(code)
