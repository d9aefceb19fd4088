import logging
import threading
from dataclasses import dataclass
from pathlib import Path

import config.config_store as config_store
from config.config_store import Catalog, Profile
from state.app_state import AppState
from system.activator import ActivationResult, ProfileActivator
from system.errors import ConfigError
from system.network import current_servers, list_interfaces, matching_profile, resolve_active
from system.process import ProcessRunner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProfileView:
    profile: Profile
    active: bool = False


class AppController:
    """
    API usata dalla UI.
    Tutte le operazioni passano da un unico lock: mai due cambi DNS
    contemporanei e mai un catalogo letto a metà aggiornamento.
    """

    def __init__(
        self,
        log_callback,
        state: AppState | None = None,
        runner: ProcessRunner | None = None,
        config_path: Path | None = None,
        default_config_path: Path | None = None,
    ):
        self.log = log_callback
        self.state = state if state is not None else AppState()
        self.runner = runner if runner is not None else ProcessRunner()
        self.activator = ProfileActivator(self.runner)
        self._config_path = config_path
        self._default_config_path = default_config_path
        self._lock = threading.RLock()

    @property
    def config_path(self) -> Path:
        return Path(self._config_path or config_store.CONFIG_PATH)

    @property
    def default_config_path(self) -> Path:
        return Path(self._default_config_path or config_store.DEFAULT_CONFIG_PATH)

    # =========================
    # AVVIO APP
    # =========================

    def startup(self) -> Catalog:
        with self._lock:
            if config_store.ensure_default_exists(self.default_config_path, self.config_path):
                self.log(f"[INIT] Creata configurazione di default: {self.config_path}")
            return self.check_and_maybe_reload()

    # =========================
    # CONFIGURAZIONE
    # =========================

    def check_and_maybe_reload(self) -> Catalog:
        """
        Ricarica il catalogo solo se il file è cambiato (o al primo avvio).
        Se il file è rotto ma esiste già un catalogo valido, si tiene quello.
        """
        with self._lock:
            changed, mod_time = config_store.has_changed_since(
                self.config_path, self.state.last_mod_time
            )
            if not changed and self.state.catalog is not None:
                return self.state.catalog

            try:
                catalog = config_store.load(self.config_path)
            except ConfigError as exc:
                if self.state.catalog is None:
                    raise
                logger.error("[APP] Ricaricamento fallito, uso la configurazione precedente: %s", exc)
                self.log(f"[ERRORE] Configurazione non valida: {exc}")
                return self.state.catalog

            self.state.catalog = catalog
            self.state.last_mod_time = mod_time
            # l'interfaccia va risolta di nuovo sul nuovo catalogo
            self.state.active_interface = None
            self.log(f"[CONFIG] Caricati {len(catalog.profiles)} profili")
            return catalog

    def restore_defaults(self) -> Catalog:
        """
        Sovrascrive la configurazione con quella di default e la ricarica.
        """
        with self._lock:
            config_store.restore_default(self.default_config_path, self.config_path)
            self.state.forget_mod_time()
            catalog = self.check_and_maybe_reload()
            self.log("[CONFIG] Configurazione di default ripristinata")
            return catalog

    def _require_catalog(self) -> Catalog:
        if self.state.catalog is None:
            return self.check_and_maybe_reload()
        return self.state.catalog

    def _persist(self, catalog: Catalog) -> None:
        config_store.save(self.config_path, catalog)
        # il salvataggio non deve provocare un ricaricamento
        _, self.state.last_mod_time = config_store.has_changed_since(self.config_path, None)

    # =========================
    # INTERFACCE DI RETE
    # =========================

    def list_interfaces_for_display(self) -> tuple[list[str], str]:
        with self._lock:
            catalog = self._require_catalog()
            interfaces = list_interfaces(self.runner)
            active, needs_save = resolve_active(catalog, interfaces)

            self.state.interfaces = interfaces
            self.state.active_interface = active
            if needs_save:
                self._persist(catalog)
                self.log(f"[NET] Interfaccia impostata su {active}")
            return list(interfaces), active

    def _ensure_active_interface(self) -> str:
        if self.state.active_interface is None:
            _, active = self.list_interfaces_for_display()
            return active
        return self.state.active_interface

    def select_interface(self, name: str) -> None:
        with self._lock:
            catalog = self._require_catalog()
            interfaces = list_interfaces(self.runner)
            self.state.interfaces = interfaces
            if name not in interfaces:
                raise ValueError(f"Interfaccia sconosciuta: {name}")

            self.state.active_interface = name
            if catalog.interface == name:
                return

            catalog.interface = name
            self._persist(catalog)
            self.log(f"[NET] Interfaccia selezionata: {name}")

    # =========================
    # PROFILI
    # =========================

    def profiles_for_display(self) -> list[ProfileView]:
        """
        Profili in ordine di visualizzazione (inverso rispetto al file),
        con evidenziato quello che corrisponde ai DNS attuali.
        """
        with self._lock:
            catalog = self._require_catalog()
            interface = self._ensure_active_interface()
            self.state.current_servers = current_servers(self.runner, interface)

            match = matching_profile(catalog, self.state.current_servers)
            return [
                ProfileView(profile, profile is match)
                for profile in catalog.display_profiles()
            ]

    def activate_profile(self, profile: Profile) -> ActivationResult:
        with self._lock:
            interface = self._ensure_active_interface()
            self.log(f"[DNS] Attivazione profilo '{profile.name}' su {interface}...")

            result = self.activator.activate(profile, interface)
            if result.ok:
                self.state.current_servers = current_servers(self.runner, interface)
                self.log(f"[DNS] Profilo '{profile.name}' ATTIVO")
            else:
                self.log(f"[ERRORE] Attivazione fallita (exit {result.exit_code})")
            return result
