from dataclasses import dataclass, field

from config.config_store import Catalog


@dataclass
class AppState:
    """
    Stato dell'applicazione in memoria.
    Appartiene al livello UI e viene passato al controller.
    """
    last_mod_time: float | None = None
    catalog: Catalog | None = None
    active_interface: str | None = None
    interfaces: list[str] = field(default_factory=list)
    current_servers: list[str] = field(default_factory=list)

    def forget_mod_time(self) -> None:
        # forza il ricaricamento al prossimo controllo
        self.last_mod_time = None
