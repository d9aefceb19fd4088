import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from system.errors import ConfigError

logger = logging.getLogger(__name__)


# =========================
# PATH
# =========================

BASE_DIR = Path(__file__).resolve().parent
CONFIG_PATH = Path.home() / ".dnsswitcher.json"
DEFAULT_CONFIG_PATH = BASE_DIR / "dnsswitcher.default.json"

DEFAULT_INTERFACE = "Wi-Fi"


# =========================
# MODELLO
# =========================

@dataclass
class Profile:
    name: str
    servers: list[str]
    load_cmd: str | None = None


@dataclass
class Catalog:
    interface: str = DEFAULT_INTERFACE
    profiles: list[Profile] = field(default_factory=list)

    def display_profiles(self) -> list[Profile]:
        """
        Il menu mostra i profili dall'ultimo al primo.
        """
        return list(reversed(self.profiles))


# =========================
# PARSING
# =========================

def parse_profile(entry, index: int) -> Profile | None:
    """
    Converte una voce di "settings" in Profile.
    Ritorna None (e scrive il motivo nel log) se la voce non è valida:
    una voce errata non blocca il caricamento delle altre.
    """
    if not isinstance(entry, dict):
        logger.warning("[CONFIG] Voce %d ignorata: non è un oggetto", index)
        return None

    name = entry.get("name")
    if not isinstance(name, str) or not name.strip():
        logger.warning("[CONFIG] Voce %d ignorata: 'name' mancante o non valido", index)
        return None

    servers = entry.get("servers")
    if (
        not isinstance(servers, list)
        or not servers
        or not all(isinstance(s, str) for s in servers)
    ):
        logger.warning("[CONFIG] Profilo '%s' ignorato: 'servers' mancante o non valido", name)
        return None

    load_cmd = entry.get("load_cmd")
    if load_cmd is not None and not isinstance(load_cmd, str):
        logger.warning("[CONFIG] Profilo '%s' ignorato: 'load_cmd' non è una stringa", name)
        return None
    if load_cmd is not None and not load_cmd.strip():
        load_cmd = None

    return Profile(name=name, servers=list(servers), load_cmd=load_cmd)


def parse_catalog(data) -> Catalog:
    if not isinstance(data, dict):
        raise ConfigError("La configurazione deve essere un oggetto JSON")

    interface = data.get("interface")
    if not isinstance(interface, str) or not interface.strip():
        logger.info("[CONFIG] Interfaccia assente o non valida, uso '%s'", DEFAULT_INTERFACE)
        interface = DEFAULT_INTERFACE

    settings = data.get("settings")
    if not isinstance(settings, list):
        logger.warning("[CONFIG] Nessun profilo trovato nella configurazione")
        settings = []

    profiles: list[Profile] = []
    seen: set[str] = set()
    for index, entry in enumerate(settings):
        profile = parse_profile(entry, index)
        if profile is None:
            continue
        if profile.name in seen:
            logger.warning("[CONFIG] Profilo duplicato ignorato: '%s'", profile.name)
            continue
        seen.add(profile.name)
        profiles.append(profile)

    return Catalog(interface=interface, profiles=profiles)


def catalog_to_dict(catalog: Catalog) -> dict:
    settings = []
    for profile in catalog.profiles:
        item = {"name": profile.name, "servers": list(profile.servers)}
        if profile.load_cmd:
            item["load_cmd"] = profile.load_cmd
        settings.append(item)

    return {"interface": catalog.interface, "settings": settings}


# =========================
# LETTURA / SCRITTURA
# =========================

def load(path: Path) -> Catalog:
    """
    Legge e valida il file di configurazione.
    File mancante o JSON non valido: ConfigError (fatale se non esiste
    già un catalogo valido in memoria).
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Impossibile leggere {path}: {exc}") from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"JSON non valido in {path}: {exc}") from exc

    catalog = parse_catalog(data)
    logger.info("[CONFIG] Caricati %d profili da %s", len(catalog.profiles), path)
    return catalog


def _write_atomic(path: Path, text: str) -> None:
    # file temporaneo nella stessa cartella + os.replace: tutto o niente
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    finally:
        if os.path.exists(tmp):
            os.unlink(tmp)


def save(path: Path, catalog: Catalog) -> None:
    text = json.dumps(catalog_to_dict(catalog), indent=2, ensure_ascii=False) + "\n"
    try:
        _write_atomic(Path(path), text)
    except OSError as exc:
        raise ConfigError(f"Impossibile salvare {path}: {exc}") from exc

    logger.info("[CONFIG] Configurazione salvata (interfaccia: %s)", catalog.interface)


# =========================
# MODIFICHE ESTERNE
# =========================

def has_changed_since(path: Path, last_known: float | None) -> tuple[bool, float | None]:
    """
    Confronta la data di modifica del file con l'ultima nota.
    Ritorna (cambiato, nuova data di modifica).
    Se gli attributi non sono leggibili si ricarica comunque.
    """
    try:
        mod_time = os.stat(path).st_mtime
    except OSError as exc:
        logger.warning("[CONFIG] Impossibile leggere la data di modifica: %s", exc)
        return True, None

    # primo caricamento
    if last_known is None:
        return True, mod_time

    return mod_time > last_known, mod_time


# =========================
# CONFIGURAZIONE DI DEFAULT
# =========================

def ensure_default_exists(default_template_path: Path, path: Path) -> bool:
    """
    Crea il file di configurazione dal template se non esiste.
    Ritorna True se il file è stato creato.
    """
    path = Path(path)
    if path.exists():
        return False

    try:
        template = Path(default_template_path).read_text(encoding="utf-8")
        _write_atomic(path, template)
    except OSError as exc:
        raise ConfigError(f"Impossibile creare la configurazione di default: {exc}") from exc

    logger.info("[CONFIG] Creata configurazione di default in %s", path)
    return True


def restore_default(default_template_path: Path, path: Path) -> None:
    """
    Sovrascrive SEMPRE il file con il template di default.
    Le modifiche dell'utente vengono perse (reset esplicito).
    """
    try:
        template = Path(default_template_path).read_text(encoding="utf-8")
        _write_atomic(Path(path), template)
    except OSError as exc:
        raise ConfigError(f"Impossibile ripristinare la configurazione di default: {exc}") from exc

    logger.info("[CONFIG] Configurazione di default ripristinata")
