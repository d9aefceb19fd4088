import logging

from config.config_store import Catalog, Profile
from system.errors import InterfaceError
from system.process import ProcessRunner

logger = logging.getLogger(__name__)


# =========================
# COMANDI DI SISTEMA
# =========================

NETWORKSETUP = "networksetup"

DISABLED_MARKER = "*"
LIST_HEADER_PREFIX = "An asterisk"
NO_DNS_SERVERS_PREFIX = "There aren't any DNS Servers set"


# =========================
# INTERFACCE DI RETE
# =========================

def parse_interfaces(output: str) -> list[str]:
    """
    Un servizio per riga.
    Scarta righe vuote, l'intestazione e i servizi disabilitati ("*").
    """
    interfaces = []
    for line in output.splitlines():
        name = line.strip()
        if not name or name.startswith(LIST_HEADER_PREFIX):
            continue
        if name.startswith(DISABLED_MARKER) or name.endswith(DISABLED_MARKER):
            continue
        interfaces.append(name)
    return interfaces


def list_interfaces(runner: ProcessRunner) -> list[str]:
    """
    Ritorna i servizi di rete attivi nell'ordine fornito dal sistema.
    Senza questa lista l'app non può funzionare: InterfaceError.
    """
    code, output = runner.run(NETWORKSETUP, ["-listallnetworkservices"])
    if code != 0:
        raise InterfaceError(
            f"Impossibile elencare le interfacce di rete (exit {code}): {output.strip()}"
        )
    return parse_interfaces(output)


def resolve_active(catalog: Catalog, available: list[str]) -> tuple[str, bool]:
    """
    Ritorna (interfaccia attiva, da salvare).
    Se l'interfaccia salvata non esiste più si passa alla prima disponibile
    e il catalogo viene aggiornato: il chiamante deve salvarlo.
    """
    if catalog.interface in available:
        return catalog.interface, False

    if not available:
        raise InterfaceError("Nessuna interfaccia di rete disponibile")

    fallback = available[0]
    logger.info(
        "[NET] Interfaccia '%s' non disponibile, uso '%s'", catalog.interface, fallback
    )
    catalog.interface = fallback
    return fallback, True


# =========================
# LETTURA DNS CORRENTE
# =========================

def parse_servers(output: str) -> list[str]:
    servers = []
    for line in output.splitlines():
        server = line.strip()
        if not server:
            continue
        # nessun server impostato = DNS del DHCP
        if server.startswith(NO_DNS_SERVERS_PREFIX):
            return []
        servers.append(server)
    return servers


def current_servers(runner: ProcessRunner, interface: str) -> list[str]:
    """
    DNS attualmente configurati sull'interfaccia, nell'ordine del sistema.
    Un errore non è fatale: lista vuota = stato sconosciuto.
    """
    code, output = runner.run(NETWORKSETUP, ["-getdnsservers", interface])
    if code != 0:
        logger.warning(
            "[DNS] Lettura DNS fallita su '%s' (exit %d): %s", interface, code, output.strip()
        )
        return []
    return parse_servers(output)


def matching_profile(catalog: Catalog, servers: list[str]) -> Profile | None:
    """
    Primo profilo (ordine del file) con esattamente gli stessi server.
    """
    if not servers:
        return None
    for profile in catalog.profiles:
        if profile.servers == servers:
            return profile
    return None
