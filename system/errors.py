"""
Gerarchia delle eccezioni del core.

- FatalError: l'applicazione non può proseguire e deve chiudersi
- tutto il resto viene gestito come valore di ritorno (es. ActivationResult)
"""


class DnsSwitcherError(RuntimeError):
    """Errore base dell'applicazione."""


class FatalError(DnsSwitcherError):
    """Condizione non recuperabile: la UI mostra il messaggio e termina."""


class ConfigError(FatalError):
    """File di configurazione mancante, illeggibile o non scrivibile."""


class InterfaceError(FatalError):
    """Impossibile ottenere un'interfaccia di rete utilizzabile."""


class ProcessLaunchError(FatalError):
    def __init__(self, command: str, reason: str):
        super().__init__(f"Impossibile avviare '{command}': {reason}")
        self.command = command
        self.reason = reason
