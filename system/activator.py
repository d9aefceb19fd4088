import logging
from dataclasses import dataclass
from enum import Enum

from config.config_store import Profile
from system.errors import ProcessLaunchError
from system.network import NETWORKSETUP
from system.process import ProcessRunner

logger = logging.getLogger(__name__)

# exit code convenzionale per "comando non trovato"
LAUNCH_FAILED_EXIT_CODE = 127
# output non decodificabile come UTF-8 (EX_DATAERR)
INVALID_OUTPUT_EXIT_CODE = 65


class ActivationStatus(Enum):
    SUCCESS = "success"
    PRE_COMMAND_FAILED = "pre_command_failed"
    DNS_CHANGE_FAILED = "dns_change_failed"


@dataclass(frozen=True)
class ActivationResult:
    """Esito dell'attivazione di un profilo."""
    status: ActivationStatus
    profile_name: str
    exit_code: int = 0
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.status is ActivationStatus.SUCCESS


class ProfileActivator:
    def __init__(self, runner: ProcessRunner):
        self.runner = runner

    def _run_pre_command(self, load_cmd: str) -> tuple[int, str]:
        # split semplice sugli spazi, niente quoting da shell
        command, *args = load_cmd.split()
        try:
            return self.runner.run(command, args)
        except ProcessLaunchError as exc:
            return LAUNCH_FAILED_EXIT_CODE, exc.reason
        except UnicodeDecodeError as exc:
            return INVALID_OUTPUT_EXIT_CODE, f"Output non valido: {exc}"

    def activate(self, profile: Profile, interface: str) -> ActivationResult:
        """
        1. esegue load_cmd (se presente): se fallisce si ferma qui
        2. imposta i DNS del profilo sull'interfaccia, nell'ordine dato
        Il catalogo non viene modificato e non c'è rollback.
        """
        if profile.load_cmd and profile.load_cmd.strip():
            logger.info("[DNS] Pre-comando per '%s': %s", profile.name, profile.load_cmd)
            code, output = self._run_pre_command(profile.load_cmd)
            if code != 0:
                logger.error(
                    "[DNS] Pre-comando fallito per '%s' (exit %d): %s",
                    profile.name, code, output.strip()
                )
                return ActivationResult(
                    ActivationStatus.PRE_COMMAND_FAILED, profile.name, code, output
                )

        # networksetup assente = ambiente non valido: ProcessLaunchError si propaga
        code, output = self.runner.run(
            NETWORKSETUP, ["-setdnsservers", interface, *profile.servers]
        )
        if code != 0:
            logger.error(
                "[DNS] Cambio DNS fallito per '%s' (exit %d): %s",
                profile.name, code, output.strip()
            )
            return ActivationResult(
                ActivationStatus.DNS_CHANGE_FAILED, profile.name, code, output
            )

        logger.info(
            "[DNS] Profilo '%s' attivo su %s: %s",
            profile.name, interface, ", ".join(profile.servers)
        )
        return ActivationResult(ActivationStatus.SUCCESS, profile.name, code, output)
