import subprocess

from system.errors import ProcessLaunchError


class ProcessRunner:
    """
    Unico punto di accesso ai processi esterni.
    Nei test viene sostituito da un fake che non avvia nulla.
    """

    def run(self, command: str, args: list[str]) -> tuple[int, str]:
        """
        Esegue il comando senza shell e attende la fine.
        Ritorna (exit code, stdout + stderr).
        Un exit code diverso da zero NON solleva eccezioni.
        """
        try:
            result = subprocess.run(
                [command, *args],
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
            )
        except OSError as exc:
            raise ProcessLaunchError(command, exc.strerror or str(exc)) from exc

        # byte non UTF-8: errore bloccante della chiamata
        output = result.stdout.decode("utf-8")
        return result.returncode, output
