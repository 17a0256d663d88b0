from __future__ import annotations

import subprocess


class StatusQueryError(RuntimeError):
    def __init__(self, message: str, exit_code: int | None = None, stderr: str = ""):
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr = stderr


class WireGuardStatusSource:
    def __init__(self, wg: str = "wg", timeout: float | None = None):
        self.wg = wg
        self.timeout = timeout

    def latest_handshakes(self, interface: str) -> str:
        cmd = [self.wg, "show", interface, "latest-handshakes"]
        try:
            proc = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            raise StatusQueryError(f"failed to run `{self.wg} show`: {exc}") from exc
        if proc.returncode != 0:
            stderr = proc.stderr.decode("utf-8", errors="replace").strip()
            raise StatusQueryError(
                f"`{self.wg} show` returned {proc.returncode}",
                exit_code=proc.returncode,
                stderr=stderr,
            )
        return proc.stdout.decode("utf-8", errors="replace")
