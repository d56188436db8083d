"""KAPE command-line construction."""

from pathlib import Path


def build_collector_args(
    source: str,
    destination: Path | str,
    target: str,
    hostname: str,
    stealth: bool = True,
) -> list[str]:
    """Build the KAPE argument vector for a triage acquisition.

    The destination is passed as a single argument; quoting is left to the
    process launcher.

    Args:
        source: Volume to acquire from, e.g. ``C:``
        destination: Case folder receiving the VHDX container
        target: KAPE target profile, e.g. ``!SANS_Triage``
        hostname: Acquired host, used as the VHDX container name
        stealth: Omit ``--gui`` so nothing is shown on the console

    Returns:
        Argument list excluding the executable itself
    """
    args = [
        "--tsource", source,
        "--tdest", str(destination),
        "--target", target,
        "--vhdx", hostname,
        "--zv", "false",
    ]
    if not stealth:
        args.append("--gui")
    return args
