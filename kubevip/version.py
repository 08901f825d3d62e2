"""Detection of the installed iptables version and backend."""

from __future__ import annotations

import re
import subprocess
from dataclasses import dataclass

_VERSION_RE = re.compile(r"v([0-9]+)\.([0-9]+)\.([0-9]+)", re.ASCII)
_KUBE_MARKERS = ("KUBE-IPTABLES", "KUBE-KUBELET")


@dataclass(frozen=True)
class Version:
    """An iptables version with the backend in use."""

    major: int
    minor: int
    patch: int
    backend_mode: str = ""

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def compare(self, other: Version) -> int:
        """Negative, zero or positive as this version is older, equal or newer."""
        if self.major != other.major:
            return self.major - other.major
        if self.minor != other.minor:
            return self.minor - other.minor
        return self.patch - other.patch


def parse_version(text: str) -> Version:
    """Find a ``vX.Y.Z`` version in text."""
    match = _VERSION_RE.search(text)
    if match is None:
        raise ValueError(f"invalid version string: {text}")
    return Version(int(match.group(1)), int(match.group(2)), int(match.group(3)))


def _has_kube_rules(*dumps: str) -> bool:
    return any(marker in dump for dump in dumps for marker in _KUBE_MARKERS)


def detect_backend_mode(nft4: str, nft6: str, legacy4: str, legacy6: str) -> str:
    """Choose ``nft`` or ``legacy`` from the output of the save commands.

    The backend holding Kubernetes rules wins; otherwise the one with more
    lines, with ties going to ``nft``.
    """
    if _has_kube_rules(nft4, nft6):
        return "nft"
    if _has_kube_rules(legacy4, legacy6):
        return "legacy"
    nft_count = nft4.count("\n") + nft6.count("\n")
    legacy_count = legacy4.count("\n") + legacy6.count("\n")
    return "nft" if nft_count >= legacy_count else "legacy"


def _get_output(name: str) -> str:
    try:
        result = subprocess.run(
            [name],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
        )
    except OSError:
        return ""
    return result.stdout


def get_version() -> Version:
    """Query ``iptables --version`` and detect which backend is active."""
    try:
        result = subprocess.run(
            ["iptables", "--version"],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        raise RuntimeError(f"run cmd 'iptables --version' with error: {exc}") from exc

    version = parse_version(result.stdout)
    mode = detect_backend_mode(
        _get_output("iptables-nft-save"),
        _get_output("ip6tables-nft-save"),
        _get_output("iptables-legacy-save"),
        _get_output("ip6tables-legacy-save"),
    )
    return Version(version.major, version.minor, version.patch, mode)