"""Pure helpers for iptables command selection and output parsing."""

from __future__ import annotations

import ipaddress
import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, NamedTuple, Sequence, Union

IPNetwork = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]

TABLE_FILTER = "filter"
TABLE_MANGLE = "mangle"
TABLE_NAT = "nat"
CHAIN_INPUT = "INPUT"
CHAIN_PREROUTING = "PREROUTING"
CHAIN_POSTROUTING = "POSTROUTING"

_VERSION_RE = re.compile(r"v([0-9]+)\.([0-9]+)\.([0-9]+)(?:\s+\((\w+))?", re.ASCII)
_COUNTER_RE = re.compile(r"^\[([0-9]+):([0-9]+)\] ")
_UINT64_LIMIT = 1 << 64


class Protocol(IntEnum):
    """IP family handled by an iptables command."""

    IPV4 = 0
    IPV6 = 1


@dataclass(frozen=True)
class Stat:
    """A structured statistics row from ``iptables -L -n -v -x``."""

    packets: int
    bytes: int
    target: str
    protocol: str
    opt: str
    input: str
    output: str
    source: IPNetwork
    destination: IPNetwork
    options: str


class _CommandSupport(NamedTuple):
    has_check: bool
    has_wait: bool
    wait_support_second: bool
    has_random_fully: bool


def _parse_uint(text: str) -> int:
    if not text or text != text.strip() or text[0] in "+-":
        raise ValueError(f"invalid unsigned integer: {text!r}")
    if len(text) > 1 and text[0] == "0" and text[1].isdigit():
        value = int(text[1:], 8)
    else:
        value = int(text, 0)
    if value >= _UINT64_LIMIT:
        raise ValueError(f"value out of range: {text!r}")
    return value


def _parse_cidr(text: str) -> IPNetwork:
    if "/" not in text:
        raise ValueError(f"invalid CIDR address: {text}")
    return ipaddress.ip_network(text, strict=False)


def _is_ip_or_cidr(text: str) -> bool:
    try:
        if "/" in text:
            ipaddress.ip_network(text, strict=False)
        else:
            ipaddress.ip_address(text)
    except ValueError:
        return False
    return True


def _append_subnet(addr: str) -> str:
    if "/" in addr:
        return addr
    if "." not in addr:
        return addr + "/128"
    return addr + "/32"


def parse_stat(stat: Sequence[str]) -> Stat:
    """Turn one row returned by :func:`parse_stats_lines` into a :class:`Stat`."""
    if len(stat) < 10:
        raise ValueError("stat contained fewer fields than expected")
    try:
        packets = _parse_uint(stat[0])
    except ValueError as exc:
        raise ValueError(f"could not parse packets: {exc}") from exc
    try:
        byte_count = _parse_uint(stat[1])
    except ValueError as exc:
        raise ValueError(f"could not parse bytes: {exc}") from exc
    try:
        source = _parse_cidr(stat[7])
    except ValueError as exc:
        raise ValueError(f"could not parse source: {exc}") from exc
    try:
        destination = _parse_cidr(stat[8])
    except ValueError as exc:
        raise ValueError(f"could not parse destination: {exc}") from exc
    return Stat(
        packets=packets,
        bytes=byte_count,
        target=stat[2],
        protocol=stat[3],
        opt=stat[4],
        input=stat[5],
        output=stat[6],
        source=source,
        destination=destination,
        options=stat[9],
    )


def parse_stats_lines(lines: Iterable[str], ipv6: bool) -> list[list[str]]:
    """Split verbose listing output into rows of ten fields.

    The first two lines (chain name and header) are skipped. Source and
    destination get an explicit netmask, and trailing option words are joined
    into the tenth field.
    """
    rows: list[list[str]] = []
    for index, line in enumerate(lines):
        if index < 2:
            continue
        fields = line.split()
        if ipv6 and len(fields) > 6 and _is_ip_or_cidr(fields[6]):
            # ip6tables leaves the "opt" column blank, so it vanishes on split.
            fields = fields[:4] + ["  "] + fields[4:]
        if len(fields) < 9:
            raise ValueError(f"malformed statistics line: {line!r}")
        fields[7] = _append_subnet(fields[7])
        fields[8] = _append_subnet(fields[8])
        rows.append(fields[:9] + [" ".join(fields[9:])])
    return rows


def parse_chain_names(rules: Iterable[str]) -> list[str]:
    """Collect chain names from the leading ``-P``/``-N`` lines of ``-S`` output."""
    chains: list[str] = []
    for rule in rules:
        if not (rule.startswith("-P") or rule.startswith("-N")):
            break
        chains.append(rule.split()[1])
    return chains


def iptables_command(proto: Protocol, nftables: bool) -> str:
    """Name of the iptables binary for a family and backend."""
    if proto == Protocol.IPV6:
        return "ip6tables-nft" if nftables else "ip6tables-legacy"
    return "iptables-nft" if nftables else "iptables-legacy"


def extract_iptables_version(text: str) -> tuple[int, int, int, str]:
    """Find the version and operating mode in ``iptables --version`` output."""
    match = _VERSION_RE.search(text)
    if match is None:
        raise ValueError(f"no iptables version found in string: {text}")
    mode = match.group(4) or "legacy"
    return int(match.group(1)), int(match.group(2)), int(match.group(3)), mode


def command_support(v1: int, v2: int, v3: int) -> _CommandSupport:
    """Which optional iptables features a version provides.

    ``--check`` arrived in 1.4.11, ``--wait`` in 1.4.20, a seconds argument to
    ``--wait`` in 1.6.0 and ``--random-fully`` in 1.6.2.
    """
    version = (v1, v2, v3)
    return _CommandSupport(
        has_check=version >= (1, 4, 11),
        has_wait=version >= (1, 4, 20),
        wait_support_second=(v1, v2) >= (1, 6),
        has_random_fully=version >= (1, 6, 2),
    )


def filter_rule_output(rule: str) -> str:
    """Rewrite nftables-mode counter prefixes into ``-c`` arguments."""
    match = _COUNTER_RE.match(rule)
    if match is None:
        return rule
    rest = rule[match.end():]
    return f"{rest} -c {match.group(1)} {match.group(2)}"


def get_rule_specification(rule: str, specification: str) -> str:
    """Value following ``specification`` in a rule, or an empty string."""
    parts = rule.split(" ")
    for part, following in zip(parts, parts[1:]):
        if part == specification:
            return following
    return ""