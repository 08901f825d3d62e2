"""Virtual IP helpers: iptables parsing and version detection, service addresses, IPVS settings."""

__version__ = "1.0.0"