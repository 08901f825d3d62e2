"""Kubernetes LoadBalancer services and the virtual IPs that serve them."""

from __future__ import annotations

import ipaddress
import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional, Union

from kubevip.config import (
    AUTO,
    HW_ADDR_KEY,
    LOADBALANCER_HOSTNAME,
    LOADBALANCER_IP_ANNOTATION,
    REQUESTED_IP,
    RP_FILTER,
    Config,
    LoadBalancer,
    Port,
)

logger = logging.getLogger(__name__)

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]

DEFAULT_RP_FILTER = "0"
_INTEGER_RE = re.compile(r"[+-]?[0-9]+", re.ASCII)


@dataclass
class ServicePort:
    """A port exposed by a service."""

    port: int
    protocol: str = "TCP"


@dataclass
class Service:
    """The parts of a Kubernetes service that virtual IP handling needs."""

    name: str
    namespace: str = ""
    uid: str = ""
    annotations: Optional[dict[str, str]] = None
    ports: list[ServicePort] = field(default_factory=list)
    load_balancer_ip: str = ""
    ingress_ips: list[str] = field(default_factory=list)


@dataclass
class Instance:
    """Everything needed to manage the virtual IPs of one service."""

    service_snapshot: Service
    vip_configs: list[Config] = field(default_factory=list)
    is_dhcp: bool = False
    dhcp_interface: str = ""
    dhcp_interface_hwaddr: str = ""
    dhcp_interface_ip: str = ""
    dhcp_hostname: str = ""
    upnp_gateway_ips: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        annotations = self.service_snapshot.annotations
        if annotations is None:
            return
        if not self.dhcp_interface_hwaddr:
            self.dhcp_interface_hwaddr = annotations.get(HW_ADDR_KEY, "")
        if not self.dhcp_interface_ip:
            self.dhcp_interface_ip = annotations.get(REQUESTED_IP, "")
        if not self.dhcp_hostname:
            self.dhcp_hostname = annotations.get(LOADBALANCER_HOSTNAME, "")


def _parse_ip(text: str) -> Optional[IPAddress]:
    try:
        address = ipaddress.ip_address(text)
    except ValueError:
        return None
    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped is not None:
        return address.ipv4_mapped
    return address


def _is_ipv4(text: str) -> bool:
    return isinstance(_parse_ip(text), ipaddress.IPv4Address)


def fetch_load_balancer_ingress_addresses(service: Service) -> list[str]:
    """Non-empty IP addresses from the service's load balancer status."""
    return [ip for ip in service.ingress_ips if ip]


def fetch_service_addresses(service: Service) -> list[str]:
    """Addresses for a service.

    The loadbalancerIPs annotation wins; then the status addresses, unless
    one of them conflicts with the requested loadBalancerIP of the same
    family, in which case the requested address is used.
    """
    if service.annotations is not None and LOADBALANCER_IP_ANNOTATION in service.annotations:
        value = service.annotations[LOADBALANCER_IP_ANNOTATION]
        return [ip.strip() for ip in value.split(",")]

    status_addresses = list(service.ingress_ips)
    requested = service.load_balancer_ip
    requested_ip = _parse_ip(requested)
    requested_is_v4 = _is_ipv4(requested)

    if status_addresses:
        for address in status_addresses:
            status_ip = _parse_ip(address)
            if (
                status_ip is not None
                and requested_ip is not None
                and _is_ipv4(address) == requested_is_v4
                and requested_ip != status_ip
            ):
                return [requested]
        return status_addresses

    if requested:
        return [requested]
    return []


def find_service_instance(service: Service, instances: Iterable[Instance]) -> Optional[Instance]:
    """The instance whose service has the same UID, or None."""
    logger.debug("finding service UID=%s", service.uid)
    for instance in instances:
        if instance.service_snapshot.uid == service.uid:
            return instance
    return None


def resolve_subnet(address: str, vip_subnet: str) -> str:
    """Prefix length for a VIP from a ``"<ipv4>,<ipv6>"`` subnet setting.

    Defaults are 32 for IPv4 and 128 for IPv6. Automatic discovery needs the
    host's interface addresses and is rejected here.
    """
    cidrs = [part.strip() for part in vip_subnet.split(",")]
    if _is_ipv4(address):
        if cidrs[0] == AUTO:
            raise ValueError(
                f"auto subnet discovery needs interface addresses for {address}"
            )
        return cidrs[0] if cidrs[0] else "32"
    if len(cidrs) > 1 and cidrs[1] == AUTO:
        raise ValueError(
            f"auto subnet discovery needs interface addresses for {address}"
        )
    if len(cidrs) > 1 and cidrs[1]:
        return cidrs[1]
    return "128"


def rp_filter_setting(annotations: Optional[Mapping[str, str]]) -> str:
    """The rp_filter value for a DHCP interface: the annotation if 0-2, else 0."""
    if not annotations:
        return DEFAULT_RP_FILTER
    value = annotations.get(RP_FILTER, "")
    if not value:
        return DEFAULT_RP_FILTER
    if not _INTEGER_RE.fullmatch(value):
        logger.error("[DHCP] unable to process rp_filter value %r", value)
        return DEFAULT_RP_FILTER
    number = int(value)
    if 0 <= number < 3:
        return value
    logger.error("[DHCP] rp_filter value not within range 0-2: %d", number)
    return DEFAULT_RP_FILTER


def build_load_balancer(service: Service) -> LoadBalancer:
    """Load balancer settings covering every port of a service."""
    return LoadBalancer(
        name=f"{service.name}-load-balancer",
        ports=[Port(type=p.protocol, port=p.port) for p in service.ports],
        bind_to_vip=True,
    )