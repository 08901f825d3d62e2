"""Settings for virtual IPs and load balancers, and service annotations."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

AUTO = "auto"

SYS_CLASS_NET = "/sys/class/net"

# Hardware address of the host that has the VIP
HW_ADDR_KEY = "kube-vip.io/hwaddr"
# The IP address that is requested
REQUESTED_IP = "kube-vip.io/requestedIP"
# The host that has the VIP
VIP_HOST = "kube-vip.io/vipHost"
# Enable egress on a service
EGRESS = "kube-vip.io/egress"
# Enable internal egress
EGRESS_INTERNAL = "kube-vip.io/egress-internal"
# Egress should be IPv6
EGRESS_IPV6 = "kube-vip.io/egress-ipv6"
# Ports that traffic is allowed to access from the egress VIP
EGRESS_DESTINATION_PORTS = "kube-vip.io/egress-destination-ports"
# Allowed incoming ports to the VIP
EGRESS_SOURCE_PORTS = "kube-vip.io/egress-source-ports"
# Networks the egress is enabled for
EGRESS_ALLOWED_NETWORKS = "kube-vip.io/egress-allowed-networks"
# Networks that are excluded from egress
EGRESS_DENIED_NETWORKS = "kube-vip.io/egress-denied-networks"
# The current active endpoint (pod) for the egress VIP
ACTIVE_ENDPOINT = "kube-vip.io/active-endpoint"
# The current active endpoint (pod) for the egress VIP (IPv6)
ACTIVE_ENDPOINT_IPV6 = "kube-vip.io/active-endpoint-ipv6"
# Flush conntrack entries once egress is configured
FLUSH_CONNTRACK = "kube-vip.io/flush-conntrack"

LOADBALANCER_IP_ANNOTATION = "kube-vip.io/loadbalancerIPs"
LOADBALANCER_HOSTNAME = "kube-vip.io/loadbalancerHostname"
SERVICE_INTERFACE = "kube-vip.io/serviceInterface"
UPNP_ENABLED = "kube-vip.io/forwardUPNP"
# Return path filter for a specific service interface
RP_FILTER = "kube-vip.io/rp_filter"


class InterfaceError(ValueError):
    """A network interface is missing or not ready for traffic."""


@dataclass
class Port:
    """A frontend port of a load balancer."""

    type: str = ""
    port: int = 0


@dataclass
class LoadBalancer:
    """Configuration of one load balancing instance."""

    name: str = ""
    ports: list[Port] = field(default_factory=list)
    bind_to_vip: bool = False
    forwarding_method: str = ""


@dataclass
class EtcdSettings:
    """Connection settings for an etcd client."""

    ca_file: str = ""
    client_cert_file: str = ""
    client_key_file: str = ""
    endpoints: list[str] = field(default_factory=list)


@dataclass
class KubernetesLeaderElection:
    """Settings for leader election through Kubernetes leases."""

    enable_leader_election: bool = False
    lease_name: str = ""
    lease_duration: int = 0
    renew_deadline: int = 0
    retry_period: int = 0
    lease_annotations: dict[str, str] = field(default_factory=dict)


def _read_operstate(path: str) -> str:
    try:
        with open(os.path.join(path, "operstate"), encoding="ascii") as handle:
            return handle.read().strip()
    except FileNotFoundError:
        return "unknown"


def validate_interface(name: str, sys_class_net: str | None = None) -> str | None:
    """Check that an interface exists and is up; return its operational state.

    ``auto`` is always accepted and gives None. An interface whose state is
    unknown is accepted with a warning.
    """
    if name == AUTO:
        return None
    base = SYS_CLASS_NET if sys_class_net is None else sys_class_net
    path = os.path.join(base, name)
    if not os.path.isdir(path):
        raise InterfaceError(f"get {name} failed, error: no such network interface")
    state = _read_operstate(path)
    if state == "unknown":
        logger.warning(
            "the status of the interface %s is unknown. Ensure your interface is "
            "ready to accept traffic, if so you can safely ignore this message",
            name,
        )
    elif state != "up":
        raise InterfaceError(f"{name} is not up")
    return state


@dataclass
class Config:
    """All settings for a virtual IP and its advertisement."""

    logging: int = 0
    enable_arp: bool = False
    enable_bgp: bool = False
    enable_wireguard: bool = False
    enable_routing_table: bool = False
    enable_control_plane: bool = False
    detect_control_plane: bool = False
    kubernetes_addr: str = ""
    enable_services: bool = False
    enable_services_election: bool = False
    enable_node_labeling: bool = False
    load_balancer_class_only: bool = False
    load_balancer_class_name: str = ""
    load_balancer_class_legacy_handling: bool = False
    enable_service_security: bool = False
    arp_broadcast_rate: int = 0
    annotations: str = ""
    leader_election_type: str = ""
    leader_election: KubernetesLeaderElection = field(
        default_factory=KubernetesLeaderElection
    )
    etcd: EtcdSettings = field(default_factory=EtcdSettings)
    add_peers_as_backends: bool = False
    vip: str = ""
    vip_subnet: str = ""
    address: str = ""
    port: int = 0
    namespace: str = ""
    service_namespace: str = ""
    ddns: bool = False
    node_name: str = ""
    single_node: bool = False
    start_as_leader: bool = False
    interface: str = ""
    services_interface: str = ""
    enable_load_balancer: bool = False
    load_balancer_port: int = 0
    load_balancer_forwarding_method: str = ""
    routing_table_id: int = 0
    routing_table_type: int = 0
    routing_protocol: int = 0
    clean_routing_table: bool = False
    bgp_peers: list[str] = field(default_factory=list)
    load_balancers: list[LoadBalancer] = field(default_factory=list)
    prometheus_http_server: str = ""
    egress_pod_cidr: str = ""
    egress_service_cidr: str = ""
    egress_with_nftables: bool = False
    services_lease_name: str = ""
    k8s_config_file: str = ""
    dns_mode: str = ""
    disable_service_updates: bool = False
    enable_endpoints: bool = False
    mirror_dest_interface: str = ""
    iptables_backend: str = ""
    backend_health_check_interval: int = 0
    lo_interface_global_scope: bool = False
    health_check_port: int = 0
    enable_upnp: bool = False
    egress_clean: bool = False

    def check_interface(self) -> None:
        """Validate the VIP interface and the services interface, if set."""
        for name in (self.interface, self.services_interface):
            if not name:
                continue
            try:
                validate_interface(name)
            except InterfaceError as exc:
                raise InterfaceError(
                    f"{name} is not valid interface, reason: {exc}"
                ) from exc