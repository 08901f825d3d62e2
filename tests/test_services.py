import pytest

from kubevip.config import (
    HW_ADDR_KEY,
    LOADBALANCER_HOSTNAME,
    LOADBALANCER_IP_ANNOTATION,
    REQUESTED_IP,
    RP_FILTER,
)
from kubevip.services import (
    Instance,
    Service,
    ServicePort,
    build_load_balancer,
    fetch_load_balancer_ingress_addresses,
    fetch_service_addresses,
    find_service_instance,
    resolve_subnet,
    rp_filter_setting,
)


def test_annotation_addresses_are_split_and_trimmed():
    svc = Service(
        name="web",
        annotations={LOADBALANCER_IP_ANNOTATION: "10.0.0.1, fd00::1 "},
        load_balancer_ip="10.0.0.9",
        ingress_ips=["10.0.0.7"],
    )
    assert fetch_service_addresses(svc) == ["10.0.0.1", "fd00::1"]


def test_status_addresses_used_when_matching_request():
    svc = Service(name="web", load_balancer_ip="10.0.0.5", ingress_ips=["10.0.0.5"])
    assert fetch_service_addresses(svc) == ["10.0.0.5"]


def test_conflicting_status_returns_requested_address():
    svc = Service(name="web", load_balancer_ip="10.0.0.5", ingress_ips=["10.0.0.6"])
    assert fetch_service_addresses(svc) == ["10.0.0.5"]


def test_status_of_other_family_is_kept():
    svc = Service(name="web", load_balancer_ip="10.0.0.5", ingress_ips=["fd00::1"])
    assert fetch_service_addresses(svc) == ["fd00::1"]


def test_requested_address_without_status():
    svc = Service(name="web", annotations={}, load_balancer_ip="10.0.0.5")
    assert fetch_service_addresses(svc) == ["10.0.0.5"]


def test_no_addresses():
    assert fetch_service_addresses(Service(name="web")) == []


def test_ingress_addresses_skip_empty():
    svc = Service(name="web", ingress_ips=["10.0.0.1", "", "fd00::2"])
    assert fetch_load_balancer_ingress_addresses(svc) == ["10.0.0.1", "fd00::2"]
    assert fetch_load_balancer_ingress_addresses(Service(name="x")) == []


def test_find_service_instance_by_uid():
    first = Instance(Service(name="a", uid="uid-a"))
    second = Instance(Service(name="b", uid="uid-b"))
    assert find_service_instance(Service(name="b", uid="uid-b"), [first, second]) is second
    assert find_service_instance(Service(name="c", uid="uid-c"), [first, second]) is None


@pytest.mark.parametrize(
    "address,subnet,expected",
    [
        ("10.0.0.1", "", "32"),
        ("fd00::1", "", "128"),
        ("10.0.0.1", "24", "24"),
        ("fd00::1", "24", "128"),
        ("fd00::1", "24,64", "64"),
        ("10.0.0.1", "24,64", "24"),
    ],
)
def test_resolve_subnet(address, subnet, expected):
    assert resolve_subnet(address, subnet) == expected


def test_resolve_subnet_auto_rejected():
    with pytest.raises(ValueError):
        resolve_subnet("10.0.0.1", "auto")
    with pytest.raises(ValueError):
        resolve_subnet("fd00::1", "24,auto")


@pytest.mark.parametrize(
    "annotations,expected",
    [
        (None, "0"),
        ({}, "0"),
        ({RP_FILTER: "1"}, "1"),
        ({RP_FILTER: "2"}, "2"),
        ({RP_FILTER: "3"}, "0"),
        ({RP_FILTER: "-1"}, "0"),
        ({RP_FILTER: "abc"}, "0"),
    ],
)
def test_rp_filter_setting(annotations, expected):
    assert rp_filter_setting(annotations) == expected


def test_build_load_balancer():
    svc = Service(
        name="web",
        ports=[ServicePort(80), ServicePort(53, "UDP")],
    )
    lb = build_load_balancer(svc)
    assert lb.name == "web-load-balancer"
    assert lb.bind_to_vip is True
    assert [(p.type, p.port) for p in lb.ports] == [("TCP", 80), ("UDP", 53)]


def test_instance_reads_dhcp_annotations():
    svc = Service(
        name="web",
        annotations={
            HW_ADDR_KEY: "00:00:5e:00:53:01",
            REQUESTED_IP: "192.0.2.10",
            LOADBALANCER_HOSTNAME: "web-host",
        },
    )
    inst = Instance(svc)
    assert inst.dhcp_interface_hwaddr == "00:00:5e:00:53:01"
    assert inst.dhcp_interface_ip == "192.0.2.10"
    assert inst.dhcp_hostname == "web-host"
    assert inst.is_dhcp is False


def test_instance_without_annotations_keeps_defaults():
    inst = Instance(Service(name="web"))
    assert inst.dhcp_interface_ip == ""
    assert inst.vip_configs == []