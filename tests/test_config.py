import logging

import pytest

from kubevip import config
from kubevip.config import (
    AUTO,
    Config,
    EtcdSettings,
    InterfaceError,
    KubernetesLeaderElection,
    LoadBalancer,
    Port,
    validate_interface,
)


def _make_iface(base, name, state=None):
    path = base / name
    path.mkdir()
    if state is not None:
        (path / "operstate").write_text(state + "\n")
    return path


def test_config_defaults_are_independent():
    first = Config()
    second = Config()
    first.load_balancers.append(LoadBalancer(name="a", ports=[Port("TCP", 80)]))
    first.leader_election.lease_annotations["k"] = "v"
    assert second.load_balancers == []
    assert second.leader_election.lease_annotations == {}
    assert second.interface == ""
    assert second.leader_election == KubernetesLeaderElection()
    assert second.etcd == EtcdSettings()


def test_load_balancer_holds_ports():
    lb = LoadBalancer(name="svc", ports=[Port(type="UDP", port=53)], bind_to_vip=True)
    assert lb.ports[0].type == "UDP"
    assert lb.ports[0].port == 53
    assert lb.bind_to_vip is True
    assert lb.forwarding_method == ""


def test_validate_auto_needs_no_interface(tmp_path):
    assert validate_interface(AUTO, str(tmp_path)) is None


def test_validate_up_interface(tmp_path):
    _make_iface(tmp_path, "eth0", "up")
    assert validate_interface("eth0", str(tmp_path)) == "up"


def test_validate_down_interface_raises(tmp_path):
    _make_iface(tmp_path, "eth1", "down")
    with pytest.raises(InterfaceError, match="eth1 is not up"):
        validate_interface("eth1", str(tmp_path))


def test_validate_missing_interface_raises(tmp_path):
    with pytest.raises(InterfaceError, match="get nothere0 failed"):
        validate_interface("nothere0", str(tmp_path))


def test_validate_unknown_state_warns(tmp_path, caplog):
    _make_iface(tmp_path, "lo", "unknown")
    with caplog.at_level(logging.WARNING, logger="kubevip.config"):
        state = validate_interface("lo", str(tmp_path))
    assert state == "unknown"
    assert "unknown" in caplog.text
    assert "lo" in caplog.text


def test_check_interface_wraps_error(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "SYS_CLASS_NET", str(tmp_path))
    _make_iface(tmp_path, "eth0", "up")
    cfg = Config(interface="eth0", services_interface="missing0")
    with pytest.raises(InterfaceError) as info:
        cfg.check_interface()
    assert str(info.value).startswith("missing0 is not valid interface, reason:")


def test_check_interface_recovers_when_brought_up(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "SYS_CLASS_NET", str(tmp_path))
    iface = _make_iface(tmp_path, "eth2", "down")
    cfg = Config(interface="eth2", services_interface=AUTO)
    with pytest.raises(InterfaceError, match="eth2 is not up"):
        cfg.check_interface()
    (iface / "operstate").write_text("up\n")
    assert cfg.check_interface() is None
    assert validate_interface("eth2") == "up"


def test_check_interface_missing_primary(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "SYS_CLASS_NET", str(tmp_path))
    cfg = Config(interface="ghost0")
    with pytest.raises(InterfaceError, match="ghost0 is not valid interface"):
        cfg.check_interface()