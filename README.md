# kubevip

Building blocks for managing virtual IP addresses and load balancers on Linux
hosts. The package uses only the standard library.

## Modules

- `kubevip.iptables_rules` — helpers for iptables with no side effects:
  - `Protocol` (`IPV4`, `IPV6`) and `iptables_command(proto, nftables)`, which
    names the binary to use (`iptables-legacy`, `iptables-nft`,
    `ip6tables-legacy` or `ip6tables-nft`).
  - `extract_iptables_version(text)` returns `(major, minor, patch, mode)`
    from `iptables --version` output; the mode defaults to `"legacy"`.
  - `command_support(v1, v2, v3)` reports `has_check`, `has_wait`,
    `wait_support_second` and `has_random_fully` for a version.
  - `parse_stats_lines(lines, ipv6)` splits `-L -n -v -x` output into rows of
    ten fields, and `parse_stat(row)` turns a row into a `Stat` dataclass.
  - `parse_chain_names(rules)`, `filter_rule_output(rule)` and
    `get_rule_specification(rule, specification)` work on `-S` output.
- `kubevip.lock` — `XtablesLock`, a best-effort, non-blocking lock on the
  xtables lock file (`/var/run/xtables.lock` by default). `try_lock()` returns
  `False` if another holder has the lock; `unlock()` closes the file. It can
  be used as a context manager.
- `kubevip.version` — `Version` (with `compare()`), `parse_version(text)`,
  `detect_backend_mode(nft4, nft6, legacy4, legacy6)` and `get_version()`,
  which runs `iptables --version` and the `*-save` commands to decide whether
  the host uses the `nft` or `legacy` backend.
- `kubevip.config` — the `Config` dataclass with `Port`, `LoadBalancer`,
  `EtcdSettings` and `KubernetesLeaderElection`; the service annotation keys
  (`LOADBALANCER_IP_ANNOTATION`, `RP_FILTER`, `HW_ADDR_KEY`, …); and
  interface checks: `validate_interface(name, sys_class_net)` reads the
  interface's `operstate` under `/sys/class/net`, and `Config.check_interface()`
  checks `interface` and `services_interface`. Failures raise `InterfaceError`.
- `kubevip.services` — `Service`, `ServicePort` and `Instance`, with
  `fetch_service_addresses`, `fetch_load_balancer_ingress_addresses`,
  `find_service_instance`, `resolve_subnet`, `rp_filter_setting` and
  `build_load_balancer`.
- `kubevip.ipvs` — `AddressFamily`, `ForwardMethod`, `ip_and_family(address)`
  and `parse_forwarding_method(name)` (unknown names fall back to `LOCAL`).

## Examples

```python
from kubevip.iptables_rules import parse_stat, parse_stats_lines

lines = [
    "Chain INPUT (policy ACCEPT 0 packets, 0 bytes)",
    "    pkts      bytes target     prot opt in     out     source               destination",
    "      12     1024 ACCEPT     tcp  --  *      *       0.0.0.0/0            0.0.0.0/0            tcp dpt:6443",
]
for row in parse_stats_lines(lines, ipv6=False):
    stat = parse_stat(row)
    print(stat.target, stat.packets, stat.bytes, stat.options)
```

```python
from kubevip.services import Service, fetch_service_addresses, resolve_subnet

svc = Service(name="web", annotations={"kube-vip.io/loadbalancerIPs": "10.0.0.5, fd00::5"})
for address in fetch_service_addresses(svc):
    print(address, resolve_subnet(address, "24,64"))
```

```python
from kubevip.ipvs import ip_and_family, parse_forwarding_method

address, family = ip_and_family("192.168.0.20")
method = parse_forwarding_method("Masquerade")
```

## What the package does not do

- It does not add, check or delete iptables rules or chains; it only parses
  iptables output and detects the installed version and backend.
- It does not program IPVS in the kernel, run backend health checks, create
  macvlan interfaces or run a DHCP client.
- It does not talk to the Kubernetes API or to etcd, and `resolve_subnet`
  rejects `auto` subnet discovery because it does not read interface
  addresses.
- It has no command-line program.

## Tests

The tests use pytest; install the `test` extra to get it.