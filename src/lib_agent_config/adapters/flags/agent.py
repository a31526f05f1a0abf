"""The agent's command-line surface.

Purpose
-------
Register every agent flag once, at import time, and expose the parse entry
point the bootstrap calls with ``sys.argv[1:]``.

Contents
--------
* :data:`AGENT_FLAGS` – sealed :class:`FlagRegistry` with the agent flags.
* :func:`parse_flags` – parse an argument vector into :class:`Flags`.
* :func:`usage` – render the agent flag help text.
"""

from __future__ import annotations

from typing import Final, Sequence

from .registry import FlagKind, FlagRegistry, Flags

STRING, BOOL, INT, DURATION, LIST, MAP, PATH = (
    FlagKind.STRING,
    FlagKind.BOOL,
    FlagKind.INT,
    FlagKind.DURATION,
    FlagKind.LIST,
    FlagKind.MAP,
    FlagKind.PATH,
)


def _agent_flags() -> FlagRegistry:
    fs = FlagRegistry("agent")
    add = fs.add

    # command line flags ordered by flag name
    add(STRING, "advertise", "advertise_addr_lan", "Sets the advertise address to use.")
    add(STRING, "advertise-wan", "advertise_addr_wan", "Sets address to advertise on WAN instead of -advertise address.")
    add(STRING, "bind", "bind_addr", "Sets the bind address for cluster communication.")
    add(BOOL, "bootstrap", "bootstrap", "Sets server to bootstrap mode.")
    add(INT, "bootstrap-expect", "bootstrap_expect", "Sets server to expect bootstrap mode.")
    add(STRING, "client", "client_addr", "Sets the address to bind for client access. This includes RPC, DNS, HTTP and HTTPS (if configured).")
    add(PATH, "config-dir", None, "Path to a directory to read configuration files from. Files are read in alphabetical order. Can be specified multiple times.")
    add(PATH, "config-file", None, "Path to a file to read configuration from. Can be specified multiple times.")
    add(STRING, "data-dir", "data_dir", "Path to a data directory to store agent state.")
    add(STRING, "datacenter", "datacenter", "Datacenter of the agent.")
    add(BOOL, "dev", "dev_mode", "Starts the agent in development mode.")
    add(BOOL, "disable-host-node-id", "disable_host_node_id", "Setting this to true will prevent the agent from using information from the host to generate a node ID, and will cause it to generate a random node ID instead.")
    add(BOOL, "disable-keyring-file", "disable_keyring_file", "Disables the backing up of the keyring to a file.")
    add(INT, "dns-port", "ports.dns", "DNS port to use.")
    add(STRING, "domain", "dns_domain", "Domain to use for DNS interface.")
    add(BOOL, "enable-script-checks", "enable_script_checks", "Enables health check scripts.")
    add(STRING, "encrypt", "encrypt_key", "Provides the gossip encryption key.")
    add(INT, "http-port", "ports.http", "Sets the HTTP API port to listen on.")
    add(LIST, "join", "join_addrs_lan", "Address of an agent to join at start time. Can be specified multiple times.")
    add(LIST, "join-wan", "join_addrs_wan", "Address of an agent to join -wan at start time. Can be specified multiple times.")
    add(STRING, "log-level", "log_level", "Log level of the agent.")
    add(STRING, "node", "node_name", "Name of this node. Must be unique in the cluster.")
    add(STRING, "node-id", "node_id", "A unique ID for this node across space and time. Defaults to a randomly-generated ID that persists in the data-dir.")
    add(MAP, "node-meta", "node_meta", "An arbitrary metadata key/value pair for this node, of the format `key:value`. Can be specified multiple times.")
    add(BOOL, "non-voting-server", "non_voting_server", "Makes the server receive the data replication stream without participating in the Raft quorum.")
    add(STRING, "pid-file", "pid_file", "Path to file to store agent PID.")
    add(INT, "protocol", "rpc_protocol", "Sets the protocol version. Defaults to latest.")
    add(INT, "raft-protocol", "raft_protocol", "Sets the Raft protocol version. Defaults to latest.")
    add(LIST, "recursor", "dns_recursors", "Address of an upstream DNS server. Can be specified multiple times.")
    add(BOOL, "rejoin", "rejoin_after_leave", "Ignores a previous leave and attempts to rejoin the cluster.")
    add(DURATION, "retry-interval", "retry_join_interval_lan", "Time to wait between join attempts.")
    add(DURATION, "retry-interval-wan", "retry_join_interval_wan", "Time to wait between join -wan attempts.")
    add(LIST, "retry-join", "retry_join_lan", "Address of an agent to join at start time with retries enabled. Can be specified multiple times.")
    add(LIST, "retry-join-wan", "retry_join_wan", "Address of an agent to join -wan at start time with retries enabled. Can be specified multiple times.")
    add(INT, "retry-max", "retry_join_max_attempts_lan", "Maximum number of join attempts. Defaults to 0, which will retry indefinitely.")
    add(INT, "retry-max-wan", "retry_join_max_attempts_wan", "Maximum number of join -wan attempts. Defaults to 0, which will retry indefinitely.")
    add(STRING, "serf-lan-bind", "serf_bind_addr_lan", "Address to bind Serf LAN listeners to.")
    add(STRING, "serf-wan-bind", "serf_bind_addr_wan", "Address to bind Serf WAN listeners to.")
    add(BOOL, "server", "server_mode", "Switches agent to server mode.")
    add(BOOL, "syslog", "enable_syslog", "Enables logging to syslog.")
    add(BOOL, "ui", "enable_ui", "Enables the built-in static web UI server.")
    add(STRING, "ui-dir", "ui_dir", "Path to directory containing the web UI resources.")

    # deprecated flags ordered by flag name
    add(STRING, "atlas", None, "Sets the Atlas infrastructure name, enables SCADA.", deprecated=True)
    add(STRING, "atlas-endpoint", None, "The address of the endpoint for Atlas integration.", deprecated=True)
    add(BOOL, "atlas-join", None, "Enables auto-joining the Atlas cluster.", deprecated=True)
    add(STRING, "atlas-token", None, "Provides the Atlas API token.", deprecated=True)
    add(STRING, "dc", "datacenter", "Datacenter of the agent.", deprecated=True, replacement="datacenter")
    add(STRING, "retry-join-azure-tag-name", "retry_join_azure.tag_name", "Azure tag name to filter on for server discovery.", deprecated=True, replacement="retry-join")
    add(STRING, "retry-join-azure-tag-value", "retry_join_azure.tag_value", "Azure tag value to filter on for server discovery.", deprecated=True, replacement="retry-join")
    add(STRING, "retry-join-ec2-region", "retry_join_ec2.region", "EC2 Region to discover servers in.", deprecated=True, replacement="retry-join")
    add(STRING, "retry-join-ec2-tag-key", "retry_join_ec2.tag_key", "EC2 tag key to filter on for server discovery.", deprecated=True, replacement="retry-join")
    add(STRING, "retry-join-ec2-tag-value", "retry_join_ec2.tag_value", "EC2 tag value to filter on for server discovery.", deprecated=True, replacement="retry-join")
    add(STRING, "retry-join-gce-credentials-file", "retry_join_gce.credentials_file", "Path to credentials JSON file to use with Google Compute Engine.", deprecated=True, replacement="retry-join")
    add(STRING, "retry-join-gce-project-name", "retry_join_gce.project_name", "Google Compute Engine project to discover servers in.", deprecated=True, replacement="retry-join")
    add(STRING, "retry-join-gce-tag-value", "retry_join_gce.tag_value", "Google Compute Engine tag value to filter on for server discovery.", deprecated=True, replacement="retry-join")
    add(STRING, "retry-join-gce-zone-pattern", "retry_join_gce.zone_pattern", "Google Compute Engine region or zone to discover servers in (regex pattern).", deprecated=True, replacement="retry-join")

    return fs.seal()


AGENT_FLAGS: Final[FlagRegistry] = _agent_flags()


def parse_flags(args: Sequence[str]) -> Flags:
    """Parse the agent command line *args* into :class:`Flags`.

    Examples
    --------
    >>> flags = parse_flags(["-config-file", "a", "-config-dir", "b", "-bootstrap", "false"])
    >>> flags.config_files, flags.fragment.bootstrap.value
    (('a', 'b'), False)
    """

    return AGENT_FLAGS.parse(args)


def usage() -> str:
    """Return the agent flag help text."""

    return AGENT_FLAGS.usage()
