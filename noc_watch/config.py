from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env file."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # Interface under test and persistent log
    wifi_interface: str = "wlan0"
    log_file: str = "noc-watch.log"

    # Headless = no dashboard, unattended service mode
    headless: bool = False

    # Cadences (seconds)
    lease_interval: float = 300.0
    connectivity_interval: float = 60.0
    emit_interval: float = 1.0  # dashboard refresh
    headless_emit_interval: float = 60.0
    log_write_interval: float = 60.0

    # Entries per probe class shown on the dashboard
    history_window: int = 10

    # Run both probes right away instead of waiting a full period
    probe_on_start: bool = False

    # Probe commands
    use_sudo: bool = True
    ipv4_target: str = "8.8.8.8"
    ipv6_target: str = "2001:4860:4860::8888"
    ping_timeout: int = 5  # ping -W
    latency_ping_count: int = 3
    dhcp_settle_seconds: float = 2.0
    command_timeout: float = 30.0  # hard cap per external command
    resolv_conf: str = "/etc/resolv.conf"

    # Logging
    log_level: str = "INFO"


settings = Settings()
