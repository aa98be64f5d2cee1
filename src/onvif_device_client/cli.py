"""Command-line client for querying an ONVIF device."""

from __future__ import annotations

import argparse
import dataclasses
import json
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

import httpx
import yaml
from rich import box
from rich.console import Console
from rich.table import Table

from .capabilities import DeviceCapabilities
from .config import CONFIG_ENV_PREFIX, LOG_FORMATS, LOG_LEVELS, OUTPUT_FORMATS, Config
from .device import Device
from .errors import OnvifError
from .logging import configure_logging, get_logger


class CliError(Exception):
    """Raised when the CLI encounters an expected error condition."""


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="onvif-device",
        description=(
            "Query the device-management service of an ONVIF camera. Uses "
            f"{CONFIG_ENV_PREFIX}* env vars for defaults and prints JSON (default), "
            "YAML or a table. Example: `onvif-device --xaddr "
            "http://192.168.1.10/onvif/device_service capabilities`."
        ),
    )
    parser.add_argument("--config", type=Path, help="Path to TOML config file.")
    parser.add_argument(
        "--xaddr",
        help=f"Device service URL (env: {CONFIG_ENV_PREFIX}XADDR).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Seconds to wait for each request.",
    )
    parser.add_argument(
        "--output",
        choices=list(OUTPUT_FORMATS),
        help="Output format for results (json, yaml or table).",
    )
    parser.add_argument("--log-level", choices=list(LOG_LEVELS), help="Log verbosity level.")
    parser.add_argument("--log-format", choices=list(LOG_FORMATS), help="Structured logging format.")

    subparsers = parser.add_subparsers(dest="command", required=False)
    for name, (func, help_text) in _COMMANDS.items():
        command = subparsers.add_parser(name, help=help_text, description=help_text)
        command.set_defaults(func=func)
    return parser


def _cmd_info(device: Device) -> Any:
    return dataclasses.asdict(device.get_device_information())


def _cmd_time(device: Device) -> Any:
    return {"system_date_and_time": device.get_system_date_and_time()}


def _cmd_capabilities(device: Device) -> Any:
    capabilities: DeviceCapabilities = device.get_capabilities()
    return capabilities.as_mapping()


def _cmd_discovery_mode(device: Device) -> Any:
    return {"discovery_mode": device.get_discovery_mode()}


def _cmd_scopes(device: Device) -> Any:
    return device.get_scopes()


def _cmd_hostname(device: Device) -> Any:
    return dataclasses.asdict(device.get_hostname())


def _cmd_dns(device: Device) -> Any:
    return {"dns": device.get_dns()}


def _cmd_interfaces(device: Device) -> Any:
    return device.get_network_interfaces()


_COMMANDS: Dict[str, Tuple[Callable[[Device], Any], str]] = {
    "info": (_cmd_info, "Show manufacturer, model and firmware (GetDeviceInformation)."),
    "time": (_cmd_time, "Show the device clock (GetSystemDateAndTime)."),
    "capabilities": (_cmd_capabilities, "Show normalized capabilities (GetCapabilities)."),
    "discovery-mode": (_cmd_discovery_mode, "Show the WS-Discovery mode (GetDiscoveryMode)."),
    "scopes": (_cmd_scopes, "List configured scope URIs (GetScopes)."),
    "hostname": (_cmd_hostname, "Show hostname information (GetHostname)."),
    "dns": (_cmd_dns, "Show DNS information (GetDNS)."),
    "interfaces": (_cmd_interfaces, "Show network interfaces (GetNetworkInterfaces)."),
}


def _load_config(args: argparse.Namespace) -> Config:
    overrides = {
        "xaddr": args.xaddr,
        "timeout": args.timeout,
        "output": args.output,
        "log_level": args.log_level,
        "log_format": args.log_format,
    }
    try:
        config = Config.from_sources(overrides, args.config)
    except (ValueError, FileNotFoundError) as exc:
        raise CliError(str(exc)) from exc
    if not config.xaddr:
        raise CliError(f"A device address is required (--xaddr or {CONFIG_ENV_PREFIX}XADDR).")
    return config


def _flatten(data: Any, prefix: str = "") -> List[Tuple[str, str]]:
    rows: List[Tuple[str, str]] = []
    if isinstance(data, Mapping):
        if not data and prefix:
            rows.append((prefix, ""))
        for key, value in data.items():
            rows.extend(_flatten(value, f"{prefix}.{key}" if prefix else str(key)))
    elif isinstance(data, list):
        for index, value in enumerate(data):
            rows.extend(_flatten(value, f"{prefix}[{index}]"))
    else:
        rows.append((prefix, "" if data is None else str(data)))
    return rows


def _print_output(data: Any, output: str, console: Optional[Console] = None) -> None:
    if output == "yaml":
        yaml.safe_dump(data, sys.stdout, sort_keys=False)
    elif output == "table":
        table = Table(show_header=True, header_style="bold cyan", box=box.ROUNDED)
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="white")
        for key, value in _flatten(data):
            table.add_row(key, value)
        (console or Console()).print(table)
    else:
        json.dump(data, sys.stdout, indent=2)
        sys.stdout.write("\n")


def main(argv: Optional[Iterable[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(args=argv)

    try:
        if not args.command:
            parser.print_help()
            sys.exit(1)

        config = _load_config(args)
        configure_logging(config)
        logger = get_logger("onvif.cli")
        logger.debug("Configuration loaded", extra={"config": config.logging_dict()})

        with Device(config.xaddr, timeout=config.timeout) as device:
            func: Callable[[Device], Any] = args.func
            _print_output(func(device), config.output)
    except CliError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        sys.exit(1)
    except OnvifError as exc:  # pragma: no cover - CLI feedback path
        sys.stderr.write(f"Error: {exc}\n")
        sys.exit(1)
    except httpx.RequestError as exc:  # pragma: no cover - CLI feedback path
        sys.stderr.write(f"HTTP request failed: {exc}\n")
        sys.exit(1)


if __name__ == "__main__":
    main()
