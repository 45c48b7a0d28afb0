from __future__ import annotations

import logging
import re
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from .errors import InvalidArgument

logger = logging.getLogger(__name__)

AUTOSTART_SYSTEMD = "systemd"
AUTOSTART_CRON = "cron"

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

_TEMPLATE_NAMES = {
    AUTOSTART_SYSTEMD: "ipfs.service.j2",
    AUTOSTART_CRON: "ipfs.cron.j2",
}

_REQUIRED = {
    AUTOSTART_SYSTEMD: ("user", "executable", "open_files_limit"),
    AUTOSTART_CRON: ("user", "executable", "log_file"),
}

_ENV_LINE = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)=(.*)$")


@dataclass(frozen=True)
class AutostartSpec:
    """Everything the autostart descriptor needs to relaunch the daemon."""

    user: str
    executable: str
    environment: Dict[str, str] = field(default_factory=dict)
    flags: Tuple[str, ...] = ()
    open_files_limit: Optional[int] = None
    log_file: Optional[str] = None


class TemplateRenderer:
    def __init__(self, templates_dir: Path = TEMPLATES_DIR):
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )

    def render(self, template_name: str, context: dict) -> str:
        tmpl = self.env.get_template(template_name)
        return tmpl.render(**context)


def render_autostart(mechanism: str, spec: AutostartSpec, renderer: Optional[TemplateRenderer] = None) -> str:
    if mechanism not in _TEMPLATE_NAMES:
        raise InvalidArgument(f"Unknown autostart mechanism: {mechanism}")

    missing = [name for name in _REQUIRED[mechanism] if getattr(spec, name) in (None, "")]
    if missing:
        raise InvalidArgument(f"Autostart descriptor is missing {', '.join(missing)}")

    context = {
        "user": spec.user,
        "executable": spec.executable,
        "environment": dict(spec.environment),
        "flags": list(spec.flags),
        "open_files_limit": spec.open_files_limit,
        "log_file": spec.log_file,
    }
    try:
        return (renderer or TemplateRenderer()).render(_TEMPLATE_NAMES[mechanism], context)
    except TemplateError as e:
        raise InvalidArgument(f"Cannot render {mechanism} descriptor: {e}") from e


def _split_exec(argv: list) -> Tuple[str, Tuple[str, ...]]:
    if len(argv) < 2 or argv[1] != "daemon":
        raise ValueError(f"Not an ipfs daemon command: {argv}")
    return argv[0], tuple(argv[2:])


def _parse_unit(text: str) -> AutostartSpec:
    user = None
    executable = None
    flags: Tuple[str, ...] = ()
    limit = None
    environment: Dict[str, str] = {}

    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith(("#", ";", "[")) or "=" not in line:
            continue
        key, _, value = line.partition("=")
        if key == "User":
            user = value
        elif key == "Environment":
            env_key, _, env_value = value.strip('"').partition("=")
            environment[env_key] = env_value
        elif key == "LimitNOFILE":
            limit = int(value)
        elif key == "ExecStart":
            executable, flags = _split_exec(shlex.split(value))

    if user is None or executable is None:
        raise ValueError("Unit has no User= or ExecStart=")
    return AutostartSpec(user=user, executable=executable, environment=environment, flags=flags, open_files_limit=limit)


def _parse_cron(text: str) -> AutostartSpec:
    environment: Dict[str, str] = {}
    spec = None

    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("@reboot"):
            tokens = shlex.split(line)
            if ">>" in tokens:
                cut = tokens.index(">>")
                command, log_file = tokens[2:cut], tokens[cut + 1]
            else:
                command, log_file = tokens[2:], None
            executable, flags = _split_exec(command)
            spec = (tokens[1], executable, flags, log_file)
            continue
        m = _ENV_LINE.match(line)
        if m:
            environment[m.group(1)] = m.group(2)

    if spec is None:
        raise ValueError("Cron definition has no @reboot entry")
    user, executable, flags, log_file = spec
    return AutostartSpec(user=user, executable=executable, environment=environment, flags=flags, log_file=log_file)


def parse_autostart(mechanism: str, text: str) -> AutostartSpec:
    """Read back the fields a rendered descriptor was built from."""

    if mechanism == AUTOSTART_SYSTEMD:
        return _parse_unit(text)
    if mechanism == AUTOSTART_CRON:
        return _parse_cron(text)
    raise InvalidArgument(f"Unknown autostart mechanism: {mechanism}")
