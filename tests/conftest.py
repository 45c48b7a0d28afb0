import json
import os
import types
from pathlib import Path, PurePosixPath

import pytest

from ipfs_installer.config import parse_args, resolve_config
from ipfs_installer.context import Toolbox
from ipfs_installer.lib.hostinfo import HostFacts

SAMPLE_NODE_CONFIG = {
    "API": {"HTTPHeaders": {}},
    "Addresses": {
        "API": "/ip4/127.0.0.1/tcp/5001",
        "Gateway": "/ip4/127.0.0.1/tcp/8080",
        "Swarm": ["/ip4/0.0.0.0/tcp/4001", "/ip6/::/tcp/4001"],
    },
    "Datastore": {
        "BloomFilterSize": 0,
        "GCPeriod": "1h",
        "StorageGCWatermark": 90,
        "StorageMax": "10GB",
    },
    "Identity": {"PeerID": "12D3KooWExamplePeer"},
}


def sample_config_text() -> str:
    return json.dumps(SAMPLE_NODE_CONFIG, indent=2)


class FakeHost:
    """Stands in for apt, go, ipfs, systemd, ufw and useradd.

    Each collaborator records (tool, action, args) into calls and produces the
    files the real tool would, rooted under root.
    """

    def __init__(self, root: Path):
        self.root = root
        self.calls = []
        self.build_node = True
        self.go_archive_ok = True
        self.gopaths = []

    def rooted(self, p) -> Path:
        return self.root / PurePosixPath(str(p)).relative_to("/")

    def record(self, tool, action, *args):
        self.calls.append((tool, action) + args)

    def toolbox(self) -> Toolbox:
        host = self

        apt = types.SimpleNamespace(
            update=lambda: host.record("apt", "update"),
            upgrade=lambda full=False: host.record("apt", "upgrade", full),
            install=lambda packages: host.record("apt", "install", tuple(packages)),
        )

        def stage(url, dest):
            host.record("download", "stage", url)
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_bytes(b"tarball")
            return dest

        def extract_tarball(archive, dest_dir):
            host.record("download", "extract", str(archive))
            if host.go_archive_ok:
                go = dest_dir / "go" / "bin" / "go"
                go.parent.mkdir(parents=True, exist_ok=True)
                go.write_text("#!/bin/sh\n")

        downloader = types.SimpleNamespace(stage=stage, extract_tarball=extract_tarball)

        def create_user(name, home_dir):
            host.record("accounts", "create", name, home_dir)
            host.rooted(home_dir).mkdir(parents=True, exist_ok=True)

        accounts = types.SimpleNamespace(
            exists=lambda name: False,
            create_user=create_user,
            chown_tree=lambda name, path: host.record("accounts", "chown", name, path),
        )

        def install(go_binary, version, gobin, gopath):
            host.record("node", "install", go_binary, version, gobin)
            host.gopaths.append(gopath)
            if host.build_node:
                binary = host.rooted(gobin) / "ipfs"
                binary.parent.mkdir(parents=True, exist_ok=True)
                binary.write_text("#!/bin/sh\n")
                os.chmod(binary, 0o755)

        def init(binary, user, ipfs_path, profile):
            host.record("node", "init", user, ipfs_path, profile)
            cfg = host.rooted(ipfs_path) / "config"
            cfg.parent.mkdir(parents=True, exist_ok=True)
            cfg.write_text(sample_config_text(), encoding="utf-8")

        node = types.SimpleNamespace(install=install, init=init)

        def register_unit(path, definition):
            host.record("systemd", "register", str(path))
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(definition, encoding="utf-8")

        init_system = types.SimpleNamespace(
            register_unit=register_unit,
            enable=lambda name: host.record("systemd", "enable", name),
            start=lambda name: host.record("systemd", "start", name),
        )

        def register_cron(path, definition):
            host.record("cron", "register", str(path))
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(definition, encoding="utf-8")

        cron = types.SimpleNamespace(register=register_cron)
        firewall = types.SimpleNamespace(open_ports=lambda: host.record("ufw", "open_ports"))

        return Toolbox(
            packages=apt,
            downloader=downloader,
            accounts=accounts,
            node=node,
            init_system=init_system,
            cron=cron,
            firewall=firewall,
        )


class SpyRun:
    """Replacement for subprocess.run that records argv."""

    def __init__(self, returncode=0, stdout="", stderr=""):
        self.calls = []
        self.kwargs = []
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr

    def __call__(self, argv, **kwargs):
        self.calls.append(list(argv))
        self.kwargs.append(kwargs)
        return types.SimpleNamespace(returncode=self.returncode, stdout=self.stdout, stderr=self.stderr)


@pytest.fixture
def debian_facts():
    return HostFacts(os_id="debian", arch="amd64", free_bytes=66_000_000_000)


@pytest.fixture
def raspbian_facts():
    return HostFacts(os_id="raspbian", arch="armhf", free_bytes=26_400_000_000)


@pytest.fixture
def host(tmp_path):
    root = tmp_path / "root"
    root.mkdir()
    return FakeHost(root)


@pytest.fixture
def make_config(host, debian_facts):
    def _make(*flags, facts=None, defaults=None):
        args = parse_args([*flags, "--root", str(host.root)])
        return resolve_config(args, facts or debian_facts, defaults)

    return _make


@pytest.fixture
def as_root(monkeypatch):
    monkeypatch.setattr(os, "geteuid", lambda: 0)


@pytest.fixture
def spy_run(monkeypatch):
    import subprocess

    spy = SpyRun()
    monkeypatch.setattr(subprocess, "run", spy)
    return spy
