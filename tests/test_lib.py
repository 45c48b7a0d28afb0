import io
import tarfile
import types

import pytest
import requests

from ipfs_installer.errors import NetworkUnavailable
from ipfs_installer.lib import download, net
from ipfs_installer.lib.accounts import AccountManager
from ipfs_installer.lib.autostart import CronTable, InitSystem
from ipfs_installer.lib.download import Downloader
from ipfs_installer.lib.firewall import Firewall
from ipfs_installer.lib.node import IpfsNode, goarch
from ipfs_installer.lib.pkg import AptPackageManager


def test_apt_install_without_recommends(spy_run):
    AptPackageManager().install(["curl", "git"])
    assert spy_run.calls == [["apt-get", "install", "-y", "--no-install-recommends", "curl", "git"]]
    assert spy_run.kwargs[0]["env"]["DEBIAN_FRONTEND"] == "noninteractive"


def test_apt_install_nothing(spy_run):
    AptPackageManager().install([])
    assert spy_run.calls == []


def test_apt_full_upgrade(spy_run):
    AptPackageManager().upgrade(full=True)
    assert spy_run.calls == [
        ["apt-get", "full-upgrade", "-y"],
        ["apt-get", "autoremove", "-y"],
    ]


def test_firewall_rules(spy_run):
    Firewall().open_ports()
    assert spy_run.calls == [
        ["ufw", "allow", "22/tcp"],
        ["ufw", "allow", "4001/tcp"],
        ["ufw", "allow", "4001/udp"],
        ["ufw", "--force", "enable"],
    ]


def test_create_system_user(spy_run):
    AccountManager().create_user("ipfs", "/home/ipfs")
    argv = spy_run.calls[0]
    assert argv[0] == "useradd"
    assert argv[-1] == "ipfs"
    assert argv[argv.index("--home-dir") + 1] == "/home/ipfs"
    assert "--system" in argv


def test_unit_registration(tmp_path, spy_run):
    unit = tmp_path / "ipfs.service"
    systemd = InitSystem()
    systemd.register_unit(unit, "[Unit]\n")
    systemd.enable("ipfs.service")
    systemd.start("ipfs.service")

    assert unit.read_text() == "[Unit]\n"
    assert oct(unit.stat().st_mode & 0o777) == oct(0o644)
    assert spy_run.calls == [
        ["systemctl", "daemon-reload"],
        ["systemctl", "enable", "ipfs.service"],
        ["systemctl", "restart", "ipfs.service"],
    ]


def test_cron_registration_dry_run(tmp_path, spy_run):
    path = tmp_path / "cron.d" / "ipfs"
    CronTable(dry_run=True).register(path, "@reboot ipfs true\n")
    assert not path.exists()
    assert spy_run.calls == []


def test_node_install_and_init(spy_run):
    node = IpfsNode()
    node.install(
        go_binary="/usr/bin/go",
        version="v0.29.0",
        gobin="/usr/local/bin",
        gopath="/var/cache/ipfs-installer/gopath",
    )
    node.init(binary="/usr/local/bin/ipfs", user="ipfs", ipfs_path="/home/ipfs/.ipfs", profile="lowpower")

    install, init = spy_run.calls
    assert install == ["/usr/bin/go", "install", "github.com/ipfs/kubo/cmd/ipfs@v0.29.0"]
    assert spy_run.kwargs[0]["env"]["GOBIN"] == "/usr/local/bin"
    assert spy_run.kwargs[0]["env"]["GOPATH"] == "/var/cache/ipfs-installer/gopath"
    assert init[:3] == ["sudo", "-u", "ipfs"]
    assert "IPFS_PATH=/home/ipfs/.ipfs" in init
    assert init[-3:] == ["init", "--profile", "lowpower"]


def test_goarch():
    assert goarch("armhf") == "armv6l"
    assert goarch("arm64") == "arm64"
    assert goarch("amd64") == "amd64"


def _response(content=b"", status=200):
    def raise_for_status():
        if status >= 400:
            raise requests.HTTPError(f"{status} error")

    return types.SimpleNamespace(content=content, raise_for_status=raise_for_status)


def test_stage_downloads_once(tmp_path, monkeypatch):
    fetched = []

    def fake_get(url, timeout):
        fetched.append(url)
        return _response(b"payload")

    monkeypatch.setattr(download.requests, "get", fake_get)
    dest = tmp_path / "cache" / "go.tar.gz"

    dl = Downloader()
    dl.stage("https://go.dev/dl/go.tar.gz", dest)
    dl.stage("https://go.dev/dl/go.tar.gz", dest)

    assert dest.read_bytes() == b"payload"
    assert fetched == ["https://go.dev/dl/go.tar.gz"]
    assert not (tmp_path / "cache" / "go.tar.gz.part").exists()


def test_stage_http_error(tmp_path, monkeypatch):
    monkeypatch.setattr(download.requests, "get", lambda url, timeout: _response(status=404))
    dest = tmp_path / "go.tar.gz"
    with pytest.raises(NetworkUnavailable):
        Downloader().stage("https://go.dev/dl/missing.tar.gz", dest)
    assert not dest.exists()


def test_extract_tarball(tmp_path):
    archive = tmp_path / "go.tar.gz"
    payload = b"#!/bin/sh\n"
    with tarfile.open(archive, "w:gz") as tar:
        info = tarfile.TarInfo("go/bin/go")
        info.size = len(payload)
        info.mode = 0o755
        tar.addfile(info, io.BytesIO(payload))

    out = tmp_path / "usr" / "local"
    Downloader().extract_tarball(archive, out)
    assert (out / "go" / "bin" / "go").read_bytes() == payload


def test_online_is_noop(spy_run):
    net.ensure_online("debian", probe=lambda url: True)
    assert spy_run.calls == []


def test_offline_debian_aborts(spy_run):
    with pytest.raises(NetworkUnavailable):
        net.ensure_online("debian", probe=lambda url: False, interactive=True)
    assert spy_run.calls == []


def test_offline_raspbian_opens_raspi_config(spy_run):
    answers = iter([False, True])
    net.ensure_online("raspbian", probe=lambda url: next(answers), interactive=True)
    assert spy_run.calls == [["raspi-config"]]


def test_offline_raspbian_still_offline(spy_run):
    with pytest.raises(NetworkUnavailable):
        net.ensure_online("raspbian", probe=lambda url: False, interactive=True)
    assert spy_run.calls == [["raspi-config"]]


def test_offline_raspbian_without_terminal(spy_run):
    with pytest.raises(NetworkUnavailable):
        net.ensure_online("raspbian", probe=lambda url: False, interactive=False)
    assert spy_run.calls == []


def test_is_online(monkeypatch):
    monkeypatch.setattr(net.requests, "head", lambda url, timeout, allow_redirects: None)
    assert net.is_online("https://dist.ipfs.tech") is True

    def boom(url, timeout, allow_redirects):
        raise requests.ConnectionError("no route")

    monkeypatch.setattr(net.requests, "head", boom)
    assert net.is_online("https://dist.ipfs.tech") is False


def test_offline_raspbian_without_raspi_config(monkeypatch):
    import subprocess

    def missing(argv, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", argv[0])

    monkeypatch.setattr(subprocess, "run", missing)
    answers = []

    def probe(url):
        answers.append(url)
        return False

    with pytest.raises(NetworkUnavailable):
        net.ensure_online("raspbian", probe=probe, interactive=True)
    assert len(answers) == 1
