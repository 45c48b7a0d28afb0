from ipfs_installer.lib import hostinfo
from ipfs_installer.lib.hostinfo import detect_os, normalize_arch, parse_os_release, probe_host


def _os_release(root, text):
    p = root / "etc" / "os-release"
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text)


def test_parse_os_release_strips_quotes():
    data = parse_os_release('# comment\nID=debian\nPRETTY_NAME="Debian GNU/Linux 12 (bookworm)"\nVERSION_ID=\'12\'\n')
    assert data == {"ID": "debian", "PRETTY_NAME": "Debian GNU/Linux 12 (bookworm)", "VERSION_ID": "12"}


def test_detect_raspbian(tmp_path):
    _os_release(tmp_path, "ID=raspbian\nID_LIKE=debian\n")
    assert detect_os(str(tmp_path)) == "raspbian"


def test_detect_raspberry_pi_os_64bit(tmp_path):
    _os_release(tmp_path, "ID=debian\n")
    (tmp_path / "etc" / "rpi-issue").write_text("Raspberry Pi reference 2024-03-15\n")
    assert detect_os(str(tmp_path)) == "raspbian"


def test_detect_debian(tmp_path):
    _os_release(tmp_path, "ID=debian\n")
    assert detect_os(str(tmp_path)) == "debian"


def test_detect_other_distro_returns_its_id(tmp_path):
    _os_release(tmp_path, "ID=ubuntu\nID_LIKE=debian\n")
    assert detect_os(str(tmp_path)) == "ubuntu"


def test_detect_without_os_release(tmp_path):
    assert detect_os(str(tmp_path)) is None


def test_normalize_arch():
    assert normalize_arch("x86_64") == "amd64"
    assert normalize_arch("aarch64") == "arm64"
    assert normalize_arch("armv7l") == "armhf"
    assert normalize_arch("armv6l") == "armhf"
    assert normalize_arch("riscv64") == "riscv64"


def test_probe_host(tmp_path, monkeypatch):
    _os_release(tmp_path, "ID=debian\n")
    monkeypatch.setattr(hostinfo.platform, "machine", lambda: "aarch64")
    facts = probe_host(str(tmp_path))
    assert facts.os_id == "debian"
    assert facts.arch == "arm64"
    assert facts.free_bytes >= 0
