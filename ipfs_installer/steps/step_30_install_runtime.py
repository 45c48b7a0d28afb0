from __future__ import annotations

import logging
import shutil
from pathlib import PurePosixPath

from ..context import ProvisioningContext
from ..errors import DownloadVerificationFailed
from ..lib.node import goarch

logger = logging.getLogger(__name__)

GO_DOWNLOAD_URL = "https://go.dev/dl/{archive}"


def archive_name(version: str, arch: str) -> str:
    return f"go{version}.linux-{goarch(arch)}.tar.gz"


class InstallRuntimeStep:
    """Pinned Go toolchain under /usr/local/go (skipped when using the distro package)."""

    step_id = "runtime-installed"

    def staged_archive(self, ctx: ProvisioningContext) -> PurePosixPath:
        name = archive_name(str(ctx.config.runtime_version), ctx.config.detected_arch)
        return ctx.paths.cache_dir / name

    def is_applied(self, ctx: ProvisioningContext) -> bool:
        if ctx.config.runtime_version is None:
            return True
        return ctx.paths.rooted(self.staged_archive(ctx)).exists()

    def run(self, ctx: ProvisioningContext) -> None:
        staged = self.staged_archive(ctx)
        url = GO_DOWNLOAD_URL.format(archive=staged.name)

        dl = ctx.tools.downloader
        archive = dl.stage(url, ctx.paths.rooted(staged))

        go_root = ctx.paths.rooted(ctx.paths.go_root)
        if go_root.exists() and not ctx.dry_run:
            logger.info("Replacing existing Go toolchain at %s", str(go_root))
            shutil.rmtree(go_root)

        try:
            dl.extract_tarball(archive, go_root.parent)
            if not ctx.dry_run and not (go_root / "bin" / "go").exists():
                raise DownloadVerificationFailed(f"{staged.name} did not provide {ctx.paths.go_root}/bin/go")
        except Exception:
            # A staged archive marks the step done; drop the bad one.
            if not ctx.dry_run:
                archive.unlink(missing_ok=True)
            raise

        logger.info("Go %s installed at %s", ctx.config.runtime_version, ctx.paths.go_root)
