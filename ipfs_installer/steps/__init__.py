from .step_10_os_bootstrap import OsBootstrapStep
from .step_15_distro_upgrade import DistroUpgradeStep
from .step_20_service_account import ServiceAccountStep
from .step_30_install_runtime import InstallRuntimeStep
from .step_40_install_node import InstallNodeStep
from .step_50_init_node import InitNodeStep
from .step_60_open_firewall import OpenFirewallStep
from .step_70_storage_quota import StorageQuotaStep
from .step_80_register_autostart import RegisterAutostartStep
from .step_90_account_setup import AccountSetupStep

__all__ = [
    "OsBootstrapStep",
    "DistroUpgradeStep",
    "ServiceAccountStep",
    "InstallRuntimeStep",
    "InstallNodeStep",
    "InitNodeStep",
    "OpenFirewallStep",
    "StorageQuotaStep",
    "RegisterAutostartStep",
    "AccountSetupStep",
]
