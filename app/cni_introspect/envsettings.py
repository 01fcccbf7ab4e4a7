"""
Environment-derived configuration for debugging.

Both functions re-read the process environment on every call, so the
introspection endpoint always shows what the daemon would parse right now.
Values that fail to parse fall back to their default.
"""

import ipaddress
import os
from typing import Any, Callable

from cni_introspect.utils import get_logger

logger = get_logger(__name__)


# ipamd
ENV_WARM_ENI_TARGET = "WARM_ENI_TARGET"
ENV_WARM_IP_TARGET = "WARM_IP_TARGET"
ENV_MINIMUM_IP_TARGET = "MINIMUM_IP_TARGET"
ENV_MAX_ENI = "MAX_ENI"
ENV_CUSTOM_NETWORK_CFG = "AWS_VPC_K8S_CNI_CUSTOM_NETWORK_CFG"

# networkutils
ENV_CONFIGURE_RPFILTER = "AWS_VPC_K8S_CNI_CONFIGURE_RPFILTER"
ENV_CONNMARK = "AWS_VPC_K8S_CNI_CONNMARK"
ENV_EXCLUDE_SNAT_CIDRS = "AWS_VPC_K8S_CNI_EXCLUDE_SNAT_CIDRS"
ENV_EXTERNAL_SNAT = "AWS_VPC_K8S_CNI_EXTERNALSNAT"
ENV_MTU = "AWS_VPC_ENI_MTU"
ENV_VETH_PREFIX = "AWS_VPC_K8S_CNI_VETHPREFIX"
ENV_NODE_PORT_SUPPORT = "AWS_VPC_CNI_NODE_PORT_SUPPORT"
ENV_RANDOMIZE_SNAT = "AWS_VPC_K8S_CNI_RANDOMIZESNAT"

DEFAULT_CONNMARK = 0x80
DEFAULT_MTU = 9001
DEFAULT_VETH_PREFIX = "eni"
SNAT_MODES = ("none", "hashrandom", "prng")
DEFAULT_SNAT_MODE = "prng"


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("true", "1", "t", "yes"):
        return True
    if lowered in ("false", "0", "f", "no"):
        return False
    raise ValueError(f"not a boolean: {value!r}")


def _parse_int(value: str) -> int:
    # base 0 accepts both "128" and "0x80"
    return int(value.strip(), 0)


def _parse_snat_mode(value: str) -> str:
    mode = value.strip().lower()
    if mode not in SNAT_MODES:
        raise ValueError(f"expected one of {', '.join(SNAT_MODES)}")
    return mode


def _parse_cidrs(value: str) -> list[str]:
    cidrs = []
    for item in value.split(","):
        item = item.strip()
        if not item:
            continue
        try:
            cidrs.append(str(ipaddress.ip_network(item, strict=False)))
        except ValueError:
            logger.warning(f"Ignoring invalid CIDR {item!r} in {ENV_EXCLUDE_SNAT_CIDRS}")
    return cidrs


def _env(name: str, parse: Callable[[str], Any], default: Any) -> Any:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return parse(raw)
    except ValueError as e:
        logger.warning(f"Invalid value for {name}: {e}; using default {default!r}")
        return default


def ipamd_env_settings() -> dict[str, Any]:
    """Return the IP address management settings derived from the environment."""
    return {
        ENV_WARM_ENI_TARGET: _env(ENV_WARM_ENI_TARGET, _parse_int, 1),
        ENV_WARM_IP_TARGET: _env(ENV_WARM_IP_TARGET, _parse_int, 0),
        ENV_MINIMUM_IP_TARGET: _env(ENV_MINIMUM_IP_TARGET, _parse_int, 0),
        ENV_MAX_ENI: _env(ENV_MAX_ENI, _parse_int, -1),
        ENV_CUSTOM_NETWORK_CFG: _env(ENV_CUSTOM_NETWORK_CFG, _parse_bool, False),
    }


def networkutils_env_settings() -> dict[str, Any]:
    """Return the host networking settings derived from the environment."""
    return {
        ENV_CONFIGURE_RPFILTER: _env(ENV_CONFIGURE_RPFILTER, _parse_bool, True),
        ENV_CONNMARK: _env(ENV_CONNMARK, _parse_int, DEFAULT_CONNMARK),
        ENV_EXCLUDE_SNAT_CIDRS: _env(ENV_EXCLUDE_SNAT_CIDRS, _parse_cidrs, []),
        ENV_EXTERNAL_SNAT: _env(ENV_EXTERNAL_SNAT, _parse_bool, False),
        ENV_MTU: _env(ENV_MTU, _parse_int, DEFAULT_MTU),
        ENV_VETH_PREFIX: _env(ENV_VETH_PREFIX, str.strip, DEFAULT_VETH_PREFIX),
        ENV_NODE_PORT_SUPPORT: _env(ENV_NODE_PORT_SUPPORT, _parse_bool, True),
        ENV_RANDOMIZE_SNAT: _env(ENV_RANDOMIZE_SNAT, _parse_snat_mode, DEFAULT_SNAT_MODE),
    }
