"""Gateway registry with lazy loading.

Usage:
    from atshub.gateway import get_gateway

    async with get_gateway(settings.gateway) as gateway:
        jobs = await gateway.get_open_jobs()
"""

import importlib

from atshub.core.config import GatewayConfig
from atshub.gateway.base import Gateway, GatewayError, error_message

__all__ = ["Gateway", "GatewayError", "available_gateways", "error_message", "get_gateway"]

# Lazy registry: maps gateway kind → (module_path, class_name)
_REGISTRY: dict[str, tuple[str, str]] = {
    "apex": ("atshub.gateway.apex", "ApexRestGateway"),
    "memory": ("atshub.gateway.memory", "InMemoryGateway"),
}


def get_gateway(config: GatewayConfig) -> Gateway:
    """Instantiate the gateway named by ``config.kind``.

    Raises:
        ValueError: If the kind is unknown, or the gateway rejects its config.
    """
    if config.kind not in _REGISTRY:
        valid = ", ".join(sorted(_REGISTRY))
        msg = f"Unknown gateway '{config.kind}'. Available: {valid}"
        raise ValueError(msg)

    module_path, class_name = _REGISTRY[config.kind]
    module = importlib.import_module(module_path)
    cls = getattr(module, class_name)
    return cls.from_config(config)  # type: ignore[no-any-return]


def available_gateways() -> list[str]:
    """Return sorted list of registered gateway kinds."""
    return sorted(_REGISTRY)
