from cni_introspect.utils.logging import get_logger, setup_logging
from cni_introspect.utils.once import once

__all__ = ["get_logger", "setup_logging", "once"]
