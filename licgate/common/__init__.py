# Common utilities
from licgate.common.logging_utils import mask_license_key as mask_license_key
from licgate.common.logging_utils import setup_logger as setup_logger
from licgate.common.mixins import Configurable as Configurable

__all__ = ["Configurable", "mask_license_key", "setup_logger"]
