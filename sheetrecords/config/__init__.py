from .loader import ConfigurationError, load_config, step_config_from_dict

__all__ = [
    "ConfigurationError",
    "load_config",
    "step_config_from_dict",
]
