from .load import build_options, load_config_file, parse_vars

__all__ = ["build_options", "load_config_file", "parse_vars"]
