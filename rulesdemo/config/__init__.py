from .settings import DEFAULT_RULES_DIR, Settings, get_settings

__all__ = ["DEFAULT_RULES_DIR", "Settings", "get_settings"]
