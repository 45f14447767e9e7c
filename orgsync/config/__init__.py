from orgsync.config.settings import ClerkConfig, Settings, load_settings

__all__ = ["ClerkConfig", "Settings", "load_settings"]
