from .principal import AccountStatus, Principal

__all__ = ["AccountStatus", "Principal"]
