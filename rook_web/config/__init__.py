from .ini_config import AppSettings, IniConfig

__all__ = ["AppSettings", "IniConfig"]
