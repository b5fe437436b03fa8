# Shiptivity — server configuration
# Defaults < config.yaml < SHIPTIVITY_* environment variables < CLI args.

import os
import yaml
from pathlib import Path
from dataclasses import dataclass
from typing import Optional

CONFIG_PATH = Path("shiptivity.yaml")

ENV_OVERRIDES = {
    "SHIPTIVITY_DB": "db_path",
    "SHIPTIVITY_HOST": "host",
    "SHIPTIVITY_PORT": "port",
    "SHIPTIVITY_LOG_LEVEL": "log_level",
}


@dataclass
class ServerConfig:
    """Runtime configuration for the clients API."""

    host: str = "127.0.0.1"
    port: int = 3001
    db_path: str = "clients.db"
    log_level: str = "INFO"

    # YAML list of clients loaded into an empty database at startup
    seed_file: Optional[str] = None

    def apply_env(self, environ=None) -> "ServerConfig":
        """Override fields from SHIPTIVITY_* environment variables."""
        environ = os.environ if environ is None else environ
        for var, attr in ENV_OVERRIDES.items():
            value = environ.get(var)
            if value:
                setattr(self, attr, value)
        self.port = int(self.port)
        self.log_level = str(self.log_level).upper()
        return self

    @classmethod
    def load(cls, path: Optional[str] = None) -> "ServerConfig":
        """Load config from YAML file, falling back to defaults."""
        cfg_path = Path(path) if path else CONFIG_PATH
        if cfg_path.exists():
            with open(cfg_path, "r") as f:
                data = yaml.safe_load(f) or {}
            cfg = cls(**{k: v for k, v in data.items() if hasattr(cls, k)})
        else:
            cfg = cls()
        return cfg.apply_env()
