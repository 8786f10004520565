from __future__ import annotations

# todoapp/settings.py
import os

import yaml
from dotenv import load_dotenv

# 配置解析顺序：
# 1) 环境变量 DATABASE_URL / DATABASE_AUTH_TOKEN（可来自 .env，不覆盖已有环境变量）
# 2) config.yaml 的 database_url / host / port
# 3) DEFAULTS
DEFAULTS = {
    "host": "127.0.0.1",
    "port": 3000,
    "database_url": "file:todos.db",
}


def load_env(env_file: str | None = None) -> bool:
    """Load a .env file if present. Returns True when something was read."""
    path = env_file or os.path.join(os.getcwd(), ".env")
    if not os.path.exists(path):
        return False
    return load_dotenv(path, override=False)


def _read_config_yaml(config_path: str | None = None) -> dict:
    cfg_path = config_path or os.path.join(os.getcwd(), "config.yaml")
    if not os.path.exists(cfg_path):
        return {}
    with open(cfg_path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}
    out = {}
    for k in ("host", "database_url"):
        v = cfg.get(k)
        if isinstance(v, str) and v.strip():
            out[k] = v.strip()
    port = cfg.get("port")
    if port is not None:
        out["port"] = int(port)
    return out


def get_settings(config_path: str | None = None) -> dict:
    cfg = _read_config_yaml(config_path)
    return {
        "host": cfg.get("host", DEFAULTS["host"]),
        "port": cfg.get("port", DEFAULTS["port"]),
        "database_url": os.environ.get("DATABASE_URL") or cfg.get("database_url", DEFAULTS["database_url"]),
        "database_auth_token": os.environ.get("DATABASE_AUTH_TOKEN", ""),
    }
