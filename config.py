import importlib
import os
from decimal import Decimal
from pathlib import Path

_ENV_LOADED = False


def _load_env() -> None:
    global _ENV_LOADED
    if _ENV_LOADED:
        return
    try:
        dotenv = importlib.import_module("dotenv")
    except ImportError as exc:  # pragma: no cover
        raise SystemExit("python-dotenv is required (pip install -e .)") from exc
    env_path = Path(__file__).resolve().parent / ".env"
    dotenv.load_dotenv(dotenv_path=env_path)
    _ENV_LOADED = True


def get_env(
    name: str, default: str | None = None, required: bool = False
) -> str | None:
    _load_env()
    value = os.environ.get(name, default)
    if required and (value is None or value == ""):
        raise SystemExit(f"{name} env var is required")
    return value


def load_settings():
    """Build ``SwapSettings`` from SWAP_* environment variables."""
    from core.settings import SwapSettings
    from core.tokens import get_network

    chain_id = int(get_env("SWAP_CHAIN_ID", "13579"))
    network = get_network(chain_id)
    rpc_urls = get_env("SWAP_RPC_URLS") or network.rpc_url
    return SwapSettings(
        chain_id=network.chain_id,
        rpc_urls=tuple(url.strip() for url in rpc_urls.split(",") if url.strip()),
        default_slippage=Decimal(get_env("SWAP_DEFAULT_SLIPPAGE", "0.5")),
        debounce_seconds=float(get_env("SWAP_DEBOUNCE_SECONDS", "0.5")),
        refresh_seconds=float(get_env("SWAP_REFRESH_SECONDS", "30")),
        quote_ttl_seconds=float(get_env("SWAP_QUOTE_TTL_SECONDS", "15")),
        impact_cap=Decimal(get_env("SWAP_IMPACT_CAP", "15")),
        rpc_timeout=int(get_env("SWAP_RPC_TIMEOUT", "30")),
        rpc_max_retries=int(get_env("SWAP_RPC_MAX_RETRIES", "3")),
        gas_priority=get_env("SWAP_GAS_PRIORITY", "medium"),
    )
