import os
from dotenv import load_dotenv

# Load Environment Variables from project root .env
env_path = os.path.join(os.path.dirname(__file__), "../.env")
load_dotenv(env_path)


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


class Settings:
    # ═══════════════════════════════════════════════════════════════════
    # GIF PORTAL CONFIGURATION (env-based)
    # ═══════════════════════════════════════════════════════════════════

    # Console output (file log is always written)
    SILENT_MODE = _env_flag("SILENT_MODE")

    # Paths
    BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    LOG_DIR = os.getenv("LOG_DIR", os.path.join(BASE_DIR, "logs"))

    # --- Cluster ---
    RPC_URL = os.getenv("RPC_URL", "https://api.devnet.solana.com")
    PREFLIGHT_COMMITMENT = os.getenv("PREFLIGHT_COMMITMENT", "processed")

    # --- Program ---
    # Program id comes from GIF_PROGRAM_ID, or from the IDL's metadata.address
    GIF_PROGRAM_ID = os.getenv("GIF_PROGRAM_ID", "")
    GIF_IDL_PATH = os.getenv("GIF_IDL_PATH", os.path.join(BASE_DIR, "idl.json"))

    # Shared BaseAccount keypair. Demo-only: the secret is read from disk once
    # and held for the whole process. Never reuse this pattern for real funds.
    GIF_BASE_ACCOUNT_KEYPAIR = os.getenv(
        "GIF_BASE_ACCOUNT_KEYPAIR", os.path.join(BASE_DIR, "keypair.json")
    )

    # --- Wallet ---
    SOLANA_PRIVATE_KEY = os.getenv("SOLANA_PRIVATE_KEY", "")
    # Stands in for a wallet that already approved this site (silent reconnect)
    WALLET_TRUSTED = _env_flag("WALLET_TRUSTED")
