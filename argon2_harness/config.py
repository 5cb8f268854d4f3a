import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

# Fixed defaults of the command-line harness
T_COST_DEF = 3
LOG_M_COST_DEF = 12  # 4 MB
LANES_DEF = 4
THREADS_DEF = 4
PWD_DEF = "password"
TYPE_DEF = "i"

KAT_FILENAME_DEF = "kat-argon2.log"
ENCODED_CAPACITY_DEF = 300


@dataclass
class Settings:
    """Runtime settings read from the environment (and .env)"""
    kat_filename: str = KAT_FILENAME_DEF
    encoded_capacity: int = ENCODED_CAPACITY_DEF
    cpu_ghz: float = 1.0
    log_level: str = "WARNING"
    log_json: bool = False


def load_settings() -> Settings:
    """Read settings from the environment on every call so tests can monkeypatch."""
    return Settings(
        kat_filename=os.getenv('ARGON2_KAT_FILENAME', KAT_FILENAME_DEF),
        encoded_capacity=int(os.getenv('ARGON2_ENCODED_CAPACITY', ENCODED_CAPACITY_DEF)),
        cpu_ghz=float(os.getenv('ARGON2_CPU_GHZ', 1.0)),
        log_level=os.getenv('ARGON2_LOG_LEVEL', 'WARNING').upper(),
        log_json=os.getenv('ARGON2_LOG_JSON', '0') in ('1', 'true', 'yes'),
    )
