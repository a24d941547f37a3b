import os
import logging
from dotenv import load_dotenv

load_dotenv()

DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024


def _int_env(name, default):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logging.warning(f"Ignoring non-integer {name}={raw!r}, using {default}")
        return default


def get_data_dir():
    return os.getenv("SOCIALSPARK_DATA_DIR", os.path.join(os.getcwd(), "socialspark_data"))


def get_quota_bytes():
    """Returns the substrate quota in bytes, or None when disabled with 0."""
    quota = _int_env("SOCIALSPARK_QUOTA_BYTES", DEFAULT_QUOTA_BYTES)
    return quota if quota > 0 else None


def get_posts_per_page():
    return max(1, _int_env("SOCIALSPARK_POSTS_PER_PAGE", 5))


def get_log_level():
    return os.getenv("SOCIALSPARK_LOG_LEVEL", "INFO").upper()


def configure_logging():
    logging.basicConfig(
        level=get_log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
