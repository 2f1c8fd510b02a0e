# src/clustercost/core/config.py

import json
import logging
import os
from typing import Dict, List, Tuple

from dotenv import load_dotenv

from .exceptions import ConfigurationError

# Load environment variables from a .env file located in the project root
dotenv_path = os.path.join(os.path.dirname(__file__), "..", "..", "..", ".env")
load_dotenv(dotenv_path=dotenv_path)

logger = logging.getLogger(__name__)

MIN_SCRAPE_INTERVAL_SECONDS = 5
PLACEHOLDER_CLUSTER_NAME = "kubernetes"
UNKNOWN_CLUSTER_NAME = "unknown"

DEFAULT_ENV_LABEL_KEYS = ["clustercost.io/environment"]
DEFAULT_PRODUCTION_LABEL_VALUES = ["production", "prod"]
DEFAULT_NONPROD_LABEL_VALUES = ["nonprod", "staging", "dev", "test"]
DEFAULT_SYSTEM_LABEL_VALUES = ["system"]
DEFAULT_PRODUCTION_NAME_CONTAINS = ["prod"]
DEFAULT_SYSTEM_NAMESPACES = [
    "kube-system",
    "monitoring",
    "logging",
    "ingress",
    "istio-system",
    "linkerd",
    "cert-manager",
]


def _get_list(key: str, default: List[str]) -> List[str]:
    """Reads a comma-separated list, ignoring blank items."""
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def _get_int(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer value %r for %s; using %s", raw, key, default)
        return default


def _get_float(key: str, default: float) -> float:
    raw = os.getenv(key)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric value %r for %s; using %s", raw, key, default)
        return default


def _is_placeholder(name: str) -> bool:
    return not name or name == PLACEHOLDER_CLUSTER_NAME


def resolve_cluster_identity(cluster_name: str, cluster_id: str, detected_name: str = "") -> Tuple[str, str]:
    """
    Replaces the placeholder cluster name with the detected one, or "unknown".

    A cluster id left at the placeholder follows the resolved name; explicit
    values are never overridden.
    """
    if not _is_placeholder(cluster_name):
        return cluster_name, cluster_id
    if detected_name:
        cluster_name = detected_name
    else:
        logger.info("Cluster name not configured or detected; using '%s'.", UNKNOWN_CLUSTER_NAME)
        cluster_name = UNKNOWN_CLUSTER_NAME
    if _is_placeholder(cluster_id):
        cluster_id = cluster_name
    return cluster_name, cluster_id


class Config:
    """
    Handles the agent's configuration by loading values from environment variables.

    Values are resolved when the instance is created, so tests and the CLI can
    build a fresh Config after changing the environment.
    """

    def __init__(self):
        # --- Cluster identity ---
        self.CLUSTER_NAME = os.getenv("CLUSTERCOST_CLUSTER_NAME", PLACEHOLDER_CLUSTER_NAME)
        self.CLUSTER_ID = os.getenv("CLUSTERCOST_CLUSTER_ID", "") or self.CLUSTER_NAME
        self.KUBECONFIG = os.getenv("CLUSTERCOST_KUBECONFIG") or None

        # --- Logging variables ---
        self.LOG_LEVEL = os.getenv("CLUSTERCOST_LOG_LEVEL", "INFO")

        # --- Loop variables ---
        self.SCRAPE_INTERVAL_SECONDS = _get_int("CLUSTERCOST_SCRAPE_INTERVAL", 60)
        if self.SCRAPE_INTERVAL_SECONDS < MIN_SCRAPE_INTERVAL_SECONDS:
            logger.warning(
                "Scrape interval %ss is below the minimum; using %ss.",
                self.SCRAPE_INTERVAL_SECONDS,
                MIN_SCRAPE_INTERVAL_SECONDS,
            )
            self.SCRAPE_INTERVAL_SECONDS = MIN_SCRAPE_INTERVAL_SECONDS
        self.CACHE_SYNC_TIMEOUT = _get_float("CLUSTERCOST_CACHE_SYNC_TIMEOUT", 120.0)
        self.METRICS_TIMEOUT = _get_float("CLUSTERCOST_METRICS_TIMEOUT", 15.0)

        # --- API variables ---
        self.API_HOST = os.getenv("CLUSTERCOST_API_HOST", "0.0.0.0")
        self.API_PORT = _get_int("CLUSTERCOST_API_PORT", 8080)

        # --- Pricing variables ---
        self.REGION = os.getenv("CLUSTERCOST_REGION", "us-east-1")
        self.DEFAULT_NODE_PRICE = _get_float("CLUSTERCOST_DEFAULT_NODE_PRICE", 0.1)
        self.INSTANCE_PRICES_RAW = self._get_secret("CLUSTERCOST_INSTANCE_PRICES", "")

        # --- Environment classification ---
        self.ENV_LABEL_KEYS = _get_list("CLUSTERCOST_ENV_LABEL_KEYS", DEFAULT_ENV_LABEL_KEYS)
        self.ENV_PRODUCTION_LABEL_VALUES = _get_list(
            "CLUSTERCOST_ENV_PRODUCTION_VALUES", DEFAULT_PRODUCTION_LABEL_VALUES
        )
        self.ENV_NONPROD_LABEL_VALUES = _get_list("CLUSTERCOST_ENV_NONPROD_VALUES", DEFAULT_NONPROD_LABEL_VALUES)
        self.ENV_SYSTEM_LABEL_VALUES = _get_list("CLUSTERCOST_ENV_SYSTEM_VALUES", DEFAULT_SYSTEM_LABEL_VALUES)
        self.ENV_PRODUCTION_NAME_CONTAINS = _get_list(
            "CLUSTERCOST_ENV_PRODUCTION_NAME_CONTAINS", DEFAULT_PRODUCTION_NAME_CONTAINS
        )
        self.ENV_SYSTEM_NAMESPACES = _get_list("CLUSTERCOST_ENV_SYSTEM_NAMESPACES", DEFAULT_SYSTEM_NAMESPACES)

    @staticmethod
    def _get_secret(key: str, default: str = None) -> str:
        """
        Retrieves a value from a mounted file (ConfigMap/Secret volume) or falls back
        to the environment variable.

        Raises:
            PermissionError: If the file exists but cannot be read due to permissions.
            IOError: If the file exists but cannot be read due to I/O errors.
        """
        secret_file = f"/etc/clustercost/secrets/{key}"
        if os.path.exists(secret_file):
            try:
                with open(secret_file, "r") as f:
                    value = f.read().strip()
                    logger.debug(f"Loaded '{key}' from {secret_file}")
                    return value
            except PermissionError as e:
                raise PermissionError(
                    f"Secret file '{secret_file}' exists but cannot be read due to permission denied. "
                    f"Please check file permissions or run with appropriate privileges."
                ) from e
            except (IOError, OSError) as e:
                raise IOError(
                    f"Secret file '{secret_file}' exists but cannot be read: {e}. "
                    f"Please check the file integrity and system resources."
                ) from e
        return os.getenv(key, default)

    @property
    def INSTANCE_PRICES(self) -> Dict[str, float]:
        """Instance type -> hourly price, parsed from a JSON object."""
        raw = (self.INSTANCE_PRICES_RAW or "").strip()
        if not raw:
            return {}
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"CLUSTERCOST_INSTANCE_PRICES is not valid JSON: {e}") from e
        if not isinstance(parsed, dict):
            raise ConfigurationError("CLUSTERCOST_INSTANCE_PRICES must be a JSON object.")
        prices = {}
        for instance_type, price in parsed.items():
            try:
                prices[str(instance_type)] = float(price)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"Price for instance type '{instance_type}' is not a number.") from e
        return prices

    def validate_instance(self):
        if self.DEFAULT_NODE_PRICE < 0:
            raise ConfigurationError("CLUSTERCOST_DEFAULT_NODE_PRICE must be non-negative.")
        if not 0 < self.API_PORT < 65536:
            raise ConfigurationError("CLUSTERCOST_API_PORT must be a valid TCP port.")
        if self.CACHE_SYNC_TIMEOUT <= 0:
            raise ConfigurationError("CLUSTERCOST_CACHE_SYNC_TIMEOUT must be positive.")
        if self.METRICS_TIMEOUT <= 0:
            raise ConfigurationError("CLUSTERCOST_METRICS_TIMEOUT must be positive.")
        # Parse eagerly so malformed JSON fails at startup.
        self.INSTANCE_PRICES


# Instantiate the config to be imported by other modules
config = Config()
