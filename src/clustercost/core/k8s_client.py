import asyncio
import logging
import typing

from kubernetes_asyncio import client, config

logger = logging.getLogger(__name__)

# Global lock to prevent race conditions during config loading
_CONFIG_LOCK = asyncio.Lock()
_CONFIG_LOADED = False


async def ensure_k8s_config(kubeconfig: typing.Optional[str] = None) -> bool:
    """
    Ensures that the Kubernetes configuration is loaded exactly once.

    An explicit kubeconfig path takes precedence; otherwise the in-cluster
    service account is tried before the default local kubeconfig.

    Returns:
        bool: True if config was loaded successfully (or was already loaded), False otherwise.
    """
    global _CONFIG_LOADED

    if _CONFIG_LOADED:
        return True

    async with _CONFIG_LOCK:
        # Double-check locking pattern
        if _CONFIG_LOADED:
            return True

        if kubeconfig:
            try:
                await config.load_kube_config(config_file=kubeconfig)
                logger.info("Loaded Kubernetes configuration from %s.", kubeconfig)
                _CONFIG_LOADED = True
                return True
            except config.ConfigException as e:
                logger.warning("Could not load kubeconfig %s: %s", kubeconfig, e)
                return False

        try:
            logger.debug("Attempting to load in-cluster Kubernetes config...")
            config.load_incluster_config()
            logger.info("Loaded in-cluster Kubernetes configuration.")
            _CONFIG_LOADED = True
            return True
        except config.ConfigException:
            logger.debug("In-cluster config not found.")

        try:
            logger.debug("Attempting to load local kubeconfig...")
            await config.load_kube_config()
            logger.info("Loaded Kubernetes configuration from kubeconfig file.")
            _CONFIG_LOADED = True
            return True
        except config.ConfigException:
            logger.warning("Could not find kubeconfig file.")

    logger.warning("Failed to load any Kubernetes configuration.")
    return False


async def get_api_client(kubeconfig: typing.Optional[str] = None) -> typing.Optional[client.ApiClient]:
    """
    Returns a configured ApiClient shared by the core and metrics APIs, or None
    when no configuration could be loaded. The caller owns and closes it.
    """
    if await ensure_k8s_config(kubeconfig):
        return client.ApiClient()
    return None
