"""Kubernetes client bootstrap helpers."""
from __future__ import annotations

import logging

from kubernetes import client, config
from kubernetes.config.config_exception import ConfigException

LOGGER = logging.getLogger(__name__)


def load_kubernetes_config() -> None:
    """Load in-cluster configuration, falling back to the local kubeconfig.

    Raises ``ConfigException`` when neither source is usable.
    """

    try:
        config.load_incluster_config()
        LOGGER.info("Loaded in-cluster Kubernetes configuration")
    except ConfigException:
        LOGGER.debug("In-cluster configuration unavailable; trying local kubeconfig")
        config.load_kube_config()
        LOGGER.info("Loaded local Kubernetes configuration")


def build_core_v1_api() -> client.CoreV1Api:
    load_kubernetes_config()
    return client.CoreV1Api()


__all__ = ["build_core_v1_api", "load_kubernetes_config"]
