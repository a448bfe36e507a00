"""The Kubernetes context segment."""

import os
import re
from dataclasses import dataclass, field

import yaml

from .segment import Segment
from .themes import home_env_name

KUBE_ICON = "\u2388"
_EKS_ARN = re.compile(r"arn:aws:eks:[A-Za-z0-9-]+:[0-9]+:cluster/(.*)")


@dataclass
class KubeContext:
    """One named context of a kubeconfig file."""

    name: str = ""
    cluster: str = ""
    namespace: str = ""
    user: str = ""


@dataclass
class KubeConfig:
    """The parts of a kubeconfig file the prompt cares about."""

    contexts: list = field(default_factory=list)
    current_context: str = ""


def _as_str(value, label):
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    raise ValueError(f"{label}: expected a string")


def _mapping(value, label):
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{label}: expected a mapping")
    return value


def _context_from(entry):
    entry = _mapping(entry, "contexts[]")
    inner = _mapping(entry.get("context"), "context")
    return KubeContext(
        name=_as_str(entry.get("name"), "name"),
        cluster=_as_str(inner.get("cluster"), "cluster"),
        namespace=_as_str(inner.get("namespace"), "namespace"),
        user=_as_str(inner.get("user"), "user"),
    )


def read_kube_config(path):
    """Parse the kubeconfig file at *path*; raises OSError or ValueError on failure."""
    with open(os.path.abspath(path), encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle)
        except yaml.YAMLError as exc:
            raise ValueError(f"{path}: {exc}") from exc
    data = _mapping(data, "kubeconfig")
    contexts = data.get("contexts")
    if contexts is None:
        contexts = []
    elif not isinstance(contexts, list):
        raise ValueError("contexts: expected a list")
    return KubeConfig(
        contexts=[_context_from(entry) for entry in contexts],
        current_context=_as_str(data.get("current-context"), "current-context"),
    )


def shorten_cluster_name(cluster, shorten_gke=False, shorten_eks=False):
    """Drop the project and zone of GKE names and the ARN prefix of EKS names."""
    if shorten_gke and cluster.startswith("gke"):
        parts = cluster.split("_")
        if len(parts) > 3:
            cluster = "_".join(parts[3:])
    if shorten_eks:
        match = _EKS_ARN.fullmatch(cluster)
        if match:
            cluster = match.group(1)
    return cluster


def _merged_config():
    home = os.environ.get(home_env_name(), "")
    paths = os.environ.get("KUBECONFIG", "").split(":")
    paths.append(os.path.join(home, ".kube", "config"))
    merged = KubeConfig()
    for path in paths:
        try:
            config = read_kube_config(path)
        except (OSError, ValueError):
            continue
        merged.contexts.extend(config.contexts)
        if not merged.current_context:
            merged.current_context = config.current_context
    return merged


def segment_kube(p):
    """Segments for the current Kubernetes cluster and namespace."""
    config = _merged_config()
    cluster = ""
    namespace = ""
    for context in config.contexts:
        if context.name == config.current_context:
            cluster = context.name
            namespace = context.namespace
            break

    cluster = shorten_cluster_name(cluster, p.cfg.shorten_gke_names, p.cfg.shorten_eks_names)

    segments = []
    if cluster:
        segments.append(
            Segment(
                name="kube-cluster",
                content=f"{KUBE_ICON} {cluster}",
                foreground=p.theme.kube_cluster_fg,
                background=p.theme.kube_cluster_bg,
            )
        )
    if namespace:
        content = namespace if cluster else f"{KUBE_ICON} {namespace}"
        segments.append(
            Segment(
                name="kube-namespace",
                content=content,
                foreground=p.theme.kube_namespace_fg,
                background=p.theme.kube_namespace_bg,
            )
        )
    return segments