import math
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional

# Binary suffixes are checked first so "Mi" is never read as "M" + "i".
_BINARY_SUFFIXES = {
    "Ki": Decimal(1024),
    "Mi": Decimal(1024) ** 2,
    "Gi": Decimal(1024) ** 3,
    "Ti": Decimal(1024) ** 4,
    "Pi": Decimal(1024) ** 5,
    "Ei": Decimal(1024) ** 6,
}
_DECIMAL_SUFFIXES = {
    "n": Decimal("0.000000001"),
    "u": Decimal("0.000001"),
    "m": Decimal("0.001"),
    "k": Decimal(1000),
    "M": Decimal(1000) ** 2,
    "G": Decimal(1000) ** 3,
    "T": Decimal(1000) ** 4,
    "P": Decimal(1000) ** 5,
    "E": Decimal(1000) ** 6,
}


def parse_quantity(quantity) -> Decimal:
    """
    Parse a Kubernetes resource quantity ("500m", "4Gi", "2", "1e3") to Decimal.
    Unparseable or empty values yield 0.
    """
    if quantity is None:
        return Decimal(0)
    if isinstance(quantity, (int, float, Decimal)):
        return Decimal(quantity)

    text = str(quantity).strip()
    if not text:
        return Decimal(0)

    multiplier = Decimal(1)
    if text[-2:] in _BINARY_SUFFIXES:
        multiplier = _BINARY_SUFFIXES[text[-2:]]
        text = text[:-2]
    elif text[-1] in _DECIMAL_SUFFIXES:
        multiplier = _DECIMAL_SUFFIXES[text[-1]]
        text = text[:-1]

    try:
        return Decimal(text) * multiplier
    except InvalidOperation:
        return Decimal(0)


def milli_value(quantity) -> int:
    """Quantity expressed in thousandths, rounded up (CPU millicores)."""
    return int(math.ceil(parse_quantity(quantity) * 1000))


def int_value(quantity) -> int:
    """Quantity as a whole number, rounded up (memory bytes)."""
    return int(math.ceil(parse_quantity(quantity)))


def resource_milli(resources: Optional[Mapping], name: str) -> int:
    """CPU-style lookup of ``name`` in a resource list, 0 when absent."""
    if not resources:
        return 0
    return milli_value(resources.get(name))


def resource_value(resources: Optional[Mapping], name: str) -> int:
    """Memory-style lookup of ``name`` in a resource list, 0 when absent."""
    if not resources:
        return 0
    return int_value(resources.get(name))


# --- Region detection helpers ---

REGION_LABELS = ("topology.kubernetes.io/region", "failure-domain.beta.kubernetes.io/region")
ZONE_LABELS = ("topology.kubernetes.io/zone", "failure-domain.beta.kubernetes.io/zone")
_PROVIDER_ID_PREFIXES = ("aws://", "gce://", "gke://", "ibm://")


def region_from_zone(zone: str) -> str:
    """Strips the trailing availability-zone letter: 'us-east-1a' -> 'us-east-1'."""
    if not zone:
        return ""
    idx = zone.rfind("-")
    if idx > 0:
        suffix = zone[idx + 1 :]
        if len(suffix) == 1 and "a" <= suffix <= "z":
            return zone[:idx]
    last = zone[-1]
    if "a" <= last <= "z" and len(zone) > 1:
        return zone[:-1]
    return ""


def region_from_provider_id(provider_id: Optional[str]) -> str:
    """Reads the zone segment of a cloud providerID, e.g. aws:///us-east-1a/i-0abc."""
    provider_id = (provider_id or "").strip()
    if not provider_id.startswith(_PROVIDER_ID_PREFIXES):
        return ""
    parts = provider_id.split("/")
    if len(parts) >= 4:
        return region_from_zone(parts[3])
    return ""


def region_from_node(labels: Optional[Mapping[str, str]], provider_id: Optional[str] = None) -> str:
    """Best-effort region for a single node, empty string if unknown."""
    labels = labels or {}
    for key in REGION_LABELS:
        value = (labels.get(key) or "").strip()
        if value:
            return value
    for key in ZONE_LABELS:
        zone = (labels.get(key) or "").strip()
        if zone:
            region = region_from_zone(zone)
            if region:
                return region
    return region_from_provider_id(provider_id)


def detect_cluster_region(nodes) -> str:
    """First region derivable from any node's labels or providerID, or ''."""
    for node in nodes:
        labels = node.metadata.labels if node.metadata else None
        provider_id = node.spec.provider_id if node.spec else None
        region = region_from_node(labels, provider_id)
        if region:
            return region
    return ""


# --- Cluster name detection ---

CLUSTER_NAME_LABELS = ("alpha.eksctl.io/cluster-name", "cluster.x-k8s.io/cluster-name")


def detect_cluster_name(nodes) -> str:
    """Cluster name advertised by eksctl or Cluster API node labels, or ''."""
    for node in nodes:
        labels = (node.metadata.labels if node.metadata else None) or {}
        for key in CLUSTER_NAME_LABELS:
            value = (labels.get(key) or "").strip()
            if value:
                return value
    return ""
