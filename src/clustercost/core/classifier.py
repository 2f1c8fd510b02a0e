# src/clustercost/core/classifier.py
"""
Maps a namespace to an environment (production, nonprod, system, unknown)
from its labels and name.
"""

from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from ..models.snapshot import Environment

DEFAULT_LABEL_KEY = "clustercost.io/environment"
DEFAULT_PRODUCTION_NEEDLE = "prod"


@dataclass
class ClassifierConfig:
    """Heuristics used by the EnvironmentClassifier."""

    label_keys: List[str] = field(default_factory=list)
    production_label_values: List[str] = field(default_factory=list)
    nonprod_label_values: List[str] = field(default_factory=list)
    system_label_values: List[str] = field(default_factory=list)
    production_name_contains: List[str] = field(default_factory=list)
    system_namespaces: List[str] = field(default_factory=list)

    @classmethod
    def from_settings(cls, settings) -> "ClassifierConfig":
        """Builds the classifier configuration from a Config instance."""
        return cls(
            label_keys=list(settings.ENV_LABEL_KEYS),
            production_label_values=list(settings.ENV_PRODUCTION_LABEL_VALUES),
            nonprod_label_values=list(settings.ENV_NONPROD_LABEL_VALUES),
            system_label_values=list(settings.ENV_SYSTEM_LABEL_VALUES),
            production_name_contains=list(settings.ENV_PRODUCTION_NAME_CONTAINS),
            system_namespaces=list(settings.ENV_SYSTEM_NAMESPACES),
        )


class EnvironmentClassifier:
    """
    Applies, in order:

    1. the first configured label present with a non-empty value; an
       unrecognized value yields ``unknown`` without looking at the name,
    2. production name needles (substring, case-insensitive),
    3. the system namespace set (exact, case-insensitive),
    4. ``nonprod``.
    """

    def __init__(self, cfg: Optional[ClassifierConfig] = None):
        cfg = cfg or ClassifierConfig()
        self.label_keys = list(cfg.label_keys) or [DEFAULT_LABEL_KEY]

        self.label_values = {}
        for value in cfg.production_label_values:
            self.label_values[value.lower()] = Environment.PRODUCTION
        for value in cfg.nonprod_label_values:
            self.label_values[value.lower()] = Environment.NONPROD
        for value in cfg.system_label_values:
            self.label_values[value.lower()] = Environment.SYSTEM

        self.production_needles = [needle.lower() for needle in cfg.production_name_contains]
        if not self.production_needles:
            self.production_needles = [DEFAULT_PRODUCTION_NEEDLE]
        self.system_namespaces = {ns.lower() for ns in cfg.system_namespaces}

    def classify(self, name: str, labels: Optional[Mapping[str, str]] = None) -> Environment:
        if labels:
            for key in self.label_keys:
                if not key:
                    continue
                value = labels.get(key)
                if value:
                    return self.label_values.get(value.lower(), Environment.UNKNOWN)

        lower_name = (name or "").lower()
        if any(needle and needle in lower_name for needle in self.production_needles):
            return Environment.PRODUCTION
        if lower_name in self.system_namespaces:
            return Environment.SYSTEM
        return Environment.NONPROD
