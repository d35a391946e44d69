"""
Rule registry and rules file loading.

A rules file lists, per registered rule name, the configurations of the
rules to run::

    rules:
      old-serie:
        - time: 2020-01-01T00:08:00Z
          out: stdout
          format: json

``build_rules`` turns a loaded file into rule instances in file order.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tsmrules.rules.base import Rule
from tsmrules.rules.config import StaleSeriesRuleConfig, close_output
from tsmrules.rules.errors import ConfigError, UnknownRuleError

logger = logging.getLogger(__name__)

RULE_CONFIGS: dict[str, type[BaseModel]] = {
    "old-serie": StaleSeriesRuleConfig,
}


class RulesFile(BaseModel):
    """Root model of a rules YAML file."""

    model_config = ConfigDict(extra="forbid")

    rules: dict[str, list[dict[str, Any]]] = Field(
        default_factory=dict,
        description="Rule configurations keyed by rule name",
    )


class RulesLoader:
    """Reads rules files into ``RulesFile`` models."""

    def load(self, path: Path) -> RulesFile:
        """Load a rules file.

        Raises:
            FileNotFoundError: If the file does not exist.
            TypeError: If the YAML root is not a mapping.
            yaml.YAMLError: If the file contains invalid YAML.
            pydantic.ValidationError: If the file does not match ``RulesFile``.
        """
        if not path.exists():
            raise FileNotFoundError(f"Rules file not found: {path}")
        rules_file = self.load_from_string(path.read_text(encoding="utf-8"))
        logger.debug(
            "Loaded rules file %s: %d rule(s)",
            path,
            sum(len(entries) for entries in rules_file.rules.values()),
        )
        return rules_file

    def load_from_string(self, yaml_str: str) -> RulesFile:
        """Load rules from YAML text.

        Raises:
            TypeError: If the YAML root is not a mapping.
            pydantic.ValidationError: If the YAML does not match ``RulesFile``.
        """
        raw = yaml.safe_load(yaml_str)
        if not isinstance(raw, dict):
            raise TypeError(f"Expected YAML mapping, got {type(raw).__name__}")
        return RulesFile.model_validate(raw)


def sample(name: str) -> str:
    """Return the sample configuration of a registered rule.

    Raises:
        UnknownRuleError: If ``name`` is not registered.
    """
    config_cls = RULE_CONFIGS.get(name)
    if config_cls is None:
        raise UnknownRuleError(name)
    return config_cls.sample()


def _build_entry(name: str, index: int, entry: dict[str, Any]) -> Rule:
    config_cls = RULE_CONFIGS[name]
    try:
        config = config_cls.model_validate(entry)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration for {name}[{index}]: {exc}") from exc
    return config.build()


def build_rules(rules_file: RulesFile) -> list[Rule]:
    """Build every rule configured in ``rules_file``.

    If one entry fails, the output files opened for the entries before
    it are closed before the error propagates.

    Raises:
        UnknownRuleError: If a rule name is not registered.
        ConfigError: If an entry is invalid or its rule cannot be built.
    """
    rules: list[Rule] = []
    try:
        for name, entries in rules_file.rules.items():
            if name not in RULE_CONFIGS:
                raise UnknownRuleError(name)
            for index, entry in enumerate(entries):
                rules.append(_build_entry(name, index, entry))
                logger.debug("Built rule %s[%d]", name, index)
    except ConfigError:
        for rule in rules:
            out = getattr(rule, "out", None)
            if out is not None:
                close_output(out)
        raise
    return rules
