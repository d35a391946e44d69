"""
tsmrules CLI - inspect and run rule configurations.

Commands:
    tsmrules sample        Print sample configuration for registered rules
    tsmrules check-config  Build every rule in a rules file
    tsmrules replay        Feed a recorded block dump through configured rules
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import click
import yaml
from pydantic import ValidationError

from tsmrules.config import get_settings
from tsmrules.logger import configure_logging
from tsmrules.rules.base import Rule
from tsmrules.rules.errors import ConfigError
from tsmrules.rules.registry import RULE_CONFIGS, RulesLoader, build_rules, sample as rule_sample
from tsmrules.storage.types import ShardInfo, Value

logger = logging.getLogger(__name__)


def _load_rules(config: Optional[str]) -> list[Rule]:
    path = config or get_settings().rules_file
    if not path:
        raise click.UsageError("No rules file given (use --config or TSMRULES_RULES_FILE)")
    try:
        rules_file = RulesLoader().load(Path(path))
        return build_rules(rules_file)
    except (FileNotFoundError, TypeError, yaml.YAMLError, ValidationError) as exc:
        raise click.ClickException(f"Cannot load rules file {path}: {exc}") from exc
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc


def _parse_block(line: str, lineno: int) -> tuple[bytes, list[Value]]:
    try:
        record = json.loads(line)
        key = record["key"].encode("utf-8")
        values = [Value(unix_nano=int(ts)) for ts in record["timestamps"]]
    except (ValueError, KeyError, TypeError, AttributeError) as exc:
        raise click.ClickException(f"Malformed block on line {lineno}: {exc}") from exc
    return key, values


@click.group()
@click.version_option(package_name="tsmrules")
def main():
    """tsmrules - rules applied to time-series storage blocks."""
    settings = get_settings()
    configure_logging(level=settings.log_level, fmt=settings.log_format)


@main.command()
@click.argument("rule", required=False)
def sample(rule: Optional[str]):
    """Print the sample configuration of RULE (all rules if omitted)."""
    names = [rule] if rule else sorted(RULE_CONFIGS)
    for name in names:
        try:
            click.echo(rule_sample(name))
        except ConfigError as exc:
            raise click.ClickException(str(exc)) from exc


@main.command("check-config")
@click.argument("config", type=click.Path(dir_okay=False))
def check_config(config: str):
    """Build every rule configured in CONFIG."""
    rules = _load_rules(config)
    click.echo(f"{len(rules)} rule(s) built from {config}")


@main.command()
@click.argument("dump", type=click.File("r"))
@click.option("--config", "-c", type=click.Path(dir_okay=False), help="Rules file")
def replay(dump, config: Optional[str]):
    """Apply the blocks recorded in DUMP to the configured rules.

    DUMP holds one JSON object per line:
    {"key": "<series>#!~#<field>", "timestamps": [<ns>, ...]}
    """
    rules = _load_rules(config)
    for rule in rules:
        rule.start()
        rule.start_shard(ShardInfo(id=0, path=dump.name))

    blocks = 0
    for lineno, line in enumerate(dump, start=1):
        if not line.strip():
            continue
        key, values = _parse_block(line, lineno)
        for rule in rules:
            rule.apply(key, values)
        blocks += 1

    for rule in rules:
        err = rule.end_shard()
        if err is not None:
            raise click.ClickException(f"Shard aborted: {err}")
        rule.end()
        out = getattr(rule, "out", None)
        if out is not None:
            out.flush()
    logger.debug("Replayed %d block(s) through %d rule(s)", blocks, len(rules))


if __name__ == "__main__":
    main()
