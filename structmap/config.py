"""
Decoder configuration (``structmap.config``).

Responsibility
--------------
Loads a YAML document into a frozen ``DecoderConfig`` and assembles a
``Decoder`` with the built-in steps it names. Applications that build their
pipeline in code do not need this module.

File shape
----------
::

    structmap:
      tag: structmap          # tag key read by naming and flag steps
      naming: [tag, snake]    # tried in order (name.discovery)
      default: default        # tag key holding defaults; null disables
      required: true
      optional: true
      no_embedded: true
      cast: true
      log_level: WARNING

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown keys or wrong value types  -> ``ConfigError``.
* Unknown naming strategy  -> ``UnknownStepError``.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from structmap.behavior import cast, default, flag, name
from structmap.behavior.cast import Caster
from structmap.decoder import Decoder
from structmap.exceptions import ConfigError, UnknownStepError
from structmap.logging_config import configure_logging, get_logger
from structmap.types import MutationStep

logger = get_logger("config")

SECTION = "structmap"


@dataclass(frozen=True)
class DecoderConfig:
    """Pipeline configuration. Immutable once loaded."""

    tag: str = "structmap"
    naming: tuple[str, ...] = ("tag",)
    default: str | None = "default"
    required: bool = True
    optional: bool = True
    no_embedded: bool = True
    cast: bool = True
    log_level: str = "WARNING"


def _naming_steps(tag: str) -> dict[str, MutationStep]:
    return {
        "tag": name.from_tag(tag),
        "json": name.from_tag("json"),
        "snake": name.snake_case,
        "camel": name.camel_case,
        "pascal": name.pascal_case,
        "noop": name.noop,
    }


NAMING_STRATEGIES: tuple[str, ...] = tuple(_naming_steps(""))


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file; an empty file yields an empty dict."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping, got {type(data).__name__}")
    return data


def parse_config(data: Mapping[str, Any]) -> DecoderConfig:
    """Build a DecoderConfig from the ``structmap`` section of `data`."""
    section = data.get(SECTION, {}) or {}
    if not isinstance(section, Mapping):
        raise ConfigError(f"'{SECTION}' section must be a mapping")

    known = {f.name: f for f in dataclasses.fields(DecoderConfig)}
    unknown = sorted(set(section) - set(known))
    if unknown:
        raise ConfigError(f"Unknown {SECTION} settings: {', '.join(unknown)}")

    kwargs: dict[str, Any] = {}
    for key, raw in section.items():
        if key == "naming":
            if not isinstance(raw, (str, list, tuple)):
                raise ConfigError(f"'naming' must be a strategy or a list of them, got {raw!r}")
            strategies = (raw,) if isinstance(raw, str) else tuple(raw)
            for strategy in strategies:
                if strategy not in NAMING_STRATEGIES:
                    raise UnknownStepError("naming strategy", str(strategy), NAMING_STRATEGIES)
            if not strategies:
                raise ConfigError("'naming' needs at least one strategy")
            kwargs[key] = strategies
        elif key in ("required", "optional", "no_embedded", "cast"):
            if not isinstance(raw, bool):
                raise ConfigError(f"'{key}' must be true or false, got {raw!r}")
            kwargs[key] = raw
        elif key == "default":
            if raw is not None and not isinstance(raw, str):
                raise ConfigError(f"'default' must be a tag key or null, got {raw!r}")
            kwargs[key] = raw
        elif key == "log_level":
            if not isinstance(logging.getLevelName(str(raw).upper()), int):
                raise ConfigError(f"'log_level' is not a logging level: {raw!r}")
            kwargs[key] = str(raw).upper()
        else:
            if not isinstance(raw, str) or not raw:
                raise ConfigError(f"'{key}' must be a non-empty string, got {raw!r}")
            kwargs[key] = raw

    return DecoderConfig(**kwargs)


def load_config(path: Path) -> DecoderConfig:
    """Load a DecoderConfig from a YAML file."""
    config = parse_config(load_yaml_file(path))
    logger.info(
        "decoder_config_loaded",
        extra={"path": str(path), "tag": config.tag, "naming": list(config.naming)},
    )
    return config


def build_decoder(
    config: DecoderConfig | None = None,
    casters: Mapping[type, Caster] | None = None,
) -> Decoder:
    """Assemble the built-in steps in canonical order: naming, default, flags, cast."""
    config = config or DecoderConfig()
    strategies = _naming_steps(config.tag)
    naming = [strategies[s] for s in config.naming]

    steps: list[MutationStep] = [naming[0] if len(naming) == 1 else name.discovery(*naming)]
    if config.default:
        steps.append(default.from_tag(config.default))
    if config.required:
        steps.append(flag.required(config.tag))
    if config.optional:
        steps.append(flag.optional(config.tag))
    if config.no_embedded:
        steps.append(flag.no_embedded(config.tag))
    if config.cast:
        steps.append(cast.to_type(casters))
    return Decoder(*steps)


def decoder_from_file(
    path: Path, casters: Mapping[type, Caster] | None = None
) -> Decoder:
    """Load `path`, configure structmap logging at its level, build the decoder."""
    config = load_config(path)
    configure_logging(level=config.log_level)
    return build_decoder(config, casters)
