# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Subcommand handlers for the relpub CLI.

Each handler loads its configuration, runs one operation and turns the
outcome into an exit code. Failures are reported as log records carrying the
name of the step that failed. No print() calls.
"""

import argparse
import logging
import platform
from pathlib import Path
from typing import Optional

from relpub.cli.exit_codes import CONFIG_ERROR, RUNTIME_ERROR, SUCCESS, VALIDATION_ERROR
from relpub.config.exceptions import ConfigError, ConfigMissingError
from relpub.config.loader import load_publish_config, load_verify_config
from relpub.config.schema import LoggingConfig, StorageConfig
from relpub.logging.logger import configure_logging, get_logger
from relpub.release.exceptions import PublishError, VerificationError
from relpub.release.storage.backend import ObjectStore, StorageError
from relpub.release.storage.s3 import S3ObjectStore


def _config_path(args: argparse.Namespace) -> Optional[Path]:
    return Path(args.config) if args.config is not None else None


def _command_logger(
    args: argparse.Namespace,
    command_name: str,
    settings: Optional[LoggingConfig] = None,
) -> logging.Logger:
    """
    Configure every relpub logger and return the command's own.

    --log-level beats the config file's level; the config file's log_file
    receives the records of all modules, not just the CLI's.
    """
    level = args.log_level
    log_file = None
    if settings is not None:
        level = level or settings.log_level
        log_file = Path(settings.log_file) if settings.log_file else None
    configure_logging(level or "INFO", log_file)
    return get_logger(f"relpub.cli.{command_name}")


def _report_config_error(logger: logging.Logger, command_name: str, err: ConfigError) -> int:
    if isinstance(err, ConfigMissingError):
        for name in err.missing:
            logger.error(f"{name} is not set", extra={"command": command_name, "variable": name})
    else:
        logger.error(
            "Configuration error",
            extra={"command": command_name, "error": str(err)},
        )
    return CONFIG_ERROR


def open_store(storage: StorageConfig) -> ObjectStore:
    """Object store for the configured bucket. Tests replace this."""
    return S3ObjectStore.from_config(storage)


def handle_publish(args: argparse.Namespace) -> int:
    """Upload the artifact and update the manifest."""
    logger = _command_logger(args, "publish")
    try:
        config = load_publish_config(_config_path(args))
    except ConfigError as err:
        return _report_config_error(logger, "publish", err)

    logger = _command_logger(args, "publish", config.logging)
    logger.info(
        "Publishing",
        extra={
            "app_id": config.target.app_id,
            "channel": config.target.channel,
            "platform": config.target.platform,
            "version": config.release.version,
            "dry_run": args.dry_run,
        },
    )

    from relpub.release.publisher import publish_release

    try:
        store = open_store(config.storage)
        result = publish_release(config, store, dry_run=args.dry_run)
    except StorageError as err:
        logger.error("Publish failed", extra={"step": "connect", "error": str(err)})
        return RUNTIME_ERROR
    except PublishError as err:
        logger.error("Publish failed", extra={"step": err.step, "error": str(err)})
        return RUNTIME_ERROR

    logger.info(
        "Publish complete",
        extra={
            "checksum": result.checksum,
            "artifact_key": result.artifact_key,
            "manifest_key": result.manifest_key,
            "dry_run": result.dry_run,
        },
    )
    return SUCCESS


def handle_verify(args: argparse.Namespace) -> int:
    """Check that the published artifact matches its manifest entry."""
    logger = _command_logger(args, "verify")
    try:
        config = load_verify_config(_config_path(args))
    except ConfigError as err:
        return _report_config_error(logger, "verify", err)

    logger = _command_logger(args, "verify", config.logging)

    from relpub.release.verification import verify_release

    try:
        store = open_store(config.storage)
        report = verify_release(config, store)
    except StorageError as err:
        logger.error("Verification failed", extra={"step": "connect", "error": str(err)})
        return RUNTIME_ERROR
    except VerificationError as err:
        logger.error("Verification failed", extra={"step": err.step, "error": str(err)})
        return VALIDATION_ERROR
    except PublishError as err:
        logger.error("Verification failed", extra={"step": err.step, "error": str(err)})
        return RUNTIME_ERROR

    logger.info(
        "Verification passed",
        extra={
            "channel": report.channel,
            "platform": report.platform,
            "version": report.version,
            "checksum": report.checksum,
        },
    )
    return SUCCESS


def handle_info(args: argparse.Namespace) -> int:
    """Log the package version and interpreter details."""
    logger = _command_logger(args, "info")

    from relpub import __version__

    logger.info(
        "System information",
        extra={
            "relpub_version": __version__,
            "python_version": platform.python_version(),
            "platform": platform.system(),
            "architecture": platform.machine(),
            "config": args.config,
        },
    )
    return SUCCESS
