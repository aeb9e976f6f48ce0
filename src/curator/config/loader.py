"""Configuration loader with validation and state machine."""

import hashlib
import json
import time
from pathlib import Path
from typing import TYPE_CHECKING, TypeVar

import structlog
import yaml
from pydantic import BaseModel, ValidationError

from curator.config.error_hints import format_validation_error
from curator.config.schemas.catalog import CatalogConfig
from curator.config.schemas.policy import PolicyConfig
from curator.config.schemas.taxonomy import TaxonomyConfig
from curator.config.state_machine import ConfigState, ConfigStateMachine


if TYPE_CHECKING:
    from curator.config.effective import EffectiveConfig

logger = structlog.get_logger()

ModelT = TypeVar("ModelT", bound=BaseModel)


class ConfigLoader:
    """Loads and validates the taxonomy, catalog and policy files.

    Follows UNLOADED -> LOADING -> VALIDATED -> READY. A loader is single
    use; the returned EffectiveConfig is immutable.
    """

    def __init__(self, run_id: str) -> None:
        """Initialize the loader.

        Args:
            run_id: Identifier for the current run, used in logs.
        """
        self._run_id = run_id
        self._state_machine = ConfigStateMachine()
        self._file_checksums: dict[str, str] = {}
        self._validation_errors: list[dict[str, str]] = []
        self._validation_duration_ms: float = 0

    @property
    def state(self) -> ConfigState:
        """Current loader state."""
        return self._state_machine.state

    @property
    def file_checksums(self) -> dict[str, str]:
        """SHA-256 checksums of loaded files, keyed by resolved path."""
        return self._file_checksums.copy()

    @property
    def validation_errors(self) -> list[dict[str, str]]:
        """Validation errors collected by the last load."""
        return self._validation_errors.copy()

    @property
    def validation_duration_ms(self) -> float:
        """Time spent loading and validating, in milliseconds."""
        return self._validation_duration_ms

    def _read_file(self, file_path: Path) -> tuple[object, str]:
        """Read a YAML or JSON file and compute its checksum.

        Raises:
            FileNotFoundError: If the file does not exist.
            yaml.YAMLError: If YAML parsing fails.
            json.JSONDecodeError: If JSON parsing fails.
        """
        content_bytes = file_path.read_bytes()
        checksum = hashlib.sha256(content_bytes).hexdigest()
        content_str = content_bytes.decode("utf-8")
        if file_path.suffix.lower() == ".json":
            parsed: object = json.loads(content_str)
        else:
            parsed = yaml.safe_load(content_str)
        return ({} if parsed is None else parsed), checksum

    def _load_model(
        self,
        file_path: Path,
        model: type[ModelT],
        file_type: str,
        log: structlog.stdlib.BoundLogger,
    ) -> ModelT:
        log.info("loading_config_file", file_path=str(file_path), file_type=file_type)
        data, checksum = self._read_file(file_path)
        self._file_checksums[str(file_path.resolve())] = checksum
        loaded = model.model_validate(data)
        log.info(
            "config_file_loaded",
            file_path=str(file_path),
            file_type=file_type,
            file_sha256=checksum,
        )
        return loaded

    def load(
        self,
        taxonomy_path: Path,
        catalog_path: Path | None = None,
        policy_path: Path | None = None,
    ) -> "EffectiveConfig":
        """Load and validate configuration files.

        The catalog defaults to empty and the policy to built-in defaults
        when their paths are omitted.

        Args:
            taxonomy_path: Path to the taxonomy file.
            catalog_path: Optional path to the feed catalog.
            policy_path: Optional path to the policy file.

        Returns:
            The validated, immutable configuration.

        Raises:
            ValidationError: If a file does not match its schema.
            FileNotFoundError: If a file is missing.
            yaml.YAMLError: If a YAML file cannot be parsed.
            json.JSONDecodeError: If a JSON file cannot be parsed.
            ConfigStateError: If the loader was already used.
        """
        from curator.config.effective import EffectiveConfig

        start_time = time.perf_counter()
        self._state_machine.transition(ConfigState.LOADING)
        log = logger.bind(run_id=self._run_id, component="config", phase="LOADING")

        try:
            taxonomy = self._load_model(taxonomy_path, TaxonomyConfig, "taxonomy", log)
            catalog = (
                self._load_model(catalog_path, CatalogConfig, "catalog", log)
                if catalog_path is not None
                else CatalogConfig()
            )
            policy = (
                self._load_model(policy_path, PolicyConfig, "policy", log)
                if policy_path is not None
                else PolicyConfig()
            )
        except ValidationError as e:
            self._fail_validation(e, log)
            raise
        except FileNotFoundError as e:
            self._fail("file", str(e), "file_not_found", log)
            raise
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            self._fail("parse", str(e), "yaml_parse_error", log)
            raise

        self._state_machine.transition(ConfigState.VALIDATED)
        self._validation_duration_ms = (time.perf_counter() - start_time) * 1000
        log.info(
            "config_validation_complete",
            phase="VALIDATED",
            topic_count=len(taxonomy.topics),
            feed_count=len(catalog.feeds),
            config_validation_duration_ms=self._validation_duration_ms,
        )

        effective = EffectiveConfig(
            taxonomy=taxonomy,
            catalog=catalog,
            policy=policy,
            file_checksums=self._file_checksums.copy(),
            run_id=self._run_id,
        )
        self._state_machine.transition(ConfigState.READY)
        log.info("config_ready", phase="READY", config_sha256=effective.compute_checksum())
        return effective

    def _fail_validation(
        self,
        error: ValidationError,
        log: structlog.stdlib.BoundLogger,
    ) -> None:
        self._state_machine.transition(ConfigState.FAILED)
        for err in error.errors():
            self._validation_errors.append(
                {
                    "loc": ".".join(str(loc) for loc in err["loc"]),
                    "msg": err["msg"],
                    "type": err["type"],
                }
            )
        log.error(
            "config_validation_failed",
            phase="FAILED",
            validation_error_count=len(self._validation_errors),
            errors=self._validation_errors,
        )

    def _fail(
        self,
        loc: str,
        message: str,
        error_type: str,
        log: structlog.stdlib.BoundLogger,
    ) -> None:
        self._state_machine.transition(ConfigState.FAILED)
        self._validation_errors.append({"loc": loc, "msg": message, "type": error_type})
        log.error("config_load_failed", phase="FAILED", error_type=error_type, error=message)

    def format_errors(self) -> list[str]:
        """Render collected errors with hints, one entry per error."""
        return [
            format_validation_error(err["loc"], err["msg"], err["type"])
            for err in self._validation_errors
        ]

    def get_validation_summary(self) -> dict[str, object]:
        """Summary of the load for logging or status output."""
        return {
            "run_id": self._run_id,
            "state": self._state_machine.state.name,
            "file_checksums": self._file_checksums,
            "validation_error_count": len(self._validation_errors),
            "validation_errors": self._validation_errors,
            "validation_duration_ms": self._validation_duration_ms,
        }
