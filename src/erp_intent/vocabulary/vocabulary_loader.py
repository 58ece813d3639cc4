"""
Vocabulary configuration loader.

Reads the authored JSON vocabulary and validates it. A missing required
section is a fatal startup error: the engine never runs on partial config.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from ..exceptions import ConfigValidationError
from .vocabulary_config import REQUIRED_SECTIONS, VocabularyConfig

logger = logging.getLogger(__name__)

DEFAULT_VOCABULARY_PATH = Path(__file__).parent.parent / "data" / "vocabulary.json"


def parse_vocabulary_config(data: Dict[str, Any]) -> VocabularyConfig:
    """
    Validate raw configuration data.

    :param data: Parsed JSON mapping
    :return: Validated, frozen VocabularyConfig
    :raises: ConfigValidationError if a required section is missing or invalid
    """
    if not isinstance(data, dict):
        raise ConfigValidationError("Vocabulary configuration must be a JSON object")

    missing = [section for section in REQUIRED_SECTIONS if not data.get(section)]
    if missing:
        raise ConfigValidationError(
            f"Vocabulary configuration is missing required sections: {', '.join(missing)}"
        )

    try:
        return VocabularyConfig.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigValidationError(f"Invalid vocabulary configuration: {problems}") from e


def load_vocabulary_config(path: Optional[Union[str, Path]] = None) -> VocabularyConfig:
    """
    Load and validate the vocabulary configuration from a JSON file.

    :param path: JSON file path; the packaged default is used when None
    :return: Validated VocabularyConfig
    :raises: ConfigValidationError if the file is unreadable or invalid
    """
    config_path = Path(path) if path else DEFAULT_VOCABULARY_PATH

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigValidationError(f"Vocabulary configuration not found: {config_path}") from e
    except json.JSONDecodeError as e:
        raise ConfigValidationError(f"Vocabulary configuration is not valid JSON: {e}") from e

    config = parse_vocabulary_config(data)
    logger.info(
        f"Loaded vocabulary v{config.version} from {config_path}: "
        f"{len(config.vocabulary.modules)} modules, {len(config.vocabulary.actions)} actions"
    )
    return config
