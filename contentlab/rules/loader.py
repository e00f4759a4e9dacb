import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from contentlab.rules.models import Rules

logger = logging.getLogger(__name__)


def load_rules(path: Path) -> Rules:
    """
    Load and validate ``rules.yaml``.

    Raises:
        FileNotFoundError: the file does not exist
        ValueError: the file is not a YAML mapping, or fails the Rules schema
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Rules file not found at: {path}")

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in rules file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Rules file {path} must contain a mapping, got {type(data).__name__}")

    try:
        rules = Rules.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Rules validation failed for {path}:\n{e}") from e

    logger.debug(
        "Rules loaded: types=%s, batch_limit=%d, past_schedules=%s",
        rules.content.type_values,
        rules.scheduling.publisher_batch_limit,
        rules.scheduling.allow_past_schedule,
    )
    return rules
