"""
Analyzer configuration

Defaults below can be overridden by a YAML file with the same layout:

    classifier:
      small_threshold: 5000
      large_threshold: 15000
    analysis:
      frame_stride: 3
      frame_size: [1020, 500]
      heatmap_fill: false
    hotspots:
      radius: 50.0
    report:
      model_label: "YOLOv8-seg (best_02.pt)"
"""

import copy
import logging
import os
from typing import Dict, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    'classifier': {
        'small_threshold': 5000,
        'large_threshold': 15000,
    },
    'analysis': {
        'frame_stride': 3,           # analyze every 3rd frame
        'frame_size': [1020, 500],   # (width, height); null keeps the source size
        'heatmap_fill': False,
    },
    'hotspots': {
        'radius': 50.0,
    },
    'report': {
        'model_label': "YOLOv8-seg (best_02.pt)",
    },
}


def load_config(config_path: Optional[str] = None) -> Dict:
    """
    Load configuration, falling back to defaults

    Args:
        config_path: Path to config.yaml (optional)

    Returns:
        Full configuration dict; sections missing from the file keep defaults
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if not config_path:
        return config

    if not os.path.exists(config_path):
        logger.warning("Config file not found: %s (using defaults)", config_path)
        return config

    with open(config_path, 'r') as f:
        user_config = yaml.safe_load(f) or {}

    if not isinstance(user_config, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")

    for section, values in user_config.items():
        if section not in config:
            logger.warning("Ignoring unknown config section: %s", section)
            continue
        if not isinstance(values, dict):
            raise ValueError(f"Config section '{section}' must be a mapping")
        config[section].update(values)

    logger.info("Loaded config from %s", config_path)
    return config
