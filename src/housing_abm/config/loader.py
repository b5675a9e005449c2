"""JSON → Python 설정 로더"""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from ..core.errors import ConfigError
from .schema import ScenarioConfig

logger = logging.getLogger(__name__)

PRESETS_DIR = Path(__file__).resolve().parent.parent / "presets"


def _read_json(path: Path):
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def load_scenario(preset_dir: str | Path) -> ScenarioConfig:
    """프리셋 디렉토리에서 시나리오 로드

    Args:
        preset_dir: 프리셋 디렉토리 경로 (scenario.json이 있는 곳)

    Returns:
        통합된 ScenarioConfig
    """
    preset_dir = Path(preset_dir)
    if not preset_dir.is_dir():
        raise ConfigError(f"Preset directory not found: {preset_dir}")

    # 1. scenario.json (마스터 설정)
    scenario_path = preset_dir / "scenario.json"
    if scenario_path.exists():
        scenario_data = _read_json(scenario_path)
    else:
        logger.warning("No scenario.json in %s, using defaults", preset_dir)
        scenario_data = {}

    # 2. regions.json (지역 목록, scenario.json의 regions를 대체)
    regions_path = preset_dir / "regions.json"
    if regions_path.exists():
        scenario_data["regions"] = _read_json(regions_path)

    config = load_scenario_from_dict(scenario_data)
    logger.info("Loaded scenario '%s' from %s (%d regions)",
                config.simulation.name, preset_dir, len(config.regions))
    return config


def load_scenario_from_dict(data: dict) -> ScenarioConfig:
    """딕셔너리에서 직접 로드"""
    try:
        return ScenarioConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid scenario configuration:\n{e}") from e


def preset_path(name: str) -> Path:
    """패키지 내장 프리셋 경로"""
    return PRESETS_DIR / name
