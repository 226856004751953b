"""
Layered configuration for BankFlowAI.
Priority: defaults → ~/.bankflow/config.yaml → environment variables
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

CONFIG_DIR = Path.home() / ".bankflow"
CONFIG_FILE = CONFIG_DIR / "config.yaml"


class StorageConfig(BaseModel):
    data_dir: str = "~/.bankflow/data"

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir).expanduser()

    @property
    def tasks_path(self) -> Path:
        return self.data_path / "tasks.json"


class DetectionConfig(BaseModel):
    similarity_threshold: float = 0.80
    delete_threshold: float = 0.90
    merge_threshold: float = 0.85
    window_hours: float = 24
    jitter_ratio: float = 0.20
    seed: Optional[int] = None  # seeds the time-saved jitter


class SeedConfig(BaseModel):
    mock_task_count: int = 100
    duplicate_ratio: float = 0.20
    days_back: int = 7
    random_seed: Optional[int] = None


class ReportsConfig(BaseModel):
    output_dir: str = "~/Documents/BankFlow Reports"

    @property
    def output_path(self) -> Path:
        return Path(self.output_dir).expanduser()


class DisplayConfig(BaseModel):
    log_level: str = "INFO"


class Config(BaseModel):
    storage: StorageConfig = Field(default_factory=StorageConfig)
    detection: DetectionConfig = Field(default_factory=DetectionConfig)
    seed: SeedConfig = Field(default_factory=SeedConfig)
    reports: ReportsConfig = Field(default_factory=ReportsConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)

    # Convenience proxy
    @property
    def tasks_path(self) -> Path:
        return self.storage.tasks_path


def load_config(config_file: Optional[Path] = None) -> Config:
    """Load config from file with safe defaults for any missing key."""
    raw: dict = {}
    path = config_file or CONFIG_FILE

    if path.exists():
        with open(path) as f:
            loaded = yaml.safe_load(f)
            if isinstance(loaded, dict):
                raw = loaded

    # Environment variable overrides (BANKFLOW_SECTION_KEY format)
    _apply_env_overrides(raw)

    return Config(**raw)


def _apply_env_overrides(raw: dict) -> None:
    mappings = {
        "BANKFLOW_DATA_DIR": ("storage", "data_dir"),
        "BANKFLOW_DETECTION_SEED": ("detection", "seed"),
        "BANKFLOW_MOCK_TASK_COUNT": ("seed", "mock_task_count"),
        "BANKFLOW_REPORTS_DIR": ("reports", "output_dir"),
        "BANKFLOW_LOG_LEVEL": ("display", "log_level"),
    }
    for env_key, (section, key) in mappings.items():
        val = os.getenv(env_key)
        if val:
            raw.setdefault(section, {})[key] = val
