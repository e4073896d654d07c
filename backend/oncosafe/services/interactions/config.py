"""
Configuration for the interaction analysis core.
Centralizes tunable parameters for tier confidence, collaborator lookups and
alternative ranking.
"""

import json
import os
from typing import Optional

from dotenv import load_dotenv, find_dotenv
from pydantic import BaseModel, Field

from .models import ConfidenceLevel

load_dotenv(find_dotenv())


class TierConfidence(BaseModel):
    """Confidence attached to a record by the tier that resolved it."""

    cache: ConfidenceLevel = Field(
        default=ConfidenceLevel.HIGH,
        description="Confidence for records resolved by canonical code in the live store"
    )

    curated: ConfidenceLevel = Field(
        default=ConfidenceLevel.MEDIUM,
        description="Confidence for records resolved by name in the curated table"
    )

    heuristic: ConfidenceLevel = Field(
        default=ConfidenceLevel.LOW,
        description="Confidence for records resolved by the bundled heuristic table"
    )

    overall_ceiling: ConfidenceLevel = Field(
        default=ConfidenceLevel.MEDIUM,
        description="Highest confidence an aggregated DDI analysis may report"
    )


class StoreConfig(BaseModel):
    """Settings for the drug lookup collaborator."""

    base_url: Optional[str] = Field(
        default_factory=lambda: os.getenv("ONCOSAFE_STORE_URL"),
        description="Base URL of the row API; in-memory bundled data is used when unset"
    )

    api_key: Optional[str] = Field(
        default_factory=lambda: os.getenv("ONCOSAFE_STORE_API_KEY"),
        description="API key sent as 'apikey' and bearer token"
    )

    timeout_seconds: float = Field(
        default=10.0,
        gt=0.0,
        description="HTTP timeout for a single row request"
    )

    lookup_timeout_seconds: float = Field(
        default=15.0,
        gt=0.0,
        description="Upper bound for one tier lookup before it is treated as a failure"
    )


class AlternativeConfig(BaseModel):
    """Settings for alternative therapy ranking."""

    best_threshold: float = Field(
        default=90.0,
        ge=0.0,
        le=100.0,
        description="Both safety and efficacy must reach this score for 'best'"
    )

    severity_penalty: float = Field(
        default=25.0,
        ge=0.0,
        description="Safety points removed per unit of interaction risk"
    )

    max_interaction_risk: int = Field(
        default=3,
        ge=1,
        description="Cap on summed interaction risk for one candidate"
    )

    max_suggestions: int = Field(
        default=5,
        ge=1,
        description="Maximum number of suggestions returned per drug"
    )


class InteractionCoreConfig(BaseModel):
    """Main configuration for the interaction analysis core."""

    tier_confidence: TierConfidence = Field(
        default_factory=TierConfidence,
        description="Tier to confidence mapping"
    )

    store: StoreConfig = Field(
        default_factory=StoreConfig,
        description="Drug lookup collaborator settings"
    )

    alternatives: AlternativeConfig = Field(
        default_factory=AlternativeConfig,
        description="Alternative ranking settings"
    )

    consolidate_formulations: bool = Field(
        default=True,
        description="Merge entries naming the same canonical substance before pairing"
    )

    heuristic_table_path: Optional[str] = Field(
        default=None,
        description="Override path for the heuristic interaction table (JSON)"
    )

    log_level: str = Field(
        default_factory=lambda: os.getenv("ONCOSAFE_LOG_LEVEL", "INFO"),
        description="Root log level"
    )


# Global configuration instance
_config: InteractionCoreConfig = InteractionCoreConfig()


def get_config() -> InteractionCoreConfig:
    """Get the global configuration instance."""
    return _config


def update_config(**kwargs) -> InteractionCoreConfig:
    """Update configuration parameters. Nested keys use dots: 'store.timeout_seconds'."""
    global _config
    current_dict = _config.model_dump()

    for key, value in kwargs.items():
        parts = key.split('.')
        current = current_dict
        for part in parts[:-1]:
            current = current[part]
        current[parts[-1]] = value

    _config = InteractionCoreConfig(**current_dict)
    return _config


def reset_config() -> InteractionCoreConfig:
    global _config
    _config = InteractionCoreConfig()
    return _config


def load_config_from_file(filepath: str) -> InteractionCoreConfig:
    """Load configuration from a JSON file."""
    global _config

    with open(filepath, 'r') as f:
        config_dict = json.load(f)

    _config = InteractionCoreConfig(**config_dict)
    return _config


def save_config_to_file(filepath: str):
    """Save current configuration to a JSON file."""
    with open(filepath, 'w') as f:
        json.dump(_config.model_dump(mode="json"), f, indent=2)
