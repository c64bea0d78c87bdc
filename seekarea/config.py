"""Tunable parameters for the constraint operators."""

from __future__ import annotations

import copy
from dataclasses import dataclass


@dataclass
class EngineConfig:
    """Configuration knobs shared by operators and the session."""

    # sampling used by sampled MATCHING / MEASURING
    sample_max_points: int = 900
    sample_min_step_km: float = 12.0
    # rebuilding a polygon from kept samples
    buffer_min_km: float = 6.0
    buffer_step_factor: float = 0.9
    downsample_max: int = 350
    union_batch_size: int = 25
    circle_steps: int = 64
    radar_circle_steps: int = 96
    # MEASURING
    measuring_epsilon_m: float = 25.0
    measuring_exact_max_pois: int = 400
    # MATCHING: "voronoi" or "sampled"
    matching_strategy: str = "voronoi"
    # REGION-MATCHING samples coarsely, every sample is a reverse-geocode call
    region_max_points: int = 60
    region_min_step_km: float = 20.0
    region_round_decimals: int = 2
    # POI fetch
    poi_padding_km: float = 25.0
    poi_limit: int = 800
    thermometer_pad_deg: float = 1.0
    # collaborator timeouts (seconds)
    poi_timeout_s: float = 30.0
    geocode_timeout_s: float = 12.0
    location_timeout_s: float = 12.0


_ENGINE_CONFIG = EngineConfig()


def get_engine_config() -> EngineConfig:
    return copy.deepcopy(_ENGINE_CONFIG)


def set_engine_config(config: EngineConfig) -> None:
    global _ENGINE_CONFIG
    _ENGINE_CONFIG = copy.deepcopy(config)


__all__ = ["EngineConfig", "get_engine_config", "set_engine_config"]
