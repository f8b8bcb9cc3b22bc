"""
Application configuration for the cluster analytics core.

Provides environment-aware settings with conservative defaults. Window sizes,
anomaly and forecast defaults live here; the health-score penalty constants do
not (see emr_analytics.analytics.health).
"""

from __future__ import annotations

from pathlib import Path
from typing import Tuple

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AnalyticsConfig(BaseModel):
	"""
	Defaults for the analytics bundle.

	Notes:
	- trailing_window_days: size of the "current week" KPI window.
	- zscore_std_floor: std used when a metric has no spread at all.
	- active_states: cluster states counted as active in the session summary.
	- capacity_group_gb: band width for the capacity chart grouping.
	"""

	trailing_window_days: int = Field(7, ge=1)
	anomaly_top_n: int = Field(3, ge=0)
	zscore_std_floor: float = Field(1.0, gt=0.0)
	forecast_horizon_days: int = Field(7, ge=0)
	active_states: Tuple[str, ...] = ("RUNNING", "WAITING")
	capacity_group_gb: int = Field(50, ge=1)


class ViewConfig(BaseModel):
	"""
	Preset windows for the daily and weekly date filters.
	"""

	daily_view_days: int = Field(30, ge=1)
	weekly_view_weeks: int = Field(12, ge=1)


class Config(BaseSettings):
	"""
	Global configuration with environment overrides.
	"""

	model_config = SettingsConfigDict(
		env_prefix="EMR_",
		env_file=".env",
		env_nested_delimiter="__",
		extra="ignore",
	)

	log_level: str = Field("INFO", description="Default logging level")
	logs_dir: Path = Field(Path("logs"), description="Directory for log files")
	analytics: AnalyticsConfig = AnalyticsConfig()
	views: ViewConfig = ViewConfig()

	def model_post_init(self, __context: object) -> None:
		self.logs_dir.mkdir(parents=True, exist_ok=True)


config = Config()
