from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "PVSIM_", "case_sensitive": False}

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False

    # Economics
    analysis_years: int = Field(default=25, ge=1)
    discount_rate: float = Field(default=0.04, gt=-1.0, le=1.0)
    price_inflation: float = 0.03
    maintenance_fraction: float = Field(default=0.005, ge=0.0)

    # IRR scan
    irr_min_rate: float = -0.5
    irr_max_rate: float = 1.0
    irr_step: float = Field(default=0.001, gt=0.0)
    irr_tolerance: float = Field(default=1.0, gt=0.0)

    # Physics
    ground_albedo: float = Field(default=0.2, ge=0.0, le=1.0)

    # Dispatch
    peak_shaving_fraction: float = Field(default=0.7, gt=0.0, le=1.0)

    # Pipeline
    cache_size: int = Field(default=32, ge=0)


settings = Settings()
