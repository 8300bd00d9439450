from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App
    environment: str = "development"
    log_level: str = "INFO"

    # Currencies
    default_currency: str = "USD"
    threshold_currency: str = "JMD"

    # Executive approval thresholds
    works_threshold: float = 5_000_000.0
    goods_services_threshold: float = 3_000_000.0

    # Default splintering rules
    vendor_rule_threshold: float = 25_000.0
    vendor_rule_window_days: int = 90
    category_rule_threshold: float = 50_000.0
    category_rule_window_days: int = 180
    department_rule_threshold: float = 75_000.0
    department_rule_window_days: int = 365
    description_similarity_cutoff: int = 70

    # Request combination
    combine_max_requests_warning: int = 10
    combine_special_procedures_threshold: float = 50_000.0
    combine_approval_threshold: float = 25_000.0
    combine_item_uniqueness_ratio: float = 0.7
    bulk_discount_rate: float = 0.05
    bulk_discount_min_requests: int = 3

    # Activity scan
    activity_window_days: int = 30


settings = Settings()
