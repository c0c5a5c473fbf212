"""Pipeline configuration via Pydantic Settings."""

from decimal import Decimal, InvalidOperation
from typing import List, Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global pipeline settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Discount bounds
    MIN_DISCOUNT_PERCENT: int = 5
    MAX_DISCOUNT_PERCENT: int = 90

    # Opt-in discount sanity checks
    DISCOUNT_TOLERANCE_PERCENT: Optional[int] = None
    ESTIMATION_RATIOS: str = ""  # Comma-separated, e.g. "1.3"

    # Field extraction
    MAX_PRICE: Decimal = Decimal("100000")
    MIN_NAME_LENGTH: int = 3
    MAX_NAME_LENGTH: int = 200
    TEXT_PRICE_REQUIRES_SYMBOL: bool = False
    KNOWN_BRANDS: str = ""  # Comma-separated; empty uses the built-in lexicon

    # Categorization fallback when the collector does not supply one
    DEFAULT_CATEGORY: str = "other"

    # Batch processing
    PIPELINE_MAX_WORKERS: int = 1

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # Collectors
    HTTP_TIMEOUT_SECONDS: float = 30.0

    @model_validator(mode="after")
    def check_name_lengths(self) -> "Settings":
        if self.MIN_NAME_LENGTH > self.MAX_NAME_LENGTH:
            raise ValueError("MIN_NAME_LENGTH must not exceed MAX_NAME_LENGTH")
        return self

    def get_brand_list(self) -> List[str]:
        """Parse KNOWN_BRANDS into a list of brand names.

        Returns:
            List of brand names, empty if KNOWN_BRANDS is not set
        """
        if not self.KNOWN_BRANDS:
            return []
        return [b.strip() for b in self.KNOWN_BRANDS.split(",") if b.strip()]

    def get_estimation_ratios(self) -> List[Decimal]:
        """Parse ESTIMATION_RATIOS into a list of Decimal ratios.

        Raises:
            ValueError: If an entry is not a number
        """
        ratios: List[Decimal] = []
        for raw in self.ESTIMATION_RATIOS.split(","):
            raw = raw.strip()
            if not raw:
                continue
            try:
                ratios.append(Decimal(raw))
            except InvalidOperation:
                raise ValueError(f"Invalid estimation ratio: {raw!r}") from None
        return ratios


settings = Settings()
