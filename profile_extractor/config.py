from pydantic import BaseModel
from pydantic_settings import BaseSettings

VISION_MODEL = "claude-sonnet-4-20250514"
TEXT_MODEL = "claude-3-5-haiku-20241022"


class GenerationOptions(BaseModel):
    temperature: float = 0.2
    max_tokens: int = 2048


class ExtractionConfig(BaseModel):
    """Limits, models and flags for one extraction pipeline.

    Passed to the services at construction so tests can inject their own.
    """

    vision_model: str = VISION_MODEL
    text_model: str = TEXT_MODEL
    phase1_options: GenerationOptions = GenerationOptions(temperature=0.2, max_tokens=2048)
    phase2_options: GenerationOptions = GenerationOptions(temperature=0.1, max_tokens=4096)

    enable_fallback: bool = True
    log_metrics: bool = True
    log_prompts: bool = False
    min_confidence: float = 0.3
    min_data_categories: int = 2

    vision_max_bytes: int = 10_000
    text_max_bytes: int = 15_000
    image_max_bytes: int = 10_000

    max_pages_per_site: int = 8
    fetch_concurrency: int = 3
    high_fetch_concurrency: int = 4
    high_concurrency_threshold: int = 6


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    anthropic_api_key: str = ""
    log_level: str = "INFO"
    vision_model: str = VISION_MODEL
    text_model: str = TEXT_MODEL
    enable_llm_fallback: bool = True
    log_llm_metrics: bool = True
    log_llm_prompts: bool = False
    max_pages_per_site: int = 8
    fetch_timeout: float = 10.0
    llm_timeout: float = 60.0

    def extraction_config(self) -> ExtractionConfig:
        return ExtractionConfig(
            vision_model=self.vision_model,
            text_model=self.text_model,
            enable_fallback=self.enable_llm_fallback,
            log_metrics=self.log_llm_metrics,
            log_prompts=self.log_llm_prompts,
            max_pages_per_site=self.max_pages_per_site,
        )
