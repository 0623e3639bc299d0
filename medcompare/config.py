from pydantic_settings import BaseSettings

SOURCE_IDS = ("apollo", "pharmeasy", "netmeds", "onemg", "truemeds")


class Settings(BaseSettings):
    # App
    environment: str = "development"
    port: int = 8000
    app_log_level: str = "INFO"
    noisy_log_level: str = "WARNING"
    log_dir: str = "logs"

    # CORS
    frontend_url: str = ""
    cors_origins: str = ""
    cors_origin_regex: str = r"^(http://localhost:\d+|https://.*\.vercel\.app)$"

    # Browser
    headless: bool = True
    prelaunch_browser: bool = True
    browser_launch_args: list[str] = [
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--disable-dev-shm-usage",
        "--disable-gpu",
        "--disable-background-networking",
        "--disable-background-timer-throttling",
        "--disable-renderer-backgrounding",
        "--disable-infobars",
        "--disable-extensions",
        "--no-zygote",
    ]

    # Per-source deadlines; sources differ a lot in typical latency
    apollo_timeout_ms: int = 20000
    pharmeasy_timeout_ms: int = 20000
    netmeds_timeout_ms: int = 55000
    onemg_timeout_ms: int = 20000
    truemeds_timeout_ms: int = 50000
    max_products: int = 3

    # Gemini (prescription OCR)
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_timeout_seconds: float = 60.0

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def cors_origin_list(self) -> list[str]:
        origins = [o.strip() for o in self.cors_origins.split(",") if o.strip()]
        if self.frontend_url and self.frontend_url not in origins:
            origins.append(self.frontend_url)
        return origins

    @property
    def source_timeouts(self) -> dict[str, float]:
        """Per-source deadline in seconds, keyed by source id."""
        return {
            source: getattr(self, f"{source}_timeout_ms") / 1000.0
            for source in SOURCE_IDS
        }


settings = Settings()
