from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    helius_api_key: str = ""
    helius_api_url_override: str = ""
    helius_rpc_url_override: str = ""
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-3-haiku-20240307"
    alias_table_path: str = ""
    page_size: int | None = None
    metadata_max_attempts: int = 3
    metadata_retry_backoff: float = 2.0

    @property
    def helius_api_url(self) -> str:
        if self.helius_api_url_override:
            return self.helius_api_url_override.rstrip("/")
        return "https://api.helius.xyz"

    @property
    def helius_rpc_url(self) -> str:
        if self.helius_rpc_url_override:
            return self.helius_rpc_url_override
        return f"https://mainnet.helius-rpc.com/?api-key={self.helius_api_key}"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
