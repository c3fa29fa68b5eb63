from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Server
    app_env: str = "local"
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False
    log_level: str = ""
    log_json: bool = False

    # LLM
    llm_provider: str = "openai_compatible"
    llm_api_key: str = ""  # Generic key -- used when provider-specific key is empty
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    deepseek_api_key: str = ""
    llm_model: str = "gpt-4o-mini"
    llm_base_url: str = ""  # Custom base URL for openai_compatible provider

    # Feishu
    feishu_enabled: bool = False
    feishu_app_id: str = ""
    feishu_app_secret: str = ""
    feishu_domain: str = ""  # e.g. example.feishu.cn, used to build document links

    # Slack
    slack_enabled: bool = False
    slack_bot_token: str = ""

    # Execution
    http_timeout_seconds: float = 30.0
    task_concurrency_limit: int = 0  # 0 = no cap within a wave
    eager_output_execution: bool = False
    folder_match_with_llm: bool = True

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
