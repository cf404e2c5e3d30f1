"""Nomad RAG configuration via Pydantic settings."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # OpenAI embeddings
    openai_api_key: str = ""
    embedding_model: str = "text-embedding-3-small"
    embedding_dimensions: int = 1536
    embedding_concurrency: int = 4

    # Vector index
    vector_backend: str = "neo4j"  # "neo4j" or "memory"
    neo4j_uri: str = "bolt://localhost:7687"
    neo4j_user: str = "neo4j"
    neo4j_password: str = "nomad_kb"

    # Chunking
    chunk_size: int = 400

    # Retrieval
    top_k: int = 3
    confidence_threshold: float = 0.5

    # Chat
    history_limit: int = 10
    precision_temperature: float = 0.7
    exploratory_temperature: float = 0.9
    max_output_tokens: int = 4096
    provider_timeout: float = 30.0
    max_attachments: int = 5

    # Anthropic
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    anthropic_base_url: str = "https://api.anthropic.com/v1"

    # xAI
    xai_api_key: str = ""
    grok_model: str = "grok-3"
    xai_base_url: str = "https://api.x.ai/v1"

    # Google
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
