from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_NAME: str = "Ontomatch API"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    # DBpedia Spotlight
    SPOTLIGHT_URL: str = "http://model.dbpedia-spotlight.org/en/annotate"
    SPOTLIGHT_TIMEOUT_SECONDS: float = 30.0
    SPOTLIGHT_MAX_RETRIES: int = 5
    SPOTLIGHT_BACKOFF_SECONDS: float = 1.0
    SPOTLIGHT_MAX_BACKOFF_SECONDS: float = 30.0

    # Chunking
    MAX_CHUNK_CHARS: int = 7237  # approximate request limit of Spotlight
    CHUNK_STRIP_CHARS: str = '"%'

    # IRI translation
    # len("http://dbpedia.org/resource/")
    EXTERNAL_PREFIX_LENGTH: int = 28

    # Output
    TYPE_DELIMITER: str = ";"
    OUTPUT_DIR: str = "out"

    # Pipeline defaults
    DEFAULT_CONFIDENCE: float = 0.5
    DEFAULT_ENCODING: str = "UTF_8"
    MAX_WORKERS: int = 1

    # Loaded once at API startup
    ONTOLOGY_PATH: str | None = None
    SUBSTITUTION_SPEC_PATH: str | None = None


settings = Settings()
