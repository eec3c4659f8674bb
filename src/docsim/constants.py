"""Project-wide constants."""

# -- HTTP adapters -----------------------------------------------------------
DEFAULT_TIMEOUT: float = 30.0

# -- Embedding retry ---------------------------------------------------------
# Retries after the first attempt, so a transient failure is tried 4 times.
DEFAULT_MAX_RETRIES: int = 3
DEFAULT_BACKOFF_BASE: float = 2.0  # delay before retry n is base**n seconds
DEFAULT_MAX_DELAY: float = 60.0

# -- Embedding models --------------------------------------------------------
DEFAULT_EMBEDDING_MODEL: str = "text-embedding-ada-002"
DEFAULT_LOCAL_EMBEDDING_MODEL: str = "sentence-transformers/all-MiniLM-L6-v2"

# -- OCR ("prebuilt-read" analyze API) ---------------------------------------
OCR_READ_MODEL: str = "prebuilt-read"
OCR_API_VERSION: str = "2023-07-31"
OCR_POLL_INTERVAL: float = 1.0
OCR_MAX_POLLS: int = 60
