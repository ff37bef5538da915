import os
import log
from dotenv import load_dotenv

# Load .env file into environment
load_dotenv()


def _parse_tokens(raw: str | None) -> list[str]:
    """VALID_TOKENS is a comma separated list, e.g. 'token-a,token-b'."""
    if not raw:
        return []
    return [token.strip() for token in raw.split(",") if token.strip()]


class Config:
    def __init__(self):
        self.log_level = os.getenv("LOG_LEVEL", default="INFO")
        self.log_filename = os.getenv("LOG_FILENAME", default="evaluation_service.log")
        self.valid_tokens = _parse_tokens(os.getenv("VALID_TOKENS"))

        # Defaults applied to HTTP evaluations when the request omits them
        self.default_confidence_level = float(os.getenv("DEFAULT_CONFIDENCE_LEVEL", 0.95))
        self.min_sample_size = int(os.getenv("MIN_SAMPLE_SIZE", 100))

        # Call setup_logging when the application starts
        log.setup_logging(self.log_level, self.log_filename)

    def __repr__(self):
        return (
            f"<Settings loglevel={self.log_level}, log_filename={self.log_filename}, "
            f"confidence={self.default_confidence_level}, min_sample_size={self.min_sample_size}>"
        )

config = Config()
