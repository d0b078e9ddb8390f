import os

from dotenv import load_dotenv

from oracle_relayer.exceptions import InvalidModelIdError, MissingCredentialsError

load_dotenv()  # Load environment variables from .env file

# --------------------------------------------------
# API Key Configuration
# --------------------------------------------------
TALLY_API_KEY = os.environ.get("TALLY_API_KEY")
AMBIENT_API_KEY = os.environ.get("AMBIENT_API_KEY")

# --------------------------------------------------
# Endpoint Configuration
# --------------------------------------------------
SNAPSHOT_GRAPHQL_URL = os.environ.get("SNAPSHOT_GRAPHQL_URL", "https://hub.snapshot.org/graphql")
TALLY_GRAPHQL_URL = os.environ.get("TALLY_GRAPHQL_URL", "https://api.tally.xyz/query")
AMBIENT_API_URL = os.environ.get("AMBIENT_API_URL", "https://api.ambient.xyz/v1/chat/completions")
HTTP_TIMEOUT_SECONDS = float(os.environ.get("HTTP_TIMEOUT_SECONDS", "30"))

# --------------------------------------------------
# Model Configuration
# --------------------------------------------------
DEFAULT_MODEL_ID = "ambient-1"
MAX_MODEL_ID_LEN = 64
AMBIENT_MODEL_ID = os.environ.get("AMBIENT_MODEL_ID") or DEFAULT_MODEL_ID

# --------------------------------------------------
# On-chain Storage Limits
# --------------------------------------------------
MAX_PROPOSAL_TEXT_LEN = 4096
MAX_INSTRUCTION_BYTES = 800

# --------------------------------------------------
# Model Output Limits
# --------------------------------------------------
MAX_SUMMARY_WORDS = 60
MAX_SUMMARY_CHARS = 400
MAX_LIST_ITEMS = 5
MAX_LIST_ITEM_CHARS = 120

# --------------------------------------------------
# Governance Sources
# --------------------------------------------------
# Assumes a for/against/abstain governor vote when Tally reports no vote stats
DEFAULT_TALLY_CHOICES = ("for", "against", "abstain")


def require_env(name: str) -> str:
    """Return a non-empty environment variable or raise MissingCredentialsError."""
    value = os.environ.get(name)
    if not value:
        raise MissingCredentialsError(f"Missing {name} in env")
    return value


def get_model_id() -> str:
    """Return the configured model id, validated against the on-chain length cap."""
    model_id = os.environ.get("AMBIENT_MODEL_ID") or DEFAULT_MODEL_ID
    validate_model_id(model_id)
    return model_id


def validate_model_id(model_id: str) -> None:
    if not model_id:
        raise InvalidModelIdError("Model id is empty")
    if len(model_id) > MAX_MODEL_ID_LEN:
        raise InvalidModelIdError("AMBIENT_MODEL_ID too long")
