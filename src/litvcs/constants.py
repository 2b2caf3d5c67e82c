"""Constants used throughout lit."""

# Version
VERSION = "0.1.0"

# Directory names
LIT_DIR = ".lit"
OBJECTS_DIR = "objects"
REFS_DIR = "refs"
HEADS_DIR = "heads"

# File names
HEAD_FILE = "HEAD"
INDEX_FILE = "index"

# Branches
DEFAULT_BRANCH = "main"
BRANCH_NAME_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9._-]*$"

# Hash algorithm
HASH_ALGORITHM = "sha256"
HASH_LENGTH = 64  # SHA-256 produces 64 hex characters
SHARD_CHARACTERS = 2  # objects/<hash[:2]>/<hash[2:]>

# Object envelope tags
TYPE_KEY = "Type"
OBJECT_KEY = "Object"

# Commit timestamps are always rendered in UTC with this exact format
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

# Exit codes
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1
EXIT_SYSTEM_ERROR = 2
EXIT_INTERRUPTED = 130

# Logging
LOG_LEVEL_ENV = "LIT_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"
LOG_FORMAT = "<level>{level: <8}</level> | <cyan>{name}</cyan> - {message}"
