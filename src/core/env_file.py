"""Project .env handling.

Loads KEY=VALUE pairs with python-dotenv and classifies each key as a
GitHub secret or a plain GitHub variable.
"""

import logging
import re
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List

from dotenv import dotenv_values


logger = logging.getLogger(__name__)

DEFAULT_ENV_FILE = ".env"
EXAMPLE_ENV_FILE = ".env.example"

SECRET_KEY_PATTERN = re.compile(r"SECRET|KEY|PASSWORD", re.IGNORECASE)


class EnvFileError(Exception):
    """Raised when the .env file is missing or unreadable."""
    pass


@dataclass
class EnvEntry:
    """A single .env entry with its storage classification."""

    key: str
    value: str
    is_secret: bool


def is_secret_key(key: str) -> bool:
    """Check whether a variable name looks sensitive.

    Args:
        key: Variable name

    Returns:
        True if the name contains SECRET, KEY or PASSWORD (any case)
    """
    return bool(SECRET_KEY_PATTERN.search(key))


def _normalize_value(value: str) -> str:
    # Multi-line values such as private keys are written with literal \n
    if "\\n" in value:
        value = value.replace("\\n", "\n")
    return value


def load_env_entries(path: str = DEFAULT_ENV_FILE,
                     supports_variables: bool = True) -> List[EnvEntry]:
    """Load and classify the entries of a .env file.

    Args:
        path: Path to the .env file
        supports_variables: Whether plain variables can be stored as
            variables; when False every entry becomes a secret

    Returns:
        Entries in file order

    Raises:
        EnvFileError: When the file does not exist or cannot be read
    """
    env_path = Path(path)
    if not env_path.exists():
        raise EnvFileError(
            f"{env_path} file not found! Please create a .env file based on {EXAMPLE_ENV_FILE}"
        )

    try:
        values = dotenv_values(env_path, interpolate=False)
    except (OSError, UnicodeDecodeError) as e:
        raise EnvFileError(f"Unable to read {env_path}: {e}")

    entries = []
    for key, value in values.items():
        if value is None:
            logger.warning("Skipping %s in %s: no value assigned", key, env_path)
            continue
        entries.append(
            EnvEntry(
                key=key,
                value=_normalize_value(value),
                is_secret=is_secret_key(key) or not supports_variables,
            )
        )

    return entries


def ensure_env_file(path: str = DEFAULT_ENV_FILE,
                    example_path: str = EXAMPLE_ENV_FILE,
                    safety=None) -> Path:
    """Create the .env file from its example template if missing.

    Raises:
        EnvFileError: When neither the file nor its template exists
    """
    env_path = Path(path)
    if env_path.exists():
        print(f"✅ {env_path} file exists")
        print(f"📝 Ensure {env_path} contains only PROJECT-SPECIFIC variables")
        return env_path

    example = Path(example_path)
    if not example.exists():
        raise EnvFileError(
            f"No {env_path} or {example} file found. "
            "Please create a .env file with your project-specific configuration."
        )

    print(f"Creating {env_path} from {example}...")
    shutil.copyfile(example, env_path)
    print(f"📝 {example} has been copied to {env_path}")
    print(f"📝 Add your PROJECT-SPECIFIC environment variables to {env_path}")
    print(f"📝 Do NOT add deployment secrets (AWS keys, EC2 keys) to {env_path}")
    print()
    print("Example project variables (if your project needs them):")
    print("  DATABASE_URL=postgresql://localhost:5432/myapp")
    print("  JWT_SECRET=your-jwt-secret")
    print("  API_KEY=your-api-key")
    print()
    if safety is not None:
        safety.pause(
            f"Press Enter when you've updated the {env_path} file with your project variables..."
        )

    return env_path
