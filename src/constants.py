"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2


class Marketplaces(Enum):
    """Marketplaces taking part in a sync run.

    Args:
        Enum (string): Marketplace identifiers used in logs and reports.
    """

    SOURCE = "source"
    MIRROR = "mirror"


class QueryFlags(Enum):
    """Gallery extension query flags (bit values of the gallery API).

    Args:
        Enum (int): Flag bit values.
    """

    INCLUDE_VERSIONS = 0x1
    INCLUDE_STATISTICS = 0x100
    INCLUDE_VERSION_PROPERTIES = 0x10


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    SOURCE_MARKETPLACE_URL = "https://marketplace.visualstudio.com/_apis/public/gallery"
    MIRROR_MARKETPLACE_URL = "https://open-vsx.org/vscode/gallery"
    GALLERY_API_VERSION = "3.0-preview.1"
    PRERELEASE_PROPERTY = "Microsoft.VisualStudio.Code.PreRelease"
    INSTALL_STATISTIC = "install"

    REGISTRY_FILE = "extensions.json"
    REPORT_FILE = "/tmp/stat.json"
    FAILED_FILE = "/tmp/failed-extensions.json"
    WORK_DIRS = ["/tmp/repository", "/tmp/download"]
    PUBLISH_COMMAND = ["publish-extension"]

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    ENV_LOG_LEVEL = "MIRRORSYNC_LOG_LEVEL"
    ENV_EXTENSIONS = "EXTENSIONS"
    ENV_FORCE = "FORCE"
    ENV_SKIP_BUILD = "SKIP_BUILD"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests

    # Repository API constants
    GITHUB_API_BASE = "https://api.github.com"
    ENV_GITHUB_TOKEN = "GITHUB_TOKEN"
    REPO_API_PER_PAGE = 100
    HTTP_RETRY_MAX = 5
    HTTP_RETRY_BASE_DELAY_SEC = 0.3
    HTTP_CACHE_TTL_SEC = 300

    # Sync policy
    DEFAULT_TIMEOUT_MINUTES = 5
    RECENTLY_UPDATED_DAYS = 30
    UNMAINTAINED_DAYS = 365
    ARTIFACT_SUFFIX = ".vsix"
    MANIFEST_FILE = "package.json"
    SOURCE_PUBLISHERS = [
        "ms-python",
        "ms-toolsai",
        "ms-vscode",
        "dbaeumer",
        "GitHub",
        "Tyriar",
        "ms-azuretools",
        "msjsdiag",
        "ms-mssql",
        "vscjava",
        "ms-vsts",
    ]
