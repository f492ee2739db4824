"""
Promoter Constants

Centralized constants for magic values, defaults, and configuration.
"""

# Default SSH Configuration
DEFAULT_SSH_PORT = 22
SSH_CONNECTION_TIMEOUT = 10
SSH_PROBE_COMMAND = "echo 'Connection successful'"
SSH_PROBE_MARKER = "Connection successful"

# Default Database Configuration
DEFAULT_DB_HOST = "localhost"
DEFAULT_DB_PORT = 3306

# Remote Layout
DEFAULT_REMOTE_TMP_DIR = "/tmp"
DEFAULT_SERVICE_GROUP = "psacln"
DEFAULT_INSTALL_COMMAND = "npm install --production"
DEFAULT_BUILD_COMMAND = "npm run build"
UPLOADS_DIR = "public/uploads"
REMOTE_LOGS_DIR = "logs"

# File Sync
RSYNC_BASE_FLAGS = ["-az"]
RSYNC_EXCLUDES = [
    "node_modules",
    ".git",
    "*.log",
    ".env",
    ".env.*",
    "logs",
    "backups",
    f"/{UPLOADS_DIR}",
]

# File Naming
BACKUP_FILE_PREFIX = "backup_"
SCRIPT_FILE_PREFIX = "deployment_"
FILE_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"

# History
HISTORY_LIMIT = 10
DEPLOYMENT_ID_PREFIX = "deploy_"

# Redis Store Keys
REDIS_KEY_PREFIX = "promoter:deployments"

# Log Configuration
DEFAULT_LOG_DIR = "logs"
LOG_DATE_FORMAT = "%Y-%m-%d"
LOG_TIME_FORMAT = "%H-%M-%S"

# Config Files
DEFAULT_CONFIG_FILE = "promoter.yml"
DEFAULT_ENV_FILE = ".env"

# Messages
MSG_DRY_RUN = "🔍 DRY RUN - No changes made to production"
MSG_CANCEL_UNSUPPORTED = (
    "Deployment cancellation is not supported for safety reasons"
)
MSG_CANCEL_NOTE = "Deployments will complete automatically or fail safely"
MSG_NONE_RUNNING = "No deployment currently running"

# Tools required on the production host (pre-check)
REMOTE_TOOLS = ["rsync", "mysql", "mysqldump"]
