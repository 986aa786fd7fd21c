"""Application constants - centralized configuration values."""

# =============================================================================
# GitHub endpoints
# =============================================================================
GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_API_URL = "https://api.github.com"
GITHUB_WEB_URL = "https://github.com"
GITHUB_MEDIA_TYPE = "application/vnd.github.v3+json"

# =============================================================================
# OAuth
# =============================================================================
# Read-only profile plus full repository write access
OAUTH_SCOPE = "repo read:user user:email"
OAUTH_PROMPT = "consent"
OAUTH_STATE_TTL_SECONDS = 10 * 60  # 10 minutes

# =============================================================================
# Pagination
# =============================================================================
REPOSITORY_PAGE_SIZE = 50
REPOSITORY_SORT = "updated"

# =============================================================================
# Git data
# =============================================================================
BLOB_FILE_MODE = "100644"
QUICK_COMMIT_TITLE = "# Quick commit from GreenSquare"

# =============================================================================
# API Timeouts (in seconds)
# =============================================================================
HTTPX_TIMEOUT = 10.0

# =============================================================================
# Session
# =============================================================================
SESSION_TOKEN_BYTES = 24
