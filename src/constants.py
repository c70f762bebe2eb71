"""Application constants - centralized configuration values."""

# =============================================================================
# Sessions & Cookies
# =============================================================================
SESSION_LIFETIME_DAYS = 30
SESSION_RENEWAL_THRESHOLD_DAYS = 15  # Renew once less than half the lifetime remains
SESSION_COOKIE_NAME = "session"
LOGIN_REDIRECT_COOKIE_NAME = "login_redirect"
OAUTH_COOKIE_MAX_AGE = 60 * 10  # 10 minutes
GATEWAY_SECRET_HEADER = "X-Gateway-Secret"

# =============================================================================
# Posts
# =============================================================================
POSTS_PAGE_SIZE = 20
POST_CACHE_PREFIX = "post:"
EMBED_CONTENT_MAX_CHARS = 1000

# =============================================================================
# Search
# =============================================================================
SEARCH_MIN_LENGTH = 2
SEARCH_TOP_K = 5

# =============================================================================
# Cache TTLs (in seconds)
# =============================================================================
CACHE_TTL_POST = 60 * 60 * 24 * 7  # 7 days

# =============================================================================
# API Timeouts (in seconds)
# =============================================================================
HTTPX_TIMEOUT = 10.0
ERROR_BODY_MAX_CHARS = 200

# =============================================================================
# External API URLs
# =============================================================================
GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_USER_URL = "https://api.github.com/user"

GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USER_URL = "https://openidconnect.googleapis.com/v1/userinfo"

DISCORD_AUTHORIZE_URL = "https://discord.com/oauth2/authorize"
DISCORD_TOKEN_URL = "https://discord.com/api/oauth2/token"
DISCORD_USER_URL = "https://discord.com/api/users/@me"
DISCORD_CDN_URL = "https://cdn.discordapp.com"
