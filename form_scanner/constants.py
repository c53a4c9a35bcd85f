"""Application-wide constants.

This module centralizes all magic numbers and configuration constants
to ensure a single source of truth and easier maintenance.
"""

# =============================================================================
# Page Fetching
# =============================================================================

# Timeout for a single page or iframe fetch (seconds)
DEFAULT_FETCH_TIMEOUT_SECONDS = 15.0

# Maximum number of redirects followed per fetch
DEFAULT_FETCH_MAX_REDIRECTS = 5

# Browser-like headers sent with every page fetch
DEFAULT_FETCH_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate",
    "Upgrade-Insecure-Requests": "1",
}

# Iframe sources that never point at fetchable content
SKIPPED_IFRAME_PREFIXES = ("data:", "javascript:")
EMPTY_PAGE_SENTINEL = "about:blank"

# =============================================================================
# Gemini API
# =============================================================================

DEFAULT_GEMINI_MODEL = "gemini-1.5-pro"

DEFAULT_GEMINI_API_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

# Client-side bound on a single generateContent call (seconds)
DEFAULT_GEMINI_TIMEOUT_SECONDS = 120.0

# Low temperature for consistent, factual responses
DEFAULT_GEMINI_TEMPERATURE = 0.1
DEFAULT_GEMINI_TOP_P = 0.95
DEFAULT_GEMINI_TOP_K = 40
DEFAULT_GEMINI_MAX_OUTPUT_TOKENS = 8192

# =============================================================================
# Pricing (Gemini 1.5 Pro, USD per 1K tokens, up to 128K context)
# =============================================================================

DEFAULT_INPUT_COST_PER_1K_TOKENS = 0.00125
DEFAULT_OUTPUT_COST_PER_1K_TOKENS = 0.005

# Decimal places kept for every reported cost
COST_DECIMAL_PLACES = 6

# =============================================================================
# Server
# =============================================================================

DEFAULT_PORT = 3000

APP_VERSION = "1.0.0"

# =============================================================================
# Benchmark
# =============================================================================

DEFAULT_BENCHMARK_RUNS = 10

DEFAULT_BENCHMARK_API_BASE_URL = "http://localhost:3000"

# Timeout for benchmark calls into the scanner API; analysis can be slow
BENCHMARK_HTTP_TIMEOUT_SECONDS = 300.0

DEFAULT_BENCHMARK_SITES = {
    "BrowserStack Contact": "https://www.browserstack.com/contact?ref=footer",
    "RatedPower Demo": "https://ratedpower.com/request-demo/",
    "Salesforce Demo": "https://www.salesforce.com/ap/form/demo/request-a-demo/",
    "LinkedIn Sales Demo": "https://business.linkedin.com/sales-solutions/request-free-demo-form-b",
    "Greenhouse Demo": "https://www.greenhouse.com/uk/demo",
    "Zendesk Contact": "https://www.zendesk.com/in/contact",
    "Local Test Forms": "http://localhost:3000/all-forms",
}
