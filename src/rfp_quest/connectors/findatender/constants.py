"""Find a Tender OCDS API constants and release field names."""

API_BASE_URL = "https://www.find-tender.service.gov.uk/api/1.0"
RELEASE_PACKAGES_PATH = "/ocdsReleasePackages"

# Query parameters
PAGE_SIZE = 100
LIMIT_PARAM = "limit"
UPDATED_FROM_PARAM = "updatedFrom"

# Rate limiting
RETRYABLE_STATUSES = frozenset({429, 503})
DEFAULT_RETRY_AFTER_SECONDS = 60.0

# Release fields
OCID = "ocid"
RELEASE_ID = "id"
RELEASE_DATE = "date"
TAG = "tag"
TENDER = "tender"
BUYER = "buyer"
PARTIES = "parties"

# Defaults
UNTITLED = "Untitled"
DEFAULT_CURRENCY = "GBP"
CPV_SCHEME = "CPV"
BUYER_ROLE = "buyer"
