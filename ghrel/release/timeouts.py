from __future__ import annotations

# GH API reads and mutations
GH_TIMEOUT_SECONDS = 60.0

# Asset uploads stream whole files
GH_UPLOAD_TIMEOUT_SECONDS = 30 * 60.0

# Local git queries
GIT_TIMEOUT_SECONDS = 30.0

# Idempotent GH read retry policy
GH_READ_RETRY_ATTEMPTS = 3
GH_READ_RETRY_DELAY_SECONDS = 1.0

# Releases/assets page size for list calls
GH_PAGE_SIZE = 100
