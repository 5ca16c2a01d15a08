from __future__ import annotations

# Local git operations (diff, rev-parse, log, checkout)
GIT_TIMEOUT_SECONDS = 30.0

# Network-bound git operations (fetch)
GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

# gh release create
GH_TIMEOUT_SECONDS = 60.0

# gh release upload
GH_UPLOAD_TIMEOUT_SECONDS = 15 * 60.0

# MSBuild
BUILD_TIMEOUT_SECONDS = 20 * 60.0
