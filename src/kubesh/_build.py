"""Build stamp, rewritten by the release build."""

COMMIT = "N/A"
BUILD_DATE = "N/A"
