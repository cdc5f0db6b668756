"""HTTP header constants for the support assistant service."""

HEADER_CORRELATION_ID = "X-Correlation-ID"
