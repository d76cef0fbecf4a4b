"""
Sherlock Provider Pipeline Test Package.

Covers the provider adapter layer end to end without network access:

- JSON extraction and normalization of loosely-typed model output
- Retry policy and error classification
- Key store and persisted system config
- Prompt construction from investigation scopes
- Adapter contracts against recorded provider payloads (httpx.MockTransport,
  fake google-genai client)
- Router dispatch, capability checks and degraded mode

Usage:
    # Run everything
    pytest ci/evaluation/

    # Only the adapter contract tests
    pytest ci/evaluation/ -m contract

    # Skip slow tests
    pytest ci/evaluation/ -m "not slow"
"""
