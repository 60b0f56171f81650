"""
reconcile_core — ACS device → attendance reconciliation v1.2
============================================================
Architecture: single-threaded, one device at a time, one page at a time.

  constants.py    → Version, endpoints, page sizes, retry budgets
  config.py       → Logging, config load from env/.env, safe_print
  exceptions.py   → Error taxonomy (run / device / record scope)
  http_client.py  → HTTP sessions: pooled+retry for APIs, plain for devices
  state.py        → ChallengeContext dataclass (per-device digest state)
  digest.py       → Digest header math + WWW-Authenticate parsing
  device.py       → DigestClient (401 negotiation, retries) + ISAPI calls
  query.py        → ACS event search request body
  dates.py        → Report window, UTC offsets, Unix-second normalization
  auth_token.py   → Bearer token provider (cached until near expiry)
  attendance.py   → Attendance snapshot loader + punch submission
  reconcile.py    → Reconciler (per-device pagination and submission)
  runner.py       → main() + exit codes
"""
