"""
HTTP sessions with connection pooling, automatic retry, and CA bundle lookup.

Two kinds of session are used per run:
  - the attendance/token session: pooled, urllib3 Retry on gateway errors
    for reads only (a replayed POST would store the punch twice);
  - the device session: no adapter-level retries (DigestClient owns the
    retry budget) and no certificate verification, since the access-control
    devices serve self-signed certificates.
"""

import os
import requests
import urllib3
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

_retry_strategy = Retry(
    total=3,
    backoff_factor=2,                           # Wait 2s, 4s, 8s between retries
    status_forcelist=[502, 503, 504],
    allowed_methods=["HEAD", "GET"],           # POST creates records: never replayed
)


def _get_ca_bundle():
    """Get the CA bundle path.

    Priority: env var → certifi → system default.
    """
    env_ca = os.environ.get('REQUESTS_CA_BUNDLE') or os.environ.get('SSL_CERT_FILE')
    if env_ca and os.path.isfile(env_ca):
        return env_ca
    try:
        import certifi
        return certifi.where()
    except ImportError:
        return True


def create_session():
    """Create a requests.Session for the attendance and token APIs."""
    session = requests.Session()
    adapter = HTTPAdapter(
        pool_connections=1,
        pool_maxsize=3,
        max_retries=_retry_strategy,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.verify = _get_ca_bundle()
    return session


def create_device_session():
    """Create a requests.Session for digest calls to access-control devices."""
    session = requests.Session()
    adapter = HTTPAdapter(pool_connections=1, pool_maxsize=1, max_retries=0)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.verify = False
    urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
    return session


def close_session(session):
    """Close a session, ignoring errors from already-dead connections."""
    try:
        session.close()
    except requests.RequestException:
        pass
