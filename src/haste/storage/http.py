import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

USER_AGENT = 'haste (bulk object-store transfer)'


def create_http_session(pool_size: int = 10) -> requests.Session:
    """Shared client for every worker; one pooled connection per worker, no retries."""
    retries = Retry(total=0, connect=0, read=0, redirect=False, status=0)
    adapter = HTTPAdapter(pool_connections=1, pool_maxsize=pool_size, max_retries=retries)
    session = requests.Session()
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers.update({"User-Agent": USER_AGENT})
    return session
