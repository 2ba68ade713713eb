from pathlib import Path
from urllib.parse import urlparse
from pydantic import BaseModel
from dataclasses import dataclass, fields
import yaml

PROJECT_ROOT = Path(__file__).resolve().parents[1]
CONFIG_FILE_NAME = "check_config.yaml"

class ProxySettings(BaseModel):
    server: str | None = None
    username: str | None = None
    password: str | None = None

    @property
    def url(self) -> str | None:
        """
        Full proxy URL with credentials if available, otherwise bare server.

        For aiohttp:
            proxy=self.url
        """
        if self.server and self.username and self.password:
            parsed = urlparse(self.server)
            hostport = parsed.netloc or f"{parsed.hostname}:{parsed.port}"
            return f"{parsed.scheme}://{self.username}:{self.password}@{hostport}"
        return self.server

def load_proxy_from_txt(path: str) -> ProxySettings:
    """
    Load proxy settings from a text file containing a single URL line.

    The file itself (e.g. data/ProxyURL.txt) is git-ignored. Relative paths
    are resolved against the working directory.
    """

    p = Path(path).expanduser()
    if not p.is_absolute():
        p = Path.cwd() / p

    if not p.exists():
        print("Proxy file not found:", p)
        return ProxySettings()

    raw = p.read_text(encoding="utf-8").strip()
    if not raw:
        print("Proxy file is empty:", p)
        return ProxySettings()

    lines = [ln.strip().strip('"').strip("'") for ln in raw.splitlines() if ln.strip()]
    line = lines[0]

    parsed = urlparse(line)
    if not parsed.scheme or not parsed.hostname:
        print("Proxy line does not look like a URL:", line)
        return ProxySettings()

    server = f"{parsed.scheme}://{parsed.hostname}"
    if parsed.port:
        server += f":{parsed.port}"

    return ProxySettings(
        server=server,
        username=parsed.username,
        password=parsed.password,
    )


@dataclass
class CheckConfig:
    """
    Central configuration for status checking.

    Values can be overridden via check_config.yaml at the project root.
    """

    # General
    use_proxy: bool = False
    user_agent: str = "URLStatusChecker/1.0"
    verify_ssl: bool = True

    # Per-attempt budget; one URL may use up to five attempts
    attempt_timeout_s: float = 8.0

    # Batch sizing by total job size
    small_job_max: int = 100
    medium_job_max: int = 500
    small_batch_size: int = 5
    medium_batch_size: int = 10
    large_batch_size: int = 15

    # Inter-batch backoff
    slow_batch_threshold_s: float = 10.0
    slow_batch_delay_s: float = 0.5
    fast_batch_delay_s: float = 0.1

    # Return the first >= 400 response instead of "Unreachable" when
    # every later strategy fails at the network level
    keep_error_responses: bool = True

def load_check_config(path: str | Path | None = None) -> CheckConfig:
    """
    Load CheckConfig from YAML if present; otherwise use defaults.

    By default, looks for `check_config.yaml` in the working directory, then
    at the project root, and quietly uses defaults if neither exists. A
    missing explicit path is reported.
    """

    if path is None:
        candidates = [Path.cwd() / CONFIG_FILE_NAME, PROJECT_ROOT / CONFIG_FILE_NAME]
        found = [p for p in candidates if p.exists()]
        if not found:
            return CheckConfig()
        path = found[0]

    path = Path(path)

    if not path.exists():
        print(f"[config] YAML not found at {path}, using defaults")
        return CheckConfig()

    raw = path.read_text(encoding="utf-8")
    data = yaml.safe_load(raw) or {}

    if not isinstance(data, dict):
        print(f"[config] Expected mapping in {path}, got {type(data)}, using defaults")
        return CheckConfig()

    allowed_keys = {f.name for f in fields(CheckConfig)}
    filtered = {k: v for k, v in data.items() if k in allowed_keys}

    return CheckConfig(**filtered)

DEFAULT_CHECK_CONFIG = load_check_config()
