"""
Wrangler - Cloudflare Workers KV CLI

Copyright 2026 UAA Software

Permission is hereby granted, free of charge, to any person obtaining a copy of
this software and associated documentation files (the “Software”), to deal in
the Software without restriction, including without limitation the rights to
use, copy, modify, merge, publish, distribute, sublicense, and/or sell copies of
the Software, and to permit persons to whom the Software is furnished to do so,
subject to the following conditions:

The above copyright notice and this permission notice shall be included in all
copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED “AS IS”, WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY, FITNESS
FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR
COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER
IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE SOFTWARE.
"""

import argparse
import base64
import getpass
import json
import logging
import os
import stat
import sys
import tempfile
from pathlib import Path
from typing import Any
from urllib.parse import quote

import requests
from filelock import FileLock as _FileLock

try:
    import tomllib
except ImportError:
    import tomli as tomllib


# Module-level logger
logger = logging.getLogger("wrangler")


API_BASE_URL = "https://api.cloudflare.com/client/v4"

NAMESPACE_PAGE_SIZE = 100

# Printable ASCII minus the path-segment encode set. Everything else, including
# `/`, `%` and non-ASCII bytes, is percent-encoded.
PATH_SEGMENT_SAFE = "".join(
    chr(c) for c in range(0x21, 0x7F) if chr(c) not in '"#<>`?{}%/'
)

INPUT_FILE = "file"
INPUT_DIRECTORY = "directory"
INPUT_UNSUPPORTED = "unsupported"


# =============================================================================
# Exceptions
# =============================================================================


class ApiError(Exception):
    """Error response (or no response) from the Cloudflare API."""

    def __init__(
        self, message: str, status_code: int | None, errors: list[dict[str, Any]]
    ):
        super().__init__(message)
        self.status_code = status_code
        self.errors = errors


class ConfigError(Exception):
    """Error in configuration."""


class JSONFormatError(ValueError):
    """Bulk input file is not valid JSON or has the wrong shape."""


class InputKindError(Exception):
    """Bulk input path is neither a regular file nor a directory."""

    def __init__(self, message: str, path: Path):
        super().__init__(message)
        self.path = path


class EncodingError(Exception):
    """Text cannot be sent as a single URL path segment."""


# =============================================================================
# Output Helpers
# =============================================================================


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    CYAN = "\033[36m"


def use_color() -> bool:
    """Whether status lines get ANSI colors.

    Off under NO_COLOR or CI, and when stdout is not a TTY.
    """
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("CI"):
        return False
    if not sys.stdout.isatty():
        return False
    return True


def colorize(text: str, color: str) -> str:
    """Wrap text in ANSI color codes if appropriate."""
    if not use_color():
        return text
    color_code = getattr(Colors, color.upper(), "")
    if color_code:
        return f"{color_code}{text}{Colors.RESET}"
    return text


def working(message: str) -> None:
    print(colorize(f"🌀  {message}", "CYAN"))


def success(message: str) -> None:
    print(colorize(f"✨  {message}", "GREEN"))


def warn(message: str) -> None:
    print(colorize(f"⚠️  {message}", "YELLOW"), file=sys.stderr)


def die(message: str, hint: str | None = None, exit_code: int = 1) -> int:
    """Report a failed command on stderr and in the log.

    Commands `return die(...)` so main() hands the code back to the shell.

    Args:
        message: What went wrong, e.g. an ApiError or a bad input file
        hint: How to fix it, e.g. run `wrangler config`
        exit_code: Code for main() to return

    Returns:
        exit_code
    """
    print(colorize(f"Error: {message}", "RED"), file=sys.stderr)
    logger.error(f"Exited with code {exit_code}: {message}")

    if hint:
        print(colorize(f"Hint: {hint}", "YELLOW"), file=sys.stderr)
        logger.error(f"Hint: {hint}")

    return exit_code


# =============================================================================
# Logging
# =============================================================================


def setup_logging(verbosity: int = 0, log_file: bool = True) -> None:
    """Route the wrangler logger to stderr and to $WRANGLER_HOME/wrangler.log.

    Requests and responses are logged at DEBUG, so `-v` shows every API call.
    The log file always records DEBUG.

    Args:
        verbosity: count of -v flags (0 warnings only on stderr, 1 DEBUG,
            2 DEBUG with logger names)
        log_file: Whether to append to wrangler.log
    """
    if verbosity >= 2:
        level = logging.DEBUG
        fmt = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    elif verbosity >= 1:
        level = logging.DEBUG
        fmt = "%(asctime)s - %(levelname)s - %(message)s"
    else:
        level = logging.INFO
        fmt = "%(asctime)s - %(levelname)s - %(message)s"

    logger.handlers = []
    logger.setLevel(level)

    # Console only shows warnings unless -v was given
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING if verbosity == 0 else level)
    console_handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(console_handler)

    if log_file:
        log_path = get_user_config_dir() / "wrangler.log"

        file_handler = logging.FileHandler(log_path, mode="a")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(file_handler)

        logger.debug(f"Logging initialized (verbosity={verbosity})")


# =============================================================================
# Low-level Utilities
# =============================================================================


def with_file_lock(path: Path, timeout: float = 10.0):
    """Context manager for cross-platform file locking.

    Args:
        path: Path to lock file
        timeout: Seconds to wait for lock (default 10s, -1 for infinite)
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    return _FileLock(path, timeout=timeout)


def atomic_write_text(dest: Path, text: str, mode: int = 0o600) -> None:
    """Write text to dest atomically via temp file + rename."""
    dest.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(dir=dest.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.chmod(temp_path, mode)
        os.replace(temp_path, dest)
    except Exception:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise


# =============================================================================
# Configuration
# =============================================================================


def get_user_config_dir() -> Path:
    """Return ~/.wrangler/, creating if needed."""
    env_override = os.environ.get("WRANGLER_HOME")
    if env_override:
        config_dir = Path(env_override)
    else:
        config_dir = Path.home() / ".wrangler"

    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def global_config_path() -> Path:
    return get_user_config_dir() / "config" / "default.toml"


def load_toml(path: Path) -> dict[str, Any]:
    """Load a TOML file, returning {} if it does not exist."""
    if not path.exists():
        return {}

    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e


def load_project_config(project_dir: Path) -> dict[str, Any]:
    """Load wrangler.toml from the project directory."""
    return load_toml(project_dir / "wrangler.toml")


def resolve_account_id(project_config: dict[str, Any]) -> str:
    """Account id from CF_ACCOUNT_ID, else wrangler.toml's account_id."""
    account_id = os.environ.get("CF_ACCOUNT_ID") or project_config.get("account_id")
    if not account_id:
        raise ConfigError(
            "No account_id found. Add account_id to wrangler.toml or set CF_ACCOUNT_ID"
        )
    return str(account_id)


def load_global_user() -> dict[str, str]:
    """Resolve Cloudflare credentials.

    Environment variables take priority over the global config file:
        CF_API_TOKEN, or CF_EMAIL together with CF_API_KEY

    Returns:
        Dict with either api_token, or email and api_key

    Raises:
        ConfigError: If no complete set of credentials is found
    """
    token = os.environ.get("CF_API_TOKEN")
    if token:
        return {"api_token": token}

    email = os.environ.get("CF_EMAIL")
    api_key = os.environ.get("CF_API_KEY")
    if email and api_key:
        return {"email": email, "api_key": api_key}

    config_path = global_config_path()
    config = load_toml(config_path)
    if config.get("api_token"):
        return {"api_token": str(config["api_token"])}
    if config.get("email") and config.get("api_key"):
        return {"email": str(config["email"]), "api_key": str(config["api_key"])}

    raise ConfigError(f"No Cloudflare credentials found (checked env and {config_path})")


def _toml_string(value: str) -> str:
    # JSON string escapes are a subset of TOML basic string escapes
    return json.dumps(value, ensure_ascii=False)


def write_global_user(user: dict[str, str]) -> Path:
    """Write credentials to the global config file, readable only by the owner."""
    config_path = global_config_path()
    lines = [f"{key} = {_toml_string(value)}" for key, value in user.items()]

    with with_file_lock(config_path.with_suffix(".lock")):
        atomic_write_text(config_path, "\n".join(lines) + "\n")

    logger.info(f"Wrote credentials to {config_path}")
    return config_path


# =============================================================================
# API Client
# =============================================================================


def auth_headers(user: dict[str, str]) -> dict[str, str]:
    if user.get("api_token"):
        return {"Authorization": f"Bearer {user['api_token']}"}
    return {"X-Auth-Email": user["email"], "X-Auth-Key": user["api_key"]}


def format_api_errors(errors: list[dict[str, Any]], status_code: int | None) -> str:
    """Render Cloudflare's errors array as one message."""
    if not errors:
        return f"Cloudflare API request failed (HTTP {status_code})"
    return "; ".join(
        f"Code {err.get('code', '?')}: {err.get('message', '')}" for err in errors
    )


class ApiClient:
    """Cloudflare v4 API client bound to one account."""

    def __init__(
        self,
        account_id: str,
        user: dict[str, str],
        session: requests.Session | None = None,
        base_url: str = API_BASE_URL,
        timeout: float | None = None,
    ):
        self.account_id = account_id
        self.base_url = f"{base_url.rstrip('/')}/accounts/{account_id}"
        self.headers = auth_headers(user)
        self.session = session or requests.Session()
        self.timeout = timeout

    def request_envelope(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
    ) -> dict[str, Any]:
        """Send one request and return the decoded response envelope.

        Raises:
            ApiError: On network failure, non-2xx status, a body that is not a
                JSON object, or an envelope with success=false
        """
        url = f"{self.base_url}/{path}"
        logger.debug(f"{method} {url} params={params}")

        try:
            response = self.session.request(
                method,
                url,
                headers=self.headers,
                params=params,
                json=json_body,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ApiError(f"Could not reach Cloudflare API: {e}", None, []) from e

        logger.debug(f"{method} {url} -> HTTP {response.status_code}")

        try:
            envelope = response.json()
        except ValueError:
            envelope = None

        if not isinstance(envelope, dict):
            raise ApiError(
                f"Unexpected response from Cloudflare API (HTTP {response.status_code})",
                response.status_code,
                [],
            )

        errors = [err for err in envelope.get("errors") or [] if isinstance(err, dict)]
        if not response.ok or not envelope.get("success"):
            raise ApiError(
                format_api_errors(errors, response.status_code),
                response.status_code,
                errors,
            )

        return envelope

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
    ) -> Any:
        """Send one request and return the envelope's result."""
        envelope = self.request_envelope(
            method, path, params=params, json_body=json_body
        )
        return envelope.get("result")


def build_client(project_dir: Path) -> ApiClient:
    """Build an API client from wrangler.toml and the global credentials."""
    project_config = load_project_config(project_dir)
    account_id = resolve_account_id(project_config)
    user = load_global_user()
    logger.debug(f"Using account {account_id}")
    return ApiClient(account_id, user)


# =============================================================================
# Key Encoding
# =============================================================================


def encode_segment(text: str) -> str:
    """Percent-encode text so it fits in a single URL path segment.

    Raises:
        EncodingError: If text is empty, a dot segment, or not valid UTF-8
    """
    # requests resolves dot segments, even percent-encoded ones
    if text in ("", ".", ".."):
        raise EncodingError(f"{text!r} cannot be used as a key or namespace id")
    try:
        return quote(text, safe=PATH_SEGMENT_SAFE, encoding="utf-8", errors="strict")
    except UnicodeEncodeError as e:
        raise EncodingError(f"found a non-UTF-8 name: {text!r}") from e


def generate_key(path: Path, directory: Path) -> str:
    """Build a storage key from a file path relative to directory.

    Components are joined with `/` regardless of os.sep, then the whole key is
    percent-encoded, so `sub/b.txt` becomes `sub%2Fb.txt`.
    """
    rel_path = Path(path).relative_to(directory)
    return encode_segment("/".join(rel_path.parts))


# =============================================================================
# Directory Collection
# =============================================================================


def _raise_walk_error(exc: OSError) -> None:
    raise exc


def _find_regular_files(directory: Path) -> list[Path]:
    """Find regular files recursively in sorted order, skipping symlinks."""
    files = []

    for root, dirs, filenames in os.walk(directory, onerror=_raise_walk_error):
        dirs.sort()
        for filename in sorted(filenames):
            path = Path(root) / filename
            if path.is_symlink() or not path.is_file():
                continue
            files.append(path)

    return files


def collect_directory_pairs(directory: Path) -> list[dict[str, Any]]:
    """Key-value pairs for every file under directory, values base64-encoded."""
    directory = Path(directory)
    pairs = []

    for path in _find_regular_files(directory):
        key = generate_key(path, directory)
        value = base64.b64encode(path.read_bytes()).decode("ascii")
        working(f"Uploading {key}...")
        pairs.append({"key": key, "value": value, "base64": True})

    logger.debug(f"Collected {len(pairs)} pairs from {directory}")
    return pairs


def collect_directory_keys(directory: Path) -> list[str]:
    """Keys for every file under directory."""
    directory = Path(directory)
    keys = []

    for path in _find_regular_files(directory):
        key = generate_key(path, directory)
        working(f"Deleting {key}...")
        keys.append(key)

    logger.debug(f"Collected {len(keys)} keys from {directory}")
    return keys


# =============================================================================
# Bulk Input Loading
# =============================================================================


def classify_input(path: Path) -> str:
    """Classify a bulk input path without following symlinks.

    Raises:
        OSError: If the path is missing or cannot be inspected
    """
    mode = os.lstat(path).st_mode
    if stat.S_ISREG(mode):
        return INPUT_FILE
    if stat.S_ISDIR(mode):
        return INPUT_DIRECTORY
    return INPUT_UNSUPPORTED


def _unsupported_input(path: Path) -> InputKindError:
    what = "a symlink" if path.is_symlink() else "neither"
    return InputKindError(f"{path} should be a file or directory, but is {what}", path)


def read_json_file(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise JSONFormatError(f"{path} is not valid JSON: {e}") from e


def validate_pairs(data: Any, source: Path) -> list[dict[str, Any]]:
    """Check that data is a list of {key, value, base64?} objects."""
    if not isinstance(data, list):
        raise JSONFormatError(
            f"{source} should contain an array of objects, like "
            '[{"key": "...", "value": "..."}]'
        )

    for i, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise JSONFormatError(f"{source}: entry {i} is not an object")
        if not isinstance(entry.get("key"), str):
            raise JSONFormatError(f"{source}: entry {i} needs a string \"key\"")
        if not isinstance(entry.get("value"), str):
            raise JSONFormatError(f"{source}: entry {i} needs a string \"value\"")
        if "base64" in entry and not isinstance(entry["base64"], bool):
            raise JSONFormatError(f"{source}: entry {i} has a non-boolean \"base64\"")

    return data


def validate_keys(data: Any, source: Path) -> list[str]:
    """Check that data is a list of key strings."""
    if not isinstance(data, list):
        raise JSONFormatError(f"{source} should contain an array of key strings")

    for i, key in enumerate(data):
        if not isinstance(key, str):
            raise JSONFormatError(f"{source}: entry {i} is not a string")

    return data


def load_bulk_pairs(path: Path) -> list[dict[str, Any]]:
    """Load key-value pairs from a JSON file or a directory tree."""
    path = Path(path)
    kind = classify_input(path)
    logger.debug(f"Bulk write input {path} is {kind}")

    if kind == INPUT_FILE:
        return validate_pairs(read_json_file(path), path)
    if kind == INPUT_DIRECTORY:
        return collect_directory_pairs(path)
    raise _unsupported_input(path)


def load_bulk_keys(path: Path) -> list[str]:
    """Load keys from a JSON file or a directory tree."""
    path = Path(path)
    kind = classify_input(path)
    logger.debug(f"Bulk delete input {path} is {kind}")

    if kind == INPUT_FILE:
        return validate_keys(read_json_file(path), path)
    if kind == INPUT_DIRECTORY:
        return collect_directory_keys(path)
    raise _unsupported_input(path)


# =============================================================================
# KV Operations
# =============================================================================


def _namespace_path(namespace_id: str) -> str:
    return f"storage/kv/namespaces/{encode_segment(namespace_id)}"


def write_bulk(
    client: ApiClient,
    namespace_id: str,
    pairs: list[dict[str, Any]],
    expiration: int | None = None,
    ttl: int | None = None,
    base64_values: bool = False,
) -> None:
    """Write all pairs in one request.

    Args:
        client: API client for the account
        namespace_id: Target namespace
        pairs: Key-value pairs, sent as given
        expiration: Absolute expiry in seconds since the UNIX epoch
        ttl: Seconds until expiry, passed through without local checks
        base64_values: Mark pairs without their own base64 field as base64

    Raises:
        ApiError: If the API rejects the request
    """
    if base64_values:
        pairs = [p if "base64" in p else {**p, "base64": True} for p in pairs]

    params = {}
    if expiration is not None:
        params["expiration"] = expiration
    if ttl is not None:
        params["expiration_ttl"] = ttl

    logger.info(f"Writing {len(pairs)} pairs to namespace {namespace_id}")
    client.request(
        "PUT",
        f"{_namespace_path(namespace_id)}/bulk",
        params=params or None,
        json_body=pairs,
    )


def delete_bulk(client: ApiClient, namespace_id: str, keys: list[str]) -> None:
    """Delete all keys in one request."""
    logger.info(f"Deleting {len(keys)} keys from namespace {namespace_id}")
    client.request("DELETE", f"{_namespace_path(namespace_id)}/bulk", json_body=keys)


def delete_key(client: ApiClient, namespace_id: str, key: str) -> None:
    """Delete a single key."""
    logger.info(f"Deleting key {key!r} from namespace {namespace_id}")
    client.request(
        "DELETE", f"{_namespace_path(namespace_id)}/values/{encode_segment(key)}"
    )


# =============================================================================
# Namespace Operations
# =============================================================================


def create_namespace(client: ApiClient, title: str) -> dict[str, Any]:
    logger.info(f"Creating namespace {title!r}")
    return client.request("POST", "storage/kv/namespaces", json_body={"title": title})


def delete_namespace(client: ApiClient, namespace_id: str) -> None:
    logger.info(f"Deleting namespace {namespace_id}")
    client.request("DELETE", _namespace_path(namespace_id))


def rename_namespace(client: ApiClient, namespace_id: str, title: str) -> None:
    logger.info(f"Renaming namespace {namespace_id} to {title!r}")
    client.request("PUT", _namespace_path(namespace_id), json_body={"title": title})


def list_namespaces(client: ApiClient) -> list[dict[str, Any]]:
    """List every namespace in the account, following pagination."""
    namespaces: list[dict[str, Any]] = []
    page = 1

    while True:
        envelope = client.request_envelope(
            "GET",
            "storage/kv/namespaces",
            params={"page": page, "per_page": NAMESPACE_PAGE_SIZE},
        )
        batch = envelope.get("result") or []
        namespaces.extend(batch)

        total_pages = (envelope.get("result_info") or {}).get("total_pages")
        if len(batch) < NAMESPACE_PAGE_SIZE:
            break
        if total_pages is not None and page >= total_pages:
            break
        page += 1

    logger.debug(f"Listed {len(namespaces)} namespaces over {page} page(s)")
    return namespaces


# =============================================================================
# Commands
# =============================================================================


INPUT_ERRORS = (OSError, JSONFormatError, InputKindError, EncodingError)


def api_failure(e: ApiError) -> int:
    """Report an API error and return the exit code for it."""
    hint = None
    if e.status_code in (401, 403) or any(err.get("code") == 10000 for err in e.errors):
        hint = "Check your credentials with `wrangler config` or CF_* env vars"
    return die(str(e), hint=hint)


def cmd_write_bulk(
    client: ApiClient,
    namespace_id: str,
    filename: str,
    expiration: int | None = None,
    ttl: int | None = None,
    base64_values: bool = False,
) -> int:
    """Execute kv write bulk."""
    try:
        pairs = load_bulk_pairs(Path(filename))
    except INPUT_ERRORS as e:
        return die(str(e))

    try:
        write_bulk(client, namespace_id, pairs, expiration, ttl, base64_values)
    except EncodingError as e:
        return die(str(e))
    except ApiError as e:
        return api_failure(e)

    success("Success")
    return 0


def cmd_delete_bulk(client: ApiClient, namespace_id: str, filename: str) -> int:
    """Execute kv delete-bulk."""
    try:
        keys = load_bulk_keys(Path(filename))
    except INPUT_ERRORS as e:
        return die(str(e))

    try:
        delete_bulk(client, namespace_id, keys)
    except EncodingError as e:
        return die(str(e))
    except ApiError as e:
        return api_failure(e)

    success("Success")
    return 0


def cmd_delete_key(client: ApiClient, namespace_id: str, key: str) -> int:
    """Execute kv delete-key."""
    working(f'Deleting key "{key}"')
    try:
        delete_key(client, namespace_id, key)
    except EncodingError as e:
        return die(str(e))
    except ApiError as e:
        return api_failure(e)

    success("Success")
    return 0


def cmd_create_namespace(client: ApiClient, title: str) -> int:
    working(f'Creating namespace with title "{title}"')
    try:
        namespace = create_namespace(client, title)
    except ApiError as e:
        return api_failure(e)

    success(f"Success: {json.dumps(namespace)}")
    return 0


def cmd_delete_namespace(client: ApiClient, namespace_id: str) -> int:
    working(f"Deleting namespace {namespace_id}")
    try:
        delete_namespace(client, namespace_id)
    except EncodingError as e:
        return die(str(e))
    except ApiError as e:
        return api_failure(e)

    success("Success")
    return 0


def cmd_rename_namespace(client: ApiClient, namespace_id: str, title: str) -> int:
    working(f'Renaming namespace {namespace_id} to "{title}"')
    try:
        rename_namespace(client, namespace_id, title)
    except EncodingError as e:
        return die(str(e))
    except ApiError as e:
        return api_failure(e)

    success("Success")
    return 0


def cmd_list_namespaces(client: ApiClient, json_output: bool = False) -> int:
    """Execute kv list."""
    try:
        namespaces = list_namespaces(client)
    except ApiError as e:
        return api_failure(e)

    if json_output:
        print(json.dumps(namespaces, indent=2))
        return 0

    if not namespaces:
        print("No namespaces found")
        return 0

    for namespace in namespaces:
        print(f"{namespace.get('id')}  {namespace.get('title')}")
    return 0


def cmd_config(api_token: bool = False) -> int:
    """Prompt for credentials and store them in the global config file."""
    try:
        if api_token:
            token = getpass.getpass("Enter api token: ").strip()
            user = {"api_token": token}
        else:
            email = input("Enter email: ").strip()
            api_key = getpass.getpass("Enter api key: ").strip()
            user = {"email": email, "api_key": api_key}
    except EOFError:
        return die("No input received")

    if not all(user.values()):
        return die("Credentials cannot be empty")

    try:
        config_path = write_global_user(user)
    except OSError as e:
        return die(f"Could not write credentials: {e}")

    success(f"Credentials saved to {config_path}")
    return 0


# =============================================================================
# CLI Entry Point
# =============================================================================


def _add_expiration_args(parser: argparse.ArgumentParser, default: Any) -> None:
    parser.add_argument(
        "-e",
        "--expiration",
        type=int,
        metavar="SECONDS",
        default=default,
        help="the time, measured in number of seconds since the UNIX epoch, "
        "at which the entries should expire",
    )
    parser.add_argument(
        "-t",
        "--ttl",
        type=int,
        metavar="SECONDS",
        default=default,
        help="the number of seconds for which the entries should be visible "
        "before they expire. At least 60",
    )


def run_kv_command(client: ApiClient, args: argparse.Namespace) -> int:
    if args.kv_command == "create":
        return cmd_create_namespace(client, args.title)
    elif args.kv_command == "delete":
        return cmd_delete_namespace(client, args.id)
    elif args.kv_command == "rename":
        return cmd_rename_namespace(client, args.id, args.title)
    elif args.kv_command == "list":
        return cmd_list_namespaces(client, args.json)
    elif args.kv_command == "write":
        return cmd_write_bulk(
            client, args.id, args.filename, args.expiration, args.ttl, args.base64
        )
    elif args.kv_command == "delete-key":
        return cmd_delete_key(client, args.id, args.key)
    elif args.kv_command == "delete-bulk":
        return cmd_delete_bulk(client, args.id, args.filename)
    return die(f"Unknown kv command: {args.kv_command}")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="wrangler",
        description="Interact with Cloudflare Workers KV",
        exit_on_error=False,
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (use -v for DEBUG, -vv for DEBUG with logger names)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # config command
    config_parser = subparsers.add_parser(
        "config", help="Setup wrangler with your Cloudflare account"
    )
    config_parser.add_argument(
        "--api-token",
        action="store_true",
        help="Store an API token instead of an email and global API key",
    )

    # kv command
    kv_parser = subparsers.add_parser("kv", help="Interact with your Workers KV Store")
    kv_subparsers = kv_parser.add_subparsers(dest="kv_command", help="KV subcommands")

    create_parser = kv_subparsers.add_parser("create", help="Create a namespace")
    create_parser.add_argument("title", help="the title of the new namespace")

    delete_parser = kv_subparsers.add_parser("delete", help="Delete a namespace")
    delete_parser.add_argument("id", help="the id of your Workers KV namespace")

    rename_parser = kv_subparsers.add_parser("rename", help="Rename a namespace")
    rename_parser.add_argument("id", help="the id of your Workers KV namespace")
    rename_parser.add_argument("title", help="the new title of the namespace")

    list_parser = kv_subparsers.add_parser("list", help="List namespaces")
    list_parser.add_argument(
        "--json", action="store_true", help="Output in JSON format"
    )

    write_parser = kv_subparsers.add_parser("write", help="Write key-value pairs")
    _add_expiration_args(write_parser, default=None)
    write_subparsers = write_parser.add_subparsers(
        dest="write_command", help="Write subcommands"
    )
    bulk_parser = write_subparsers.add_parser(
        "bulk", help="upload multiple key-value pairs at once"
    )
    bulk_parser.add_argument("id", help="the id of your Workers KV namespace")
    bulk_parser.add_argument(
        "filename",
        help='the json file of key-value pairs to upload, in form [{"key":..., '
        '"value":...}, ...], or a directory of files to upload',
    )
    bulk_parser.add_argument(
        "--base64",
        action="store_true",
        help="the server should base64 decode the value before storing it. "
        "Useful for writing values that wouldn't otherwise be valid JSON "
        "strings, such as images.",
    )
    # Also accepted after `bulk`; SUPPRESS keeps the write-level values otherwise
    _add_expiration_args(bulk_parser, default=argparse.SUPPRESS)

    delete_key_parser = kv_subparsers.add_parser(
        "delete-key", help="Delete a single key"
    )
    delete_key_parser.add_argument("id", help="the id of your Workers KV namespace")
    delete_key_parser.add_argument("key", help="the key to delete")

    delete_bulk_parser = kv_subparsers.add_parser(
        "delete-bulk", help="delete multiple keys at once"
    )
    delete_bulk_parser.add_argument("id", help="the id of your Workers KV namespace")
    delete_bulk_parser.add_argument(
        "filename",
        help='the json file of keys to delete, in form ["key1", "key2", ...], '
        "or a directory whose file paths are the keys",
    )

    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # argparse calls sys.exit() on --help or errors
        return e.code if isinstance(e.code, int) else 1
    except argparse.ArgumentError as e:
        parser.print_usage(sys.stderr)
        print(f"wrangler: error: {e}", file=sys.stderr)
        return 2

    setup_logging(verbosity=args.verbose, log_file=True)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "config":
        return cmd_config(args.api_token)

    if args.kv_command is None:
        warn("kv expects a subcommand")
        kv_parser.print_help()
        return 0
    if args.kv_command == "write" and args.write_command is None:
        warn("kv write expects a subcommand")
        write_parser.print_help()
        return 0

    try:
        client = build_client(Path.cwd())
    except ConfigError as e:
        return die(
            str(e),
            hint="Set account_id in wrangler.toml and run `wrangler config` "
            "(or set CF_ACCOUNT_ID, CF_EMAIL and CF_API_KEY)",
        )

    return run_kv_command(client, args)


if __name__ == "__main__":
    sys.exit(main())
