# smrt/cli_client.py
"""
Command-line client for the /api/cli surface.

It reads a key file, JSON saved from the key-creation response plus the API address:

    {"apiUrl": "http://localhost:3001", "projectId": "...", "id": "...", "token": "sk_..."}

and sends every request to /api/cli/{projectId}/{id}/... with the token in
the `x-cli-secret` header.
"""
import argparse
import asyncio
import json
import logging
import os
import sys
from dataclasses import dataclass
from typing import Any, Optional

import httpx

logger = logging.getLogger("smrt.cli_client")

DEFAULT_KEY_PATH = os.path.join(".smrt-cli", ".key")
REQUIRED_FIELDS = ("apiUrl", "projectId", "id", "token")


class CliError(Exception):
    pass


class KeyFileError(CliError):
    pass


class RequestFailed(CliError):
    def __init__(self, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        message = f"Request failed with status {status_code}"
        if body:
            message += f"\nResponse: {body}"
        super().__init__(message)


@dataclass(frozen=True)
class KeyConfig:
    api_url: str
    project_id: str
    key_id: str
    token: str

    @property
    def base_path(self) -> str:
        return f"/api/cli/{self.project_id}/{self.key_id}"

    def path(self, endpoint: str = "") -> str:
        endpoint = endpoint.strip("/")
        return self.base_path + (f"/{endpoint}" if endpoint else "")


def load_key(path: str = DEFAULT_KEY_PATH) -> KeyConfig:
    if not os.path.exists(path):
        raise KeyFileError(f"Configuration file not found at {path}")
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise KeyFileError(f"Error parsing configuration file: {e}") from e

    if not isinstance(data, dict) or not all(data.get(field) for field in REQUIRED_FIELDS):
        raise KeyFileError(f"Incomplete configuration in {path}, expected {', '.join(REQUIRED_FIELDS)}")
    return KeyConfig(
        api_url=data["apiUrl"].rstrip("/"),
        project_id=data["projectId"],
        key_id=data["id"],
        token=data["token"],
    )


class SmrtClient:
    """Async client bound to one project key. Use as `async with SmrtClient(config) as client:`."""

    def __init__(self, config: KeyConfig, transport: Optional[httpx.AsyncBaseTransport] = None, timeout: float = 15):
        self.config = config
        self._client = httpx.AsyncClient(
            base_url=config.api_url,
            headers={"x-cli-secret": config.token},
            transport=transport,
            timeout=timeout,
        )

    async def __aenter__(self) -> "SmrtClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(self, method: str, endpoint: str = "", body: Optional[dict] = None) -> Any:
        """Call an endpoint under the key's project. Returns decoded JSON, raises RequestFailed on non-2xx."""
        path = self.config.path(endpoint)
        logger.debug(f"{method} {path}")
        try:
            response = await self._client.request(method, path, json=body)
        except httpx.RequestError as e:
            raise CliError(f"Network error: {e}") from e

        if not response.is_success:
            raise RequestFailed(response.status_code, response.text)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def check(self) -> Any:
        return await self.request("GET", "check")


async def run_command(
    config: KeyConfig,
    command: str,
    endpoint: str = "",
    body: Optional[dict] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Any:
    async with SmrtClient(config, transport=transport) as client:
        if command == "check":
            return await client.check()
        method = {"get": "GET", "post": "POST", "patch": "PATCH", "delete": "DELETE"}[command]
        return await client.request(method, endpoint, body)


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(prog="smrt-cli", description="SMRT project client driven by a key file")
    parser.add_argument("--key", default=os.getenv("SMRT_CLI_KEY", DEFAULT_KEY_PATH), help="Path to the key file")
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("check", help="Validate the key against the API")
    for name in ("get", "post", "patch", "delete"):
        sub = commands.add_parser(name, help=f"{name.upper()} an endpoint under the project, e.g. features")
        sub.add_argument("endpoint", nargs="?", default="")
        if name in ("post", "patch"):
            sub.add_argument("--data", default="{}", help="JSON request body")
    args = parser.parse_args(argv)

    try:
        body = json.loads(args.data) if getattr(args, "data", None) else None
    except ValueError as e:
        print(f"Error: --data is not valid JSON: {e}", file=sys.stderr)
        return 2

    try:
        config = load_key(args.key)
        result = asyncio.run(run_command(config, args.command, getattr(args, "endpoint", ""), body))
    except CliError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if result is not None:
        print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
