"""
VoteClient SDK: sync client for the SecureVote API.

Authentication state lives in a ``ClientSession`` owned by the caller;
nothing is kept in module globals, so several voters can be driven from one
process.
"""

import json
import time
from dataclasses import dataclass
from typing import Any, Optional

import httpx


@dataclass
class ClientSession:
    """Authenticated identity for one API user."""

    token: Optional[str] = None
    user_id: Optional[str] = None
    role: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def clear(self) -> None:
        self.token = None
        self.user_id = None
        self.role = None


@dataclass
class ClientAuthResult:
    """Result of register() or login()."""

    success: bool
    user_id: Optional[str] = None
    role: Optional[str] = None
    error: str = ""
    code: str = ""
    status: int = 0


@dataclass
class ClientVoteReceipt:
    """Result of cast_vote()."""

    success: bool
    vote_id: Optional[str] = None
    timestamp: Optional[str] = None
    verification_code: Optional[str] = None
    error: str = ""
    code: str = ""
    status: int = 0


class VoteClient:
    """
    Synchronous HTTP client for SecureVote.

    Retries connection failures and 429 with exponential backoff, plus
    timeouts, transport errors and 5xx for requests that are safe to repeat.
    Other 4xx responses are returned immediately as error dicts.
    """

    def __init__(
        self,
        server_url: str = "http://localhost:8080",
        session: Optional[ClientSession] = None,
        api_prefix: str = "/api",
        timeout: int = 30,
        max_retries: int = 3,
        retry_backoff_base: float = 0.5,
    ):
        self.server_url = server_url.rstrip("/")
        self.session = session or ClientSession()
        self.api_prefix = api_prefix
        self.max_retries = max_retries
        self.retry_backoff_base = retry_backoff_base
        self._http = httpx.Client(
            base_url=self.server_url,
            timeout=timeout,
        )

    def _auth_headers(self) -> dict[str, str]:
        headers = {}
        if self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"
        return headers

    def _backoff(self, attempt: int) -> bool:
        """Sleep before the next attempt; False once attempts are used up."""
        if attempt >= self.max_retries - 1:
            return False
        time.sleep(self.retry_backoff_base * (2 ** attempt))
        return True

    def _request(
        self,
        method: str,
        path: str,
        *,
        idempotent: bool = True,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Central HTTP method with retry and structured error handling.

        Returns parsed JSON on success, or a dict with ``error``, ``code`` and
        ``status`` on failure.

        Connection failures and 429 are always retried since the server never
        acted on the request. Read timeouts, other transport errors and 5xx are
        retried only when ``idempotent`` is set; a replayed vote or
        registration would otherwise come back as a conflict.
        """
        headers = {**self._auth_headers(), **kwargs.pop("headers", {})}
        last_error = None
        for attempt in range(self.max_retries):
            try:
                resp = getattr(self._http, method)(path, headers=headers, **kwargs)
                if resp.status_code == 429 or (resp.status_code >= 500 and idempotent):
                    last_error = f"HTTP {resp.status_code}"
                    if self._backoff(attempt):
                        continue
                if resp.status_code >= 500 or resp.status_code == 429:
                    return {
                        "error": f"Server error: {resp.status_code}",
                        "code": "SERVER_ERROR",
                        "status": resp.status_code,
                    }
                if resp.status_code == 204:
                    return {}
                if resp.status_code >= 400:
                    return self._client_error(resp)
                return resp.json()
            except (httpx.ConnectError, httpx.ConnectTimeout) as e:
                last_error = str(e) or "connection failed"
                if self._backoff(attempt):
                    continue
            except (httpx.TimeoutException, httpx.HTTPError) as e:
                last_error = str(e) or "timeout"
                if not idempotent:
                    return {
                        "error": f"Request may have been processed: {last_error}",
                        "code": "CONNECTION_ERROR",
                        "status": 0,
                    }
                if self._backoff(attempt):
                    continue
            except json.JSONDecodeError:
                return {"error": "Invalid JSON response", "code": "JSON_ERROR", "status": 0}

        return {
            "error": f"All {self.max_retries} retries exhausted: {last_error}",
            "code": "CONNECTION_ERROR",
            "status": 0,
        }

    @staticmethod
    def _client_error(resp: httpx.Response) -> dict[str, Any]:
        try:
            body = resp.json()
        except json.JSONDecodeError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        return {
            **body,
            "error": body.get("error") or body.get("detail") or f"Client error: {resp.status_code}",
            "code": body.get("code", "CLIENT_ERROR"),
            "status": resp.status_code,
        }

    def _api(self, path: str) -> str:
        return f"{self.api_prefix}{path}"

    # ── Auth ──

    def _apply_auth(self, data: dict[str, Any], role: Optional[str]) -> ClientAuthResult:
        if "error" in data:
            return ClientAuthResult(
                success=False, error=data["error"], code=data.get("code", ""),
                status=data.get("status", 0),
            )
        self.session.token = data["token"]
        self.session.user_id = data["userId"]
        self.session.role = data.get("role", role)
        return ClientAuthResult(
            success=True, user_id=self.session.user_id, role=self.session.role,
        )

    def register(
        self,
        email: str,
        password: str,
        full_name: Optional[str] = None,
        organization: Optional[str] = None,
    ) -> ClientAuthResult:
        """Register a voter account and keep its token in the session."""
        data = self._request("post", self._api("/auth/register"), idempotent=False, json={
            "email": email,
            "password": password,
            "fullName": full_name,
            "organization": organization,
        })
        return self._apply_auth(data, role="voter")

    def login(self, email: str, password: str) -> ClientAuthResult:
        data = self._request("post", self._api("/auth/login"), json={
            "email": email, "password": password,
        })
        return self._apply_auth(data, role=None)

    def logout(self) -> None:
        self.session.clear()

    def me(self) -> dict[str, Any]:
        return self._request("get", self._api("/auth/me"))

    # ── Elections ──

    def list_elections(self, active: bool = False, status: Optional[str] = None) -> Any:
        params: dict[str, Any] = {}
        if active:
            params["active"] = "true"
        elif status:
            params["status"] = status
        return self._request("get", self._api("/elections"), params=params)

    def get_election(self, election_id: str) -> dict[str, Any]:
        return self._request("get", self._api(f"/elections/{election_id}"))

    def create_election(self, **fields: Any) -> dict[str, Any]:
        """Admin: create an election (title, start_date, end_date, ...)."""
        return self._request("post", self._api("/elections"), idempotent=False, json=fields)

    def update_election(self, election_id: str, **fields: Any) -> dict[str, Any]:
        return self._request("put", self._api(f"/elections/{election_id}"), json=fields)

    def delete_election(self, election_id: str) -> dict[str, Any]:
        return self._request("delete", self._api(f"/elections/{election_id}"))

    def add_ballot(
        self,
        election_id: str,
        title: str,
        options: list[str],
        instructions: Optional[str] = None,
    ) -> dict[str, Any]:
        return self._request(
            "post", self._api(f"/elections/{election_id}/ballots"), idempotent=False, json={
            "title": title,
            "instructions": instructions,
            "options": [{"text": text} for text in options],
        })

    # ── Votes ──

    def cast_vote(self, election_id: str, encrypted_choice: str) -> ClientVoteReceipt:
        data = self._request("post", self._api("/votes"), idempotent=False, json={
            "electionId": election_id,
            "encryptedChoice": encrypted_choice,
        })
        if "error" in data:
            return ClientVoteReceipt(
                success=False, error=data["error"], code=data.get("code", ""),
                status=data.get("status", 0),
            )
        return ClientVoteReceipt(
            success=True,
            vote_id=data["voteId"],
            timestamp=data["timestamp"],
            verification_code=data["verificationCode"],
        )

    def verify_vote(self, verification_code: str) -> dict[str, Any]:
        return self._request("get", self._api(f"/votes/verify/{verification_code}"))

    # ── Results ──

    def get_results(self, election_id: str) -> dict[str, Any]:
        return self._request("get", self._api(f"/results/{election_id}"))

    def health(self) -> dict[str, Any]:
        return self._request("get", "/health")

    def close(self) -> None:
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
