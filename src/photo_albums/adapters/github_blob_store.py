"""GitHub repository contents API used as a blob store."""

import asyncio
import base64
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote

import httpx

from photo_albums.services.blobs import BlobStore

_API_URL = "https://api.github.com"


@dataclass
class GithubBlobStore(BlobStore):
    """Commits each blob as a file in a GitHub repository."""

    owner: str
    repo: str
    branch: str
    http_client: httpx.AsyncClient
    public_base_url: str | None = None

    @classmethod
    def create(
        cls,
        token: str,
        owner: str,
        repo: str,
        branch: str = "main",
        public_base_url: str | None = None,
    ) -> "GithubBlobStore":
        """Create a store with a managed, authenticated httpx session."""
        http_client = httpx.AsyncClient(
            base_url=_API_URL,
            headers={
                "Authorization": f"token {token}",
                "Accept": "application/vnd.github+json",
            },
            timeout=60,
        )
        return cls(
            owner=owner,
            repo=repo,
            branch=branch,
            http_client=http_client,
            public_base_url=public_base_url,
        )

    async def put(self, key: str, file_path: str, content_type: str) -> str:
        """Commit the file under ``key``, replacing an existing file."""
        content = await asyncio.to_thread(Path(file_path).read_bytes)
        payload: dict[str, object] = {
            "message": f"feat: upload {Path(key).name}",
            "content": base64.b64encode(content).decode("ascii"),
            "branch": self.branch,
        }
        response = await self.http_client.put(self._contents_path(key), json=payload)
        if response.status_code == httpx.codes.UNPROCESSABLE_ENTITY:
            sha = await self._lookup_sha(key)
            if sha is not None:
                payload["sha"] = sha
                response = await self.http_client.put(
                    self._contents_path(key), json=payload
                )
        response.raise_for_status()
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{key}"
        return str(response.json()["content"]["download_url"])

    async def delete(self, key: str) -> None:
        """Delete the file under ``key``; a missing file counts as deleted."""
        sha = await self._lookup_sha(key)
        if sha is None:
            return
        response = await self.http_client.request(
            "DELETE",
            self._contents_path(key),
            json={
                "message": f"chore: delete {Path(key).name}",
                "sha": sha,
                "branch": self.branch,
            },
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            return
        response.raise_for_status()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _lookup_sha(self, key: str) -> str | None:
        response = await self.http_client.get(
            self._contents_path(key), params={"ref": self.branch}
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        response.raise_for_status()
        return str(response.json()["sha"])

    def _contents_path(self, key: str) -> str:
        return f"/repos/{self.owner}/{self.repo}/contents/{quote(key)}"
