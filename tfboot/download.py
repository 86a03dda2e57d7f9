"""Bootloader download."""

from __future__ import annotations

import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import httpx

from tfboot.console import Console, console as default_console
from tfboot.errors import DownloadError


class DownloadManager:
    """Manage file downloads with progress."""

    def __init__(
        self,
        cache_dir: Path,
        client: httpx.Client | None = None,
        console: Console | None = None,
    ) -> None:
        self.cache_dir = cache_dir
        self.client = client or httpx.Client(follow_redirects=True, timeout=None)
        self.console = console or default_console

    @contextmanager
    def staged(self, url: str, description: str) -> Iterator[Path]:
        """Download into a scratch directory under the cache, removed on exit."""
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            staging = tempfile.TemporaryDirectory(prefix="ipxe-", dir=self.cache_dir)
        except OSError as e:
            raise DownloadError(f"Cannot create staging directory in {self.cache_dir}: {e}") from e

        with staging as scratch:
            yield self.download(url, Path(scratch) / "BOOTX64.EFI", description)

    def download(self, url: str, dest: Path, description: str) -> Path:
        """Stream a URL to a local file, replacing any previous copy."""
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            with self.client.stream("GET", url) as response:
                response.raise_for_status()
                length = response.headers.get("content-length", "")
                total = int(length) if length.isdigit() else None

                with (
                    self.console.progress() as progress,
                    dest.open("wb") as f,
                ):
                    task = progress.add_task(description, total=total or None)
                    for chunk in response.iter_bytes(chunk_size=8192):
                        f.write(chunk)
                        progress.update(task, advance=len(chunk))
        except (httpx.HTTPError, OSError) as e:
            dest.unlink(missing_ok=True)
            raise DownloadError(f"Download of {url} failed: {e}") from e

        return dest

    def close(self) -> None:
        self.client.close()
