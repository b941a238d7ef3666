# src/infrastructure/content/assets.py
import asyncio
import mimetypes
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import List

from infrastructure.queue.errors import AssetNotFoundError


@dataclass
class Asset:
    name: str
    body: bytes
    media_type: str


class AssetStore:
    """
    Serves site files from a directory.
    - "/" and ".../" map to index.html
    - extensionless paths try "<path>.html", then "<path>/index.html"
    - `prefix` is stripped first, for a site mounted under a sub-path
    """

    def __init__(self, root: str, *, prefix: str = "") -> None:
        self.root = Path(root).resolve()
        self.prefix = prefix.rstrip("/")

    def candidates(self, url_path: str) -> List[str]:
        path = url_path or "/"
        if self.prefix and (path == self.prefix or path.startswith(self.prefix + "/")):
            path = path[len(self.prefix) :] or "/"
        if path.endswith("/"):
            return [path + "index.html"]
        if PurePosixPath(path).suffix:
            return [path]
        return [path + ".html", path + "/index.html"]

    def _resolve(self, rel: str) -> Path:
        target = (self.root / rel.lstrip("/")).resolve()
        # reject anything that escapes the site root
        if target != self.root and self.root not in target.parents:
            raise AssetNotFoundError(rel)
        return target

    async def fetch(self, url_path: str) -> Asset:
        for rel in self.candidates(url_path):
            try:
                target = self._resolve(rel)
                found = target.is_file()
            except (OSError, ValueError) as e:
                # NUL bytes, over-long names: not a file we could ever serve
                raise AssetNotFoundError(url_path) from e
            if found:
                body = await asyncio.to_thread(target.read_bytes)
                media_type, _ = mimetypes.guess_type(target.name)
                return Asset(name=rel, body=body, media_type=media_type or "application/octet-stream")
        raise AssetNotFoundError(url_path)

    async def page(self, name: str) -> Asset:
        """Named page such as 'waitroom.html', looked up at the site root."""
        return await self.fetch("/" + name.lstrip("/"))
