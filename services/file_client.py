from typing import Any, Dict

from config.settings import settings
from services.upstream import UpstreamClient


class FileClient(UpstreamClient):
    """File storage service used for justification documents"""

    service = "files"

    def upload(self, filename: str, content: bytes, content_type: str, folder: str = "justifications") -> Dict[str, Any]:
        files = {"file": (filename, content, content_type)}
        result = self.post("/upload", files=files, data={"folder": folder})
        return result if isinstance(result, dict) else {"url": result, "originalName": filename}

    def remove(self, url: str) -> None:
        self.delete("/delete", params={"url": url})


file_client = FileClient(settings.FILE_API_BASE_URL, settings.UPSTREAM_TIMEOUT)


def get_file_client() -> FileClient:
    return file_client
