"""
Fetcher implementation.

Retrieves a single candidate location into a local directory. Expected
failures are returned as failed FetchResults so the caller can move on to
the next candidate.
"""

import logging
import os
import posixpath
import shutil
from typing import Optional
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

import requests

from sdkprov.dependency_models import FetchResult
from sdkprov.sdkprov_logger import ProvisionLogger

DEFAULT_FILE_NAME = "download"


class Fetcher:
    """
    Downloads one url to local storage.

    http(s) urls are streamed with requests; file:// urls and plain local
    paths copy an archive the operator downloaded by hand.
    """

    def __init__(
        self,
        logger: ProvisionLogger,
        session: Optional[requests.Session] = None,
        chunk_size: int = 1 << 20,
        timeout: Optional[float] = None,
    ):
        """
        Args:
            logger: Logger for progress and error messages
            session: requests session, a new one when omitted
            chunk_size: Bytes per streamed chunk
            timeout: Passed to requests; None keeps the transport default
        """
        self.logger = logger
        self.session = session or requests.Session()
        self.chunk_size = chunk_size
        self.timeout = timeout

    def fetch(self, url: str, destination_dir: str) -> FetchResult:
        """
        Retrieve url into destination_dir.

        Returns:
            FetchResult with archive_path set on success, or a failure
            result carrying the underlying error message
        """
        target_path = os.path.join(destination_dir, self.file_name_for(url))
        scheme = urlparse(url).scheme.lower()

        self.logger.log(f"Fetching {url}", logging.INFO)
        try:
            os.makedirs(destination_dir, exist_ok=True)
            if scheme in ("http", "https"):
                error = self._download(url, target_path)
            elif scheme == "file" or not scheme or (len(scheme) == 1 and os.name == "nt"):
                error = self._copy_local(url, target_path)
            else:
                error = f"Unsupported url scheme: {scheme}"
        except (requests.RequestException, OSError) as e:
            error = str(e) or e.__class__.__name__

        if error is not None:
            self.logger.log(f"Fetching {url} failed: {error}", logging.WARNING)
            if os.path.exists(target_path):
                os.remove(target_path)
            return FetchResult.failure(url, error)

        byte_size = os.path.getsize(target_path)
        self.logger.log(f"Fetched {byte_size} bytes from {url}", logging.INFO)
        return FetchResult(source_url=url, archive_path=target_path, byte_size=byte_size)

    def _download(self, url: str, target_path: str) -> Optional[str]:
        response = self.session.get(url, stream=True, timeout=self.timeout, allow_redirects=True)
        try:
            if not response.ok:
                return f"HTTP {response.status_code} {response.reason}"

            # Vendor download pages answer unauthenticated requests with a
            # login page rather than an error status.
            content_type = response.headers.get("Content-Type", "")
            if content_type.startswith("text/html"):
                return "Received an HTML page instead of an archive (authentication required?)"

            with open(target_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=self.chunk_size):
                    if chunk:
                        f.write(chunk)
        finally:
            response.close()
        return None

    @staticmethod
    def _copy_local(url: str, target_path: str) -> Optional[str]:
        parsed = urlparse(url)
        if parsed.scheme.lower() == "file":
            source_path = url2pathname(unquote(parsed.path))
        else:
            source_path = url
        if not os.path.isfile(source_path):
            return f"No such file: {source_path}"
        shutil.copyfile(source_path, target_path)
        return None

    @staticmethod
    def file_name_for(url: str) -> str:
        """
        Local file name for a url, keeping the archive suffix intact.
        """
        path = unquote(urlparse(url).path) or url
        name = posixpath.basename(path.replace("\\", "/"))
        return name or DEFAULT_FILE_NAME
