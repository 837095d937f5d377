"""
FileBox: a portable file value for the pywechaty library.

A FileBox wraps a file that is sent to or received from a puppet. The file
may live on disk, in memory, behind a URL, or be a QR code text, and can be
serialized to JSON for transfer to a puppet service.
"""

import base64
import binascii
import json
import mimetypes
import os
from typing import Any, Dict, Optional, Union
from urllib.parse import unquote, urlparse

import aiohttp

from .constants import FileBoxType
from .exceptions import FileBoxError
from .utils import get_logger

logger = get_logger("FileBox")

# Magic bytes of common file formats
_SIGNATURES = [
    (b'\xFF\xD8\xFF', "image/jpeg"),
    (b'\x89PNG\r\n\x1A\n', "image/png"),
    (b'GIF87a', "image/gif"),
    (b'GIF89a', "image/gif"),
    (b'%PDF', "application/pdf"),
    (b'PK\x03\x04', "application/zip"),
    (b'ID3', "audio/mpeg"),
    (b'#!AMR', "audio/amr"),
    (b'OggS', "audio/ogg"),
]


def detect_mimetype(name: str, header: bytes = b"") -> str:
    """
    Determine the MIME type from the file name, then from its first bytes.

    Args:
        name: File name
        header: First bytes of the content, if known

    Returns:
        str: MIME type, ``application/octet-stream`` when it cannot be determined
    """
    mime_type, _ = mimetypes.guess_type(name)
    if mime_type:
        return mime_type

    for signature, candidate in _SIGNATURES:
        if header.startswith(signature):
            return candidate
    if header.startswith(b'RIFF') and header[8:12] == b'WEBP':
        return "image/webp"
    if header[4:8] == b'ftyp':
        return "video/mp4"
    return "application/octet-stream"


class FileBox:
    """
    A file value that can be sent through a puppet.

    Use the ``from_*`` constructors rather than instantiating directly.
    """

    def __init__(
        self,
        box_type: int,
        name: str,
        data: Optional[bytes] = None,
        url: Optional[str] = None,
        path: Optional[str] = None,
        qr_code: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        mimetype: Optional[str] = None,
    ):
        self.box_type = box_type
        self.name = name
        self._data = data
        self.url = url
        self.path = path
        self.qr_code = qr_code
        self.headers = headers or {}
        self._mimetype = mimetype

    # Constructors

    @classmethod
    def from_file(cls, path: str, name: Optional[str] = None) -> 'FileBox':
        """
        Create a FileBox from a local file.

        Raises:
            FileBoxError: If the file does not exist
        """
        if not os.path.isfile(path):
            raise FileBoxError(f"File not found: {path}")
        return cls(FileBoxType.FILE, name or os.path.basename(path), path=path)

    @classmethod
    def from_buffer(cls, data: bytes, name: str) -> 'FileBox':
        return cls(FileBoxType.BUFFER, name, data=bytes(data))

    @classmethod
    def from_base64(cls, data: str, name: str) -> 'FileBox':
        """
        Create a FileBox from base64 encoded content.

        Raises:
            FileBoxError: If the content is not valid base64
        """
        try:
            decoded = base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise FileBoxError(f"Invalid base64 content for {name}: {e}")
        return cls(FileBoxType.BASE64, name, data=decoded)

    @classmethod
    def from_url(cls, url: str, name: Optional[str] = None,
                 headers: Optional[Dict[str, str]] = None) -> 'FileBox':
        if not name:
            name = os.path.basename(unquote(urlparse(url).path)) or "file"
        return cls(FileBoxType.URL, name, url=url, headers=headers)

    @classmethod
    def from_qr_code(cls, text: str) -> 'FileBox':
        return cls(FileBoxType.QRCODE, "qrcode.png", qr_code=text, mimetype="image/png")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FileBox':
        """
        Create a FileBox from its JSON object form.

        Raises:
            FileBoxError: If the box type is unknown or its content is missing
        """
        box_type = data.get("boxType")
        name = data.get("name") or "file"
        if box_type == FileBoxType.BASE64 and data.get("base64") is not None:
            return cls.from_base64(data["base64"], name)
        if box_type == FileBoxType.URL and data.get("url"):
            return cls.from_url(data["url"], name, data.get("headers"))
        if box_type == FileBoxType.QRCODE and data.get("qrCode") is not None:
            return cls.from_qr_code(data["qrCode"])
        raise FileBoxError(f"Cannot restore FileBox of type {box_type}")

    @classmethod
    def from_json(cls, data: Union[str, Dict[str, Any]]) -> 'FileBox':
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except json.JSONDecodeError as e:
                raise FileBoxError(f"Invalid FileBox JSON: {e}")
        if not isinstance(data, dict):
            raise FileBoxError("FileBox JSON must be an object")
        return cls.from_dict(data)

    # Properties

    @property
    def mimetype(self) -> str:
        if self._mimetype:
            return self._mimetype
        header = b""
        if self._data is not None:
            header = self._data[:12]
        elif self.path and os.path.isfile(self.path):
            with open(self.path, 'rb') as f:
                header = f.read(12)
        self._mimetype = detect_mimetype(self.name, header)
        return self._mimetype

    # Content

    def _read_local(self) -> bytes:
        if self._data is not None:
            return self._data
        if self.path:
            try:
                with open(self.path, 'rb') as f:
                    return f.read()
            except OSError as e:
                raise FileBoxError(f"Failed to read {self.path}: {e}")
        raise FileBoxError(f"FileBox {self.name} has no local content")

    async def to_bytes(self) -> bytes:
        """
        Get the file content, downloading it for URL boxes.

        Raises:
            FileBoxError: If the content cannot be read or downloaded
        """
        if self.box_type == FileBoxType.URL:
            return await self._download()
        if self.box_type == FileBoxType.QRCODE:
            return self.qr_code.encode("utf-8")
        return self._read_local()

    async def _download(self) -> bytes:
        logger.debug(f"Downloading {self.url}")
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(self.url, headers=self.headers) as response:
                    if response.status != 200:
                        raise FileBoxError(f"Failed to download {self.url}: HTTP {response.status}")
                    return await response.read()
        except aiohttp.ClientError as e:
            raise FileBoxError(f"Failed to download {self.url}: {e}")

    async def to_base64(self) -> str:
        return base64.b64encode(await self.to_bytes()).decode('utf-8')

    async def to_file(self, path: Optional[str] = None, overwrite: bool = False) -> str:
        """
        Save the content to disk.

        Args:
            path: Destination path, the box name in the working directory by default
            overwrite: Replace an existing file

        Returns:
            str: The path written

        Raises:
            FileBoxError: If the destination exists and overwrite is False
        """
        path = path or self.name
        if os.path.exists(path) and not overwrite:
            raise FileBoxError(f"File already exists: {path}")
        content = await self.to_bytes()
        with open(path, 'wb') as f:
            f.write(content)
        logger.info(f"Saved {self.name} to {path}")
        return path

    # Serialization

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the JSON object sent to a puppet service.

        Local files and buffers are embedded as base64.
        """
        if self.box_type == FileBoxType.URL:
            data = {"boxType": FileBoxType.URL, "name": self.name, "url": self.url}
            if self.headers:
                data["headers"] = self.headers
            return data
        if self.box_type == FileBoxType.QRCODE:
            return {"boxType": FileBoxType.QRCODE, "name": self.name, "qrCode": self.qr_code}
        return {
            "boxType": FileBoxType.BASE64,
            "name": self.name,
            "base64": base64.b64encode(self._read_local()).decode('utf-8'),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(',', ':'))

    def __str__(self) -> str:
        return self.to_json()

    def __repr__(self) -> str:
        return f"FileBox({self.name})"
