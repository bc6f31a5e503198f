# pkgbump/modules/fetch.py
"""
Download de fontes com cálculo de digests em passagem única.

Cada bloco lido da resposta HTTP é gravado no arquivo de destino e em
seguida entregue a todas as engines do DigestSet, na ordem. O buffer é
único e reaproveitado, então a memória usada não depende do tamanho do
download. Em caso de erro o arquivo parcial fica no disco.
"""

from __future__ import annotations
import http.client
import os
import urllib.error
import urllib.request
from typing import Callable, List, Optional

from pkgbump import __version__
from pkgbump.modules import logger as _logger
from pkgbump.modules.config import config
from pkgbump.modules.digest import DigestSet
from pkgbump.modules.errors import HttpError, HttpStatusError, IoError

DEFAULT_BUFFER_SIZE = 8 * 1024

ProgressCallback = Callable[[int, Optional[int]], None]


def _content_length(resp) -> Optional[int]:
    headers = getattr(resp, "headers", None)
    if headers is None:
        return None
    raw = headers.get("Content-Length")
    try:
        return int(raw) if raw is not None else None
    except ValueError:
        return None


def _read_chunk(resp, view: memoryview) -> int:
    readinto = getattr(resp, "readinto", None)
    if readinto is not None:
        return readinto(view) or 0
    data = resp.read(len(view))
    n = len(data)
    view[:n] = data
    return n


class Fetcher:
    def __init__(self,
                 buffer_size: Optional[int] = None,
                 timeout: Optional[float] = None,
                 user_agent: Optional[str] = None,
                 opener: Optional[Callable] = None,
                 logger: Optional[_logger.Logger] = None):
        self.buffer_size = buffer_size or config.getint("fetch", "buffer_size",
                                                        fallback=DEFAULT_BUFFER_SIZE) or DEFAULT_BUFFER_SIZE
        if timeout is None:
            timeout = config.getfloat("fetch", "timeout") or None
        self.timeout = timeout
        self.user_agent = user_agent or config.get("fetch", "user_agent",
                                                   fallback=f"pkgbump/{__version__}")
        self.opener = opener or urllib.request.urlopen
        self.log = logger or _logger.Logger("fetch")

    def _open(self, url: str):
        try:
            # URL sem esquema (ex.: "foo.patch") falha já no Request
            req = urllib.request.Request(url, headers={"User-Agent": self.user_agent})
            resp = self.opener(req, timeout=self.timeout)
        except urllib.error.HTTPError as e:
            e.close()
            raise HttpStatusError(e.code, url) from None
        except (urllib.error.URLError, http.client.HTTPException, OSError, ValueError) as e:
            reason = getattr(e, "reason", e)
            raise HttpError(f"cannot fetch {url}: {reason}") from e

        status = getattr(resp, "status", None)
        if status is not None and not 200 <= status < 300:
            resp.close()
            raise HttpStatusError(status, url)
        return resp

    def fetch(self, source, digests: DigestSet, dest_dir: str = ".",
              on_progress: Optional[ProgressCallback] = None) -> List[str]:
        """
        Baixa ``source.url`` para ``dest_dir/source.filename``.

        Retorna os digests hexadecimais na ordem de ``digests``; as engines
        ficam reiniciadas para a próxima fonte.
        """
        dest = os.path.join(dest_dir, source.filename)
        self.log.info(f"{source.url} -> {source.filename}")

        resp = self._open(source.url)
        try:
            total = _content_length(resp)
            try:
                out = open(dest, "wb")
            except OSError as e:
                raise IoError(f"cannot create {dest}: {e}") from e

            with out:
                received = self._stream(resp, out, digests, source.url, total, on_progress)
        finally:
            resp.close()

        self.log.debug(f"{source.filename}: {received} bytes")
        return digests.hexdigests_and_reset()

    def _stream(self, resp, out, digests, url, total, on_progress) -> int:
        buf = bytearray(self.buffer_size)
        view = memoryview(buf)
        received = 0
        while True:
            try:
                n = _read_chunk(resp, view)
            except InterruptedError:
                continue
            except (OSError, http.client.HTTPException) as e:
                raise HttpError(f"error reading {url}: {e}") from e
            if not n:
                break

            chunk = view[:n]
            try:
                out.write(chunk)
            except OSError as e:
                raise IoError(f"cannot write {out.name}: {e}") from e
            digests.update(chunk)

            received += n
            if on_progress is not None:
                on_progress(received, total)
        return received
