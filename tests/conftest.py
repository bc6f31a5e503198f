import io
import shutil
import sys
import urllib.error
from pathlib import Path

import pytest

# permite rodar os testes sem instalar o pacote
repo_root = Path(__file__).resolve().parents[1]
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from pkgbump.modules.config import config
from pkgbump.modules.extract import Metadata, Source


@pytest.fixture(autouse=True)
def default_config():
    # ignora qualquer pkgbump.conf do usuário/sistema
    config.reload([])
    yield config
    config.reload([])


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


class FakeResponse(io.BytesIO):
    """Resposta HTTP mínima: status, headers e readinto com interrupções simuladas."""

    def __init__(self, body=b"", status=200, interrupts=0, headers=None):
        super().__init__(body)
        self.status = status
        self.headers = headers if headers is not None else {"Content-Length": str(len(body))}
        self.interrupts = interrupts
        self.reads = 0

    def readinto(self, b):
        self.reads += 1
        if self.interrupts:
            self.interrupts -= 1
            raise InterruptedError("simulated EINTR")
        return super().readinto(b)


class FakeOpener:
    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.requests = []

    def __call__(self, req, timeout=None):
        url = req.full_url
        self.requests.append(url)
        route = self.routes.get(url)
        if route is None:
            raise urllib.error.URLError("no route to host")
        if isinstance(route, int):
            raise urllib.error.HTTPError(url, route, "error", {}, None)
        if isinstance(route, (bytes, bytearray)):
            return FakeResponse(bytes(route))
        return route


@pytest.fixture
def opener():
    return FakeOpener()


class FakeExtractor:
    instances = []

    def __init__(self, metadata):
        self.metadata = metadata
        self.inputs = []
        self.closed = False
        FakeExtractor.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True

    def run(self, recipe):
        self.inputs.append(bytes(recipe))
        return self.metadata


def make_metadata(sources=(), hashes=()):
    return Metadata([Source(f, u) for f, u in sources], list(hashes))


@pytest.fixture
def extractor_factory():
    FakeExtractor.instances = []

    def factory(metadata):
        return lambda: FakeExtractor(metadata)
    return factory


@pytest.fixture
def makepkg_library(tmp_path):
    """Bibliotecas mínimas de makepkg (util.sh/integrity.sh) para o script auxiliar."""
    if shutil.which("bash") is None:
        pytest.skip("bash not available")
    lib = tmp_path / "makepkg-lib"
    lib.mkdir()
    (lib / "util.sh").write_text(
        "get_filename() {\n"
        "    if [[ $1 = *::* ]]; then printf '%s\\n' \"${1%%::*}\"; "
        "else printf '%s\\n' \"${1##*/}\"; fi\n"
        "}\n"
        "get_url() {\n"
        "    printf '%s\\n' \"${1#*::}\"\n"
        "}\n"
    )
    (lib / "integrity.sh").write_text(
        "get_integlist() {\n"
        "    local integ sumname\n"
        "    for integ in \"${known_hash_algos[@]}\"; do\n"
        "        sumname=\"${integ}sums[@]\"\n"
        "        if [[ -n ${!sumname} ]]; then printf '%s\\n' \"$integ\"; fi\n"
        "    done\n"
        "}\n"
    )
    return str(lib)

