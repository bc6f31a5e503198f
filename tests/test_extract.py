import os

import pytest

from pkgbump.modules.errors import (
    ChildFailedError,
    IoError,
    MetadataDecodeError,
    SpawnError,
    UnknownAlgorithmError,
)
from pkgbump.modules.extract import Metadata, MetadataExtractor, Source, extract, load_script


def test_metadata_from_json():
    md = Metadata.from_json(
        b'{"sources":[{"filename":"a.tar.gz","url":"http://x/a.tar.gz"},'
        b'{"filename":"b","url":"http://x/b"}],"hashes":["sha256","md5"]}')
    assert md.sources == [Source("a.tar.gz", "http://x/a.tar.gz"), Source("b", "http://x/b")]
    assert md.hashes == ["sha256", "md5"]
    assert md.to_dict()["sources"][1] == {"filename": "b", "url": "http://x/b"}


@pytest.mark.parametrize("payload", [
    b"",
    b"not json",
    b"[]",
    b'{"sources": []}',
    b'{"sources": [], "hashes": [], "extra": 1}',
    b'{"sources": {}, "hashes": []}',
    b'{"sources": [], "hashes": "sha256"}',
    b'{"sources": [], "hashes": [1]}',
    b'{"sources": ["a"], "hashes": []}',
    b'{"sources": [{"filename": "a"}], "hashes": []}',
    b'{"sources": [{"filename": 1, "url": "u"}], "hashes": []}',
    b'\xff\xfe',
])
def test_metadata_rejects_bad_documents(payload):
    with pytest.raises(MetadataDecodeError):
        Metadata.from_json(payload)


def test_script_is_packaged():
    script = load_script()
    assert b"get_integlist" in script
    assert b"/dev/stdin" in script


def test_script_file_lifecycle():
    with MetadataExtractor() as ex:
        path = ex.script_path
        assert os.path.isfile(path)
        with open(path, "rb") as f:
            assert f.read() == load_script()
    assert ex.closed
    assert not os.path.exists(path)
    # close() repetido é inofensivo
    ex.close()


def test_extractors_use_distinct_files():
    a, b = MetadataExtractor(), MetadataExtractor()
    try:
        assert a.script_path != b.script_path
        assert os.path.exists(a.script_path) and os.path.exists(b.script_path)
    finally:
        a.close()
        b.close()


def test_run_after_close():
    ex = MetadataExtractor()
    ex.close()
    with pytest.raises(IoError):
        ex.run(b"")


def test_spawn_error(tmp_path):
    with MetadataExtractor(shell=str(tmp_path / "no-such-shell")) as ex:
        with pytest.raises(SpawnError):
            ex.run(b"pkgver=1\n")


def _run(lib, text, **kw):
    return extract(text.encode(), makepkg_library=lib, **kw)


def test_bash_extracts_sources_and_hashes(makepkg_library):
    md = _run(makepkg_library, (
        "pkgname=foo\n"
        "pkgver=2.0\n"
        "source=(\"https://example.org/foo-$pkgver.tar.gz\"\n"
        "        \"bar-$pkgver.patch::https://example.org/patches/p1\")\n"
        "sha512sums=('SKIP' 'SKIP')\n"
        "md5sums=('SKIP' 'SKIP')\n"
    ))
    assert md.sources == [
        Source("foo-2.0.tar.gz", "https://example.org/foo-2.0.tar.gz"),
        Source("bar-2.0.patch", "https://example.org/patches/p1"),
    ]
    # ordem de known_hash_algos, não a do PKGBUILD
    assert md.hashes == ["md5", "sha512"]


def test_bash_no_sources(makepkg_library):
    md = _run(makepkg_library, "pkgname=foo\npkgver=1.0\npkgrel=1\n")
    assert md.sources == []
    assert md.hashes == []


def test_bash_escapes_json(makepkg_library):
    md = _run(makepkg_library, "source=('we\"ird::http://x/a\\b')\nsha256sums=('SKIP')\n")
    assert md.sources == [Source('we"ird', "http://x/a\\b")]


def test_bash_escapes_control_characters(makepkg_library):
    md = _run(makepkg_library, "source=($'a\x01b\x1fc::http://x/a')\nsha256sums=('SKIP')\n")
    assert md.sources == [Source("a\x01b\x1fc", "http://x/a")]


def test_bash_child_failure(makepkg_library):
    with pytest.raises(ChildFailedError) as exc:
        _run(makepkg_library, "echo 'boom happened' >&2\nexit 3\n")
    assert exc.value.returncode == 3
    assert "boom happened" in exc.value.stderr
    assert "boom happened" in str(exc.value)


def test_bash_garbage_output(makepkg_library):
    with pytest.raises(MetadataDecodeError):
        _run(makepkg_library, "echo garbage\n")


def test_bash_unknown_algorithm(makepkg_library):
    with pytest.raises(UnknownAlgorithmError) as exc:
        _run(makepkg_library, "known_hash_algos=(crc32)\ncrc32sums=('x')\nsource=(http://x/a)\n")
    assert exc.value.name == "crc32"


def test_bash_timeout(makepkg_library):
    with pytest.raises(ChildFailedError) as exc:
        _run(makepkg_library, "sleep 2\n", timeout=0.2)
    assert "timed out" in str(exc.value)
