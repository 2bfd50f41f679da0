"""
归档原语与校验和单元测试
"""

import gzip
import io
import struct
import tarfile
import time
import zipfile

import pytest

from sqlite_dist.build.archive import (
    DEFAULT_MODE,
    TarEntry,
    create_tar,
    create_targz,
    create_zip,
    gzip_bytes,
    zip_info,
)
from sqlite_dist.build.checksum import HashCalculator, sha256_hex, sha256_urlsafe_b64, sha512_hex
from sqlite_dist.build.platform import PlatformFile

from conftest import BUILD_TIME


EMPTY_SHA256 = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


def _open_targz(data: bytes) -> tarfile.TarFile:
    return tarfile.open(fileobj=io.BytesIO(data), mode='r:gz')


class TestCreateTargz:
    """create_targz 测试"""

    def test_entry_order_preserved(self):
        """测试条目顺序与输入一致"""
        files = [PlatformFile("b.txt", b"bbb"), PlatformFile("a.txt", b"a")]
        with _open_targz(create_targz(files, BUILD_TIME)) as archive:
            assert archive.getnames() == ["b.txt", "a.txt"]
            assert archive.extractfile("b.txt").read() == b"bbb"

    def test_default_metadata(self):
        """测试未捕获元数据时使用默认权限和构建时间"""
        data = create_targz([PlatformFile("x.so", b"x")], BUILD_TIME)
        with _open_targz(data) as archive:
            member = archive.getmember("x.so")
            assert member.mode == DEFAULT_MODE
            assert member.mtime == BUILD_TIME

    def test_captured_metadata(self):
        """测试保留捕获的权限和修改时间"""
        data = create_targz([PlatformFile("x.so", b"x", mode=0o755, mtime=1000)], BUILD_TIME)
        with _open_targz(data) as archive:
            member = archive.getmember("x.so")
            assert member.mode == 0o755
            assert member.mtime == 1000

    def test_gzip_magic(self):
        """测试输出是 gzip 数据"""
        assert create_targz([], BUILD_TIME)[:2] == b"\x1f\x8b"

    def test_gzip_header_mtime(self):
        """测试 gzip 头中的时间戳等于构建时间"""
        data = create_targz([PlatformFile("x.so", b"x")], BUILD_TIME)
        assert struct.unpack("<I", data[4:8])[0] == BUILD_TIME

    def test_reproducible(self):
        """测试相同输入和构建时间在不同时刻得到相同字节"""
        files = [PlatformFile("a.so", b"x")]
        first = create_targz(files, BUILD_TIME)
        time.sleep(1.1)
        assert create_targz(files, BUILD_TIME) == first


class TestCreateTar:
    """create_tar 测试"""

    def test_plain_tar(self):
        """测试未压缩 tar"""
        data = create_tar([TarEntry("one", b"1"), TarEntry("two", b"22", mode=0o600)])
        with tarfile.open(fileobj=io.BytesIO(data), mode='r:') as archive:
            assert archive.getnames() == ["one", "two"]
            assert archive.getmember("two").mode == 0o600
            assert archive.getmember("two").size == 2


class TestCreateZip:
    """create_zip 测试"""

    def test_entries(self):
        """测试 zip 条目顺序和压缩方式"""
        files = [PlatformFile("src/b.c", b"int b;"), PlatformFile("a.h", b"#pragma once")]
        with zipfile.ZipFile(io.BytesIO(create_zip(files, BUILD_TIME))) as zf:
            assert zf.namelist() == ["src/b.c", "a.h"]
            assert zf.read("a.h") == b"#pragma once"
            assert all(info.compress_type == zipfile.ZIP_DEFLATED for info in zf.infolist())

    def test_timestamp_clamped(self):
        """测试 1980 年之前的时间被截断"""
        info = zip_info("x", 0)
        assert info.date_time[0] >= 1980


class TestGzipBytes:
    """gzip_bytes 测试"""

    def test_round_trip(self):
        data = b"hello" * 100
        assert gzip.decompress(gzip_bytes(data, mtime=0)) == data

    def test_deterministic_with_mtime(self):
        assert gzip_bytes(b"abc", mtime=0) == gzip_bytes(b"abc", mtime=0)


class TestChecksum:
    """校验和测试"""

    def test_sha256_hex(self):
        assert sha256_hex(b"") == EMPTY_SHA256

    def test_sha512_hex(self):
        digest = sha512_hex(b"abc")
        assert len(digest) == 128
        assert digest == digest.lower()

    def test_sha256_urlsafe_b64(self):
        """测试 base64url 编码无填充"""
        assert sha256_urlsafe_b64(b"") == "47DEQpj8HBSa-_TImW-5JCeuQeRkm5NMpJWZG3hSuFU"

    def test_hash_calculator_incremental(self):
        """测试增量计算与一次性计算一致"""
        calculator = HashCalculator("sha256")
        calculator.update(b"ab")
        calculator.update("c")
        assert calculator.hexdigest() == sha256_hex(b"abc")

    def test_unknown_algorithm(self):
        with pytest.raises(ValueError):
            HashCalculator("not-a-hash")
