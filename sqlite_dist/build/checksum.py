"""
校验和服务

在完整的内存字节块上计算摘要。下游描述文件需要引用上游产物的最终摘要，
因此这里不提供流式接口。
"""

import base64
import hashlib
from typing import Union


class HashCalculator:
    """哈希计算器"""

    def __init__(self, algorithm: str = "sha256"):
        """初始化哈希计算器

        Args:
            algorithm: 哈希算法名称
        """
        self.algorithm = algorithm.lower()
        if self.algorithm not in hashlib.algorithms_available:
            raise ValueError(f"不支持的哈希算法: {algorithm}")

        self._hasher = hashlib.new(self.algorithm)

    def update(self, data: Union[bytes, str]) -> None:
        """更新哈希数据"""
        if isinstance(data, str):
            data = data.encode('utf-8')
        self._hasher.update(data)

    def hexdigest(self) -> str:
        """获取十六进制哈希值（小写）"""
        return self._hasher.hexdigest()

    def digest(self) -> bytes:
        """获取二进制哈希值"""
        return self._hasher.digest()

    @classmethod
    def hash_data(cls, data: Union[bytes, str], algorithm: str = "sha256") -> str:
        """便捷方法：计算数据哈希"""
        calculator = cls(algorithm)
        calculator.update(data)
        return calculator.hexdigest()


def sha256_hex(data: bytes) -> str:
    """SHA-256，64 位小写十六进制"""
    return HashCalculator.hash_data(data, "sha256")


def sha512_hex(data: bytes) -> str:
    """SHA-512，128 位小写十六进制"""
    return HashCalculator.hash_data(data, "sha512")


def sha256_urlsafe_b64(data: bytes) -> str:
    """SHA-256 的 base64url 编码（无填充），wheel RECORD 使用该格式"""
    calculator = HashCalculator("sha256")
    calculator.update(data)
    return base64.urlsafe_b64encode(calculator.digest()).rstrip(b'=').decode('ascii')
