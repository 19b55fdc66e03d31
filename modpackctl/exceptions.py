"""
modpackctl 统一异常体系

提供分层的异常结构，支持错误代码、上下文信息、退出码和 JSON 序列化。
"""

from typing import Any, Dict, Optional
import aiohttp


class ModpackError(Exception):
    """modpackctl 基础异常类"""

    exit_code: int = 1

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self._get_default_code()
        self.context = context or {}

    def _get_default_code(self) -> str:
        """获取默认错误代码"""
        return "E000"

    def to_dict(self) -> Dict[str, Any]:
        """将异常转换为字典格式"""
        return {
            "error": True,
            "code": self.code,
            "message": self.message,
            "context": self.context,
            "type": self.__class__.__name__,
        }

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


class ConfigError(ModpackError):
    """配置相关错误"""

    def _get_default_code(self) -> str:
        return "E100"


class ConfigParseError(ConfigError):
    """配置解析错误"""

    def _get_default_code(self) -> str:
        return "E101"


class ConfigValidationError(ConfigError):
    """配置验证错误"""

    def _get_default_code(self) -> str:
        return "E102"


class ModListError(ModpackError):
    """模组列表文件格式错误"""

    def _get_default_code(self) -> str:
        return "E110"


class PreconditionError(ModpackError):
    """前置条件不满足（缺少输入、列表为空等），退出码为 2"""

    exit_code = 2

    def _get_default_code(self) -> str:
        return "E120"


class APIError(ModpackError):
    """API 相关错误"""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        response: Optional[aiohttp.ClientResponse] = None,
    ):
        super().__init__(message, code, context)
        self.response = response
        if response is not None:
            self.context["status_code"] = response.status
            self.context["url"] = str(response.url)

    def _get_default_code(self) -> str:
        return "E200"


class APINotFoundError(APIError):
    """API 资源不存在"""

    def _get_default_code(self) -> str:
        return "E404"


class APIServerError(APIError):
    """API 服务器错误"""

    def _get_default_code(self) -> str:
        return "E500"


class DownloadError(ModpackError):
    """下载相关错误"""

    def _get_default_code(self) -> str:
        return "E300"


class DownloadNetworkError(DownloadError):
    """下载网络错误"""

    def _get_default_code(self) -> str:
        return "E301"


class DownloadFileError(DownloadError):
    """下载文件操作错误"""

    def _get_default_code(self) -> str:
        return "E303"


class PackagerError(ModpackError):
    """打包相关错误"""

    def _get_default_code(self) -> str:
        return "E400"


class MrpackError(PackagerError):
    """Mrpack 生成错误"""

    def _get_default_code(self) -> str:
        return "E401"


class ArchiveError(PackagerError):
    """压缩工具执行失败"""

    def _get_default_code(self) -> str:
        return "E402"


class DuplicatePathError(PackagerError):
    """整合包内出现重复的文件路径"""

    def _get_default_code(self) -> str:
        return "E403"


class ServerModsError(ModpackError):
    """服务端模组提取错误"""

    def _get_default_code(self) -> str:
        return "E450"


__all__ = [
    # 基础异常
    "ModpackError",
    # 配置异常
    "ConfigError",
    "ConfigParseError",
    "ConfigValidationError",
    # 输入异常
    "ModListError",
    "PreconditionError",
    # API 异常
    "APIError",
    "APINotFoundError",
    "APIServerError",
    # 下载异常
    "DownloadError",
    "DownloadNetworkError",
    "DownloadFileError",
    # 打包异常
    "PackagerError",
    "MrpackError",
    "ArchiveError",
    "DuplicatePathError",
    # 服务端提取异常
    "ServerModsError",
]
