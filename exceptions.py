# exceptions.py
"""
错误分类

每个异常自带 HTTP 状态码和 JSON 响应体，路由层只需交给 exception handler。
"""


class TokenTransferError(Exception):
    """基础异常"""

    status_code = 500
    error = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.error)

    def to_payload(self) -> dict:
        return {"error": self.error, "message": str(self)}


class ConfigurationError(TokenTransferError):
    """配置缺失或不合法（私钥、环境变量）"""

    error = "Server configuration error"

    def to_payload(self) -> dict:
        return {"error": self.error, "details": str(self)}


class ValidationError(TokenTransferError):
    """客户端输入不合法"""

    status_code = 400

    def to_payload(self) -> dict:
        return {"error": str(self)}


class InsufficientBalanceError(ValidationError):
    """服务钱包 token 余额不足"""

    def __init__(self, available: float, requested):
        self.available = available
        self.requested = requested
        super().__init__("Insufficient balance")

    def to_payload(self) -> dict:
        return {
            "error": str(self),
            "available": self.available,
            "requested": self.requested,
        }


class RpcError(TokenTransferError):
    """节点只读调用失败"""

    error = "Failed to fetch token balance"

    def __init__(self, details: str, error: str | None = None):
        self.details = details
        if error:
            self.error = error
        super().__init__(details)

    def to_payload(self) -> dict:
        return {"error": self.error, "details": self.details}


class TransactionError(RpcError):
    """交易构造、签名、广播或上链失败"""

    error = "Failed to send token transaction"
