from fastapi import HTTPException


class KimageError(Exception):
    pass


class ConfigError(KimageError):
    pass


class ConfigNotFound(ConfigError):
    pass


class ConfigMalformed(ConfigError):
    pass


class UploadError(KimageError):
    pass


class UploadIoError(UploadError):
    pass


class NetworkError(UploadError):
    pass


class ServerRejected(UploadError):
    def __init__(self, status_code: int, detail: str = ""):
        self.status_code = status_code
        self.detail = detail
        msg = f"server rejected upload: HTTP {status_code}"
        if detail:
            msg += f" ({detail})"
        super().__init__(msg)


class BadResponse(UploadError):
    pass


class ClipboardError(KimageError):
    pass


class ServerError(HTTPException):
    """HTTPException with a fixed status code per failure kind."""

    status = 500

    def __init__(self, detail: str):
        super().__init__(status_code=self.status, detail=detail)


class AuthFailed(ServerError):
    status = 401


class DecodeFailed(ServerError):
    status = 400


class StorageFailed(ServerError):
    status = 500


class PayloadTooLarge(ServerError):
    status = 413
