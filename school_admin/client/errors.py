from typing import Optional

TRANSPORT = "transport"
SERVER = "server"
PRECONDITION = "precondition"


class ClientError(Exception):
    """Failure of a client operation.

    ``kind`` is one of:
    - transport: the request never got an HTTP answer
    - server: the backend answered with an error status; ``message`` is its message
    - precondition: the call was rejected locally, nothing was sent
    """

    def __init__(self, message: str, status_code: Optional[int] = None, kind: str = SERVER) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.kind = kind

    def __repr__(self) -> str:
        return f"ClientError(kind={self.kind!r}, status_code={self.status_code!r}, message={self.message!r})"
