import secrets
import time
from typing import Optional


class TraceId:
    """
    X-Amzn-Trace-Id header value, as an ALB adds it to forwarded requests.

    Format: Root=1-<8 hex epoch>-<24 hex random>[;Parent=<id>][;Sampled=<0|1>]
    """

    def __init__(self, root: str, parent: Optional[str] = None, sampled: Optional[str] = None):
        self.root = root
        self.parent = parent
        self.sampled = sampled

    @classmethod
    def generate(cls) -> "TraceId":
        epoch_hex = f"{int(time.time()):08x}"
        return cls(root=f"1-{epoch_hex}-{secrets.token_hex(12)}")

    @classmethod
    def parse(cls, header: str) -> "TraceId":
        fields = {}
        for part in header.split(";"):
            key, sep, value = part.partition("=")
            if sep:
                fields[key.strip()] = value.strip()

        root = fields.get("Root", "")
        # A bare id without "Root=" is accepted as the root.
        if not root and "-" in header and "=" not in header:
            root = header.strip()
        if not root:
            raise ValueError(f"Invalid trace id header: {header!r}")

        return cls(root=root, parent=fields.get("Parent"), sampled=fields.get("Sampled"))

    def __str__(self) -> str:
        s = f"Root={self.root}"
        if self.parent:
            s += f";Parent={self.parent}"
        if self.sampled:
            s += f";Sampled={self.sampled}"
        return s
