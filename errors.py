import enum


class ErrorKind(str, enum.Enum):
    NETWORK = "network"
    PARSE = "parse"
    SHAPE_MISMATCH = "shape-mismatch"


class FlavorError(Exception):
    def __init__(self, kind, detail=""):
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)
        self.kind = kind
        self.detail = detail

    def as_dict(self, message):
        return {"kind": self.kind.value, "message": message, "detail": self.detail}
