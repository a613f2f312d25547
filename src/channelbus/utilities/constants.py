# ------------ Config ------------
DEFAULT_BUFFER_SIZE = 1          # values kept per channel unless configured
DEFAULT_REPLAY_POLICY = "last"   # "last" | "all"
DEFAULT_CHANNEL = "default"      # slot that pins the canonical config of a map
# --------------------------------


class _Missing:
    """Marker for "no value given"; ``None`` is a legitimate channel value."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()
