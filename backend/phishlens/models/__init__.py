from .user import User
from .scan import ScanEntry, ScanKind

__all__ = ["User", "ScanEntry", "ScanKind"]
