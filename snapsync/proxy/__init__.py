from snapsync.proxy.app import build_proxy, create_app
from snapsync.proxy.service import RotatingProxy

__all__ = ["RotatingProxy", "build_proxy", "create_app"]
