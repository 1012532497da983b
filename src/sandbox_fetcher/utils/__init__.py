# Utils package
from sandbox_fetcher.utils.common import safe_join

__all__ = ["safe_join"]
