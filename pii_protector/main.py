from pii_protector.api.main import app

__all__ = ["app"]
