from .gotrue_auth import GoTrueAuthAdapter

__all__ = ["GoTrueAuthAdapter"]
