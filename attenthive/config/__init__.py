from attenthive.config.settings import settings

__all__ = ["settings"]
