from prompt_access.config.settings import settings, Settings

__all__ = ["settings", "Settings"]
