"""iTerm2 naming helpers

Tab and session names are written twice: into the USER variable (which is
what lookups read back) and into iTerm2's built-in title/name.
"""

import iterm2

from multiai import config


async def get_tab_name(tab: iterm2.Tab, default: str = "") -> str:
    """Tab name: user.name > default

    The built-in tab title follows the active session's name, so only the
    USER variable identifies a tab we created.
    """
    user_name = await tab.async_get_variable(config.USER_NAME_VAR)
    if user_name:
        return user_name
    return default


async def set_tab_name(tab: iterm2.Tab, name: str) -> None:
    """Set USER variable and built-in title."""
    await tab.async_set_variable(config.USER_NAME_VAR, name)
    await tab.async_set_title(name)


async def set_session_name(session: iterm2.Session, name: str) -> None:
    """Set USER variable and built-in session name."""
    await session.async_set_variable(config.USER_NAME_VAR, name)
    await session.async_set_name(name)
