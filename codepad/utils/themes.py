# codepad/utils/themes.py
from typing import Optional

# users.preferred_theme_id 값
THEMES = {"light": 1, "dark": 2}
DEFAULT_THEME_ID = THEMES["light"]


def theme_id_for(name) -> Optional[int]:
    if not isinstance(name, str):
        return None
    return THEMES.get(name.strip().lower())


def theme_name_for(theme_id) -> str:
    for name, value in THEMES.items():
        if value == theme_id:
            return name
    return "light"
