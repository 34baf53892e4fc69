from typing import List, Tuple

from essenza_web.app.schemas.navigation import NavItem, NavLink

HOME_PATH = "/"
RECIPES_PATH = "/recipes"

NAV_ITEMS: Tuple[NavItem, ...] = (
    NavItem(path=HOME_PATH, label="Home"),
    NavItem(path=RECIPES_PATH, label="Rezepte"),
    NavItem(path="/recipes/add", label="Rezepte hinzufügen"),
)


def is_active(path: str, current_path: str) -> bool:
    if path == HOME_PATH:
        return current_path == HOME_PATH
    if path == RECIPES_PATH:
        # Detail and creation pages live below /recipes but are not the listing
        return current_path in (RECIPES_PATH, RECIPES_PATH + "/")
    return current_path.startswith(path)


def build_navigation(current_path: str, items: Tuple[NavItem, ...] = NAV_ITEMS) -> List[NavLink]:
    return [NavLink(path=item.path, label=item.label, active=is_active(item.path, current_path)) for item in items]
