from pydantic import BaseModel, ConfigDict


class NavItem(BaseModel):
    path: str
    label: str

    model_config = ConfigDict(frozen=True)


class NavLink(NavItem):
    active: bool = False
