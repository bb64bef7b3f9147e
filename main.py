import enum

from rich import print
from rich.pretty import pprint

from flagbind import *


class Quality(enum.IntEnum):
    LOW = 0
    MEDIUM = 1
    HIGH = 2


class Window:
    width: int = Argument("width", "window width in pixels", default=1280)
    height: int = Argument("height", "window height in pixels", default=720)
    fullscreen: bool = Argument("fullscreen", "start in fullscreen mode", default=False)
    quality: Quality = Argument("quality", "render quality (0, 1 or 2)", default=Quality.MEDIUM)


@command("reset", "restore the factory settings")
def reset():
    for attribute in ("width", "height", "fullscreen", "quality"):
        vars(Window)[attribute].reset()


demo = Binder(__import__("__main__"), shell=True, colorful=True)


if __name__ == '__main__':
    print(demo)
    demo.init()
    pprint({attribute: getattr(Window, attribute) for attribute in ("width", "height", "fullscreen", "quality")})
