"""User-Agent pool and construction."""
import random

DEFAULT_CHROME_VERSION = "131.0.0.0"

# Small fixed pool of desktop platforms; the Chrome version is filled in
# from the launched browser so the UA matches the real engine.
UA_TEMPLATES = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/{version} Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/{version} Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/{version} Safari/537.36",
)


def build_user_agent(chrome_version: str, template: str = "") -> str:
    """Build a User-Agent string for the given Chrome version.

    If *template* is empty, uses the macOS entry of :data:`UA_TEMPLATES`.
    """
    return (template or UA_TEMPLATES[1]).format(version=chrome_version or DEFAULT_CHROME_VERSION)


def pick_user_agent(chrome_version: str = "", rng: random.Random | None = None) -> str:
    """Return a User-Agent built from a random :data:`UA_TEMPLATES` entry."""
    return build_user_agent(chrome_version, (rng or random).choice(UA_TEMPLATES))


def platform_of(user_agent: str) -> str:
    """Map a UA string to the ``navigator.platform`` value it implies."""
    if "Windows" in user_agent:
        return "Win32"
    if "Macintosh" in user_agent:
        return "MacIntel"
    return "Linux x86_64"
