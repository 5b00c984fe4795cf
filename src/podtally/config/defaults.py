"""Default configuration content for Podtally."""

import yaml

from podtally.config.schema import GlobalConfig

DEFAULT_GLOBAL_CONFIG = GlobalConfig()

# Shows tracked out of the box, with their numbering conventions.
DEFAULT_SHOWS: dict[str, dict] = {
    "watch-tm": {
        "name": "watch.tm",
        "weekday": "sunday",
        "kind": "rss",
        "locator": "https://anchor.fm/s/df67421c/podcast/rss",
        "strategy": "trailing_hash",
    },
    "a-noite-mata": {
        "name": "à noite mata",
        "weekday": "monday",
        "kind": "rss",
        "locator": "https://anchor.fm/s/db97b450/podcast/rss",
        "strategy": "generic",
        "link": "https://open.spotify.com/show/0PL5pILKjANwZ8UK9KtbqF",
    },
    "desnorte": {
        "name": "desnorte",
        "weekday": "monday",
        "kind": "rss",
        "locator": "https://feeds.soundcloud.com/users/soundcloud:users:795862234/sounds.rss",
        "strategy": "generic",
        "link": "https://open.spotify.com/show/1FuehRKqgMbl7d8KDUoSEa",
    },
    "ze-carioca": {
        "name": "Zé Carioca",
        "weekday": "monday",
        "kind": "rss",
        "locator": "https://anchor.fm/s/ea5b58fc/podcast/rss",
        "strategy": "leading_colon",
        "link": "https://podcasters.spotify.com/pod/show/ze-carioca",
    },
    "cubinho": {
        "name": "Cubinho",
        "weekday": "tuesday",
        "kind": "rss",
        "locator": "https://anchor.fm/s/8e11a8d0/podcast/rss",
        "strategy": "generic",
        "link": "https://open.spotify.com/show/2JLsy53hzl94Wn1GxqTzoD",
    },
    "prata-da-casa": {
        "name": "Prata da Casa",
        "weekday": "wednesday",
        "kind": "rss",
        "locator": "https://anchor.fm/s/1056d2710/podcast/rss",
        "strategy": "named_prefix",
    },
    "velho-amigo": {
        "name": "Velho amigo",
        "weekday": "wednesday",
        "kind": "rss",
        "locator": "https://anchor.fm/s/f05045d8/podcast/rss",
        "strategy": "decimal_bonus",
        "marker": "velho amigo #",
    },
    "contraluz": {
        "name": "Contraluz",
        "weekday": "saturday",
        "kind": "rss",
        "locator": "https://anchor.fm/s/fb86963c/podcast/rss",
        "strategy": "generic",
        "link": "https://open.spotify.com/show/1iZVOcN0N79eR83v6g0UC9",
    },
    "trocadilho": {
        "name": "Trocadilho",
        "weekday": "saturday",
        "kind": "rss",
        "locator": "https://anchor.fm/s/3d61c0b4/podcast/rss",
        "strategy": "generic",
        "link": "https://open.spotify.com/show/7L4zV1ZWetD7aEyfaMZB10",
    },
}


def get_default_config_content() -> str:
    """Return the YAML written to a fresh config.yaml."""
    header = "# Podtally configuration\n# See `podtally config show` for effective values.\n\n"
    data = DEFAULT_GLOBAL_CONFIG.model_dump(mode="json", exclude_none=True)
    return header + yaml.safe_dump(data, default_flow_style=False, sort_keys=False)


def get_default_shows_content() -> str:
    """Return the YAML written to a fresh shows.yaml."""
    header = (
        "# Tracked shows, keyed by identifier.\n"
        "# strategy: trailing_hash | leading_colon | named_prefix | decimal_bonus | generic\n\n"
    )
    return header + yaml.safe_dump(
        {"shows": DEFAULT_SHOWS},
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )
