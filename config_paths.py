import json
import logging
import os

logger = logging.getLogger(__name__)

HOME = os.path.expanduser("~")
XDG_CONFIG_HOME = os.environ.get("XDG_CONFIG_HOME")
CONFIG_HOME = XDG_CONFIG_HOME if XDG_CONFIG_HOME else os.path.join(HOME, ".config")
CONFIG_DIR = os.path.join(CONFIG_HOME, "gridlens")
CONFIG_JSON = os.path.join(CONFIG_DIR, "config.json")

# default settings
PAGE_SIZE_DEFAULT = 10
PAGE_SIZE_OPTIONS_DEFAULT = [10, 25, 50, 100]
SEARCH_DEBOUNCE_MS_DEFAULT = 500
CATEGORY_MAX_DISTINCT_DEFAULT = 50


def _positive_int(value):
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value if value > 0 else None


def load_config():
    cfg = {
        "PAGE_SIZE": PAGE_SIZE_DEFAULT,
        "PAGE_SIZE_OPTIONS": list(PAGE_SIZE_OPTIONS_DEFAULT),
        "SEARCH_DEBOUNCE_MS": SEARCH_DEBOUNCE_MS_DEFAULT,
        "CATEGORY_MAX_DISTINCT": CATEGORY_MAX_DISTINCT_DEFAULT,
    }

    if not os.path.exists(CONFIG_JSON):
        return cfg

    try:
        with open(CONFIG_JSON, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", CONFIG_JSON, exc)
        return cfg

    if not isinstance(data, dict):
        return cfg

    table = data.get("table")
    if isinstance(table, dict):
        page_size = _positive_int(table.get("page_size"))
        if page_size is not None:
            cfg["PAGE_SIZE"] = page_size
        options = table.get("page_size_options")
        if isinstance(options, list):
            cleaned = [n for n in (_positive_int(o) for o in options) if n is not None]
            if cleaned:
                cfg["PAGE_SIZE_OPTIONS"] = cleaned

    search = data.get("search")
    if isinstance(search, dict):
        delay = search.get("debounce_ms")
        if isinstance(delay, (int, float)) and not isinstance(delay, bool) and delay >= 0:
            cfg["SEARCH_DEBOUNCE_MS"] = delay

    classifier = data.get("classifier")
    if isinstance(classifier, dict):
        max_distinct = _positive_int(classifier.get("category_max_distinct"))
        if max_distinct is not None:
            cfg["CATEGORY_MAX_DISTINCT"] = max_distinct

    return cfg
