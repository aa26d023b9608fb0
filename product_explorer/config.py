import os

from dotenv import load_dotenv

load_dotenv()

API_BASE = os.getenv("CATALOG_API_BASE", "https://dummyjson.com")
PAGE_SIZE = 12 # Products requested per listing page.
DEBOUNCE_SECONDS = 0.45 # Quiet period before a typed search is committed.

THEME_KEY = "pe-dark-mode"
FAVORITES_KEY = "pe-favorites"
STORE_PATH = os.path.expanduser(os.getenv("PRODUCT_EXPLORER_STORE", "~/.product_explorer.json"))

# When true, picking a category wipes the active search text.
CATEGORY_CLEARS_SEARCH = os.getenv("CATEGORY_CLEARS_SEARCH", "false").lower() in {"1", "true", "yes"}

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

ALL_CATEGORIES = "all"
FETCH_ERROR_MESSAGE = "Failed to fetch products. Try again."
