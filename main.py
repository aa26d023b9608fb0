"""Simple CLI entry point for the product explorer.

Plain text is typed into the search box (debounced); commands start with '/'.
"""

import asyncio
import logging

from product_explorer import BrowsingSession, DummyJsonClient, JsonFileStore
from product_explorer.config import LOG_LEVEL, STORE_PATH

HELP = (
    "Commands: /search <text>, /clear, /category <slug|all>, /categories, "
    "/next, /prev, /fav <id>, /favs, /theme, /refresh, /help, /quit"
)


def render(session: BrowsingSession) -> None:
    view = session.fetcher.view
    page = session.pagination
    if view.error:
        print(view.error)
        return
    if not view.products:
        print("No products found.")
    for p in view.products:
        mark = "♥" if session.is_favorite(p.id) else "♡"
        print(f"  {mark} [{p.id}] {p.title} | {p.brand or '-'} | ⭐ {p.rating} | ₹ {p.price}")
    print(f"Showing {len(view.products)} of {view.total} results - page {page.page_number} / {page.page_count}")


async def handle(session: BrowsingSession, line: str) -> bool:
    """Run one input line; returns False when the user wants to leave."""
    if not line.startswith("/"):
        session.type_search(line)
        return True

    command, _, arg = line[1:].partition(" ")
    arg = arg.strip()
    if command in {"quit", "exit"}:
        return False
    if command == "search":
        session.set_search_text(arg)
    elif command == "clear":
        session.clear_search()
    elif command == "category":
        session.set_category(arg)
    elif command == "categories":
        await session.wait_idle()
        for c in session.fetcher.categories:
            print(f"  {c.slug}: {c.name}")
    elif command == "next":
        if not session.advance_page():
            print("Already on the last page.")
    elif command == "prev":
        if not session.retreat_page():
            print("Already on the first page.")
    elif command == "fav":
        try:
            product = session.find_product(int(arg))
        except ValueError:
            product = None
        if product is None:
            print(f"No product with id {arg!r} on this page.")
        else:
            state = "added to" if session.toggle_favorite(product) else "removed from"
            print(f"{product.title} {state} favorites.")
    elif command == "favs":
        print(f"Favorites: {len(session.favorites)}")
        for p in session.favorites:
            print(f"  [{p.id}] {p.title}")
    elif command == "theme":
        print("Dark" if session.toggle_theme() else "Light")
    elif command == "refresh":
        session.refresh()
    else:
        print(HELP)
    return True


async def main() -> None:
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    async with DummyJsonClient() as client:
        session = BrowsingSession(client, JsonFileStore(STORE_PATH))
        # Print every settled listing, whichever intent triggered it.
        session.fetcher.subscribe(lambda view: None if view.loading else render(session))
        print("Product explorer is ready. Type to search; /help lists commands.")
        session.start()

        while True:
            try:
                # Read off the loop so debounce timers and fetches keep running.
                user_input = (await asyncio.to_thread(input, "> ")).strip()
            except (KeyboardInterrupt, EOFError):
                print("\nExiting.")
                break

            if not user_input:
                continue
            if not await handle(session, user_input):
                print("Goodbye.")
                break

        session.close()
    print("Session ended.")


if __name__ == "__main__":
    asyncio.run(main())
