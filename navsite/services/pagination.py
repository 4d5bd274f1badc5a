from __future__ import annotations


class PageHistory:
    """Back/forward navigation over a forward-only cursor listing.

    Entry ``i`` is the token that was sent to load page ``i``; the first page
    is loaded without a token.
    """

    def __init__(self) -> None:
        self._tokens: list[str | None] = [None]
        self._index = 0
        self.next_token: str | None = None
        self.has_more = False

    @property
    def current(self) -> str | None:
        return self._tokens[self._index]

    @property
    def index(self) -> int:
        return self._index

    @property
    def can_go_back(self) -> bool:
        return self._index > 0

    @property
    def can_go_forward(self) -> bool:
        return self.has_more and bool(self.next_token)

    def record(self, *, has_more: bool, next_token: str | None) -> None:
        """Store the cursor state reported with the page that was just shown."""
        self.has_more = has_more
        self.next_token = next_token

    def advance(self) -> str | None:
        """Move to the next page and return the token to request it with."""
        if not self.can_go_forward:
            raise IndexError("no next page")
        del self._tokens[self._index + 1 :]
        self._tokens.append(self.next_token)
        self._index += 1
        return self.current

    def back(self) -> str | None:
        """Move to the previous page and return the token to re-issue."""
        if not self.can_go_back:
            raise IndexError("already on the first page")
        self._index -= 1
        return self.current

    def reset(self) -> None:
        self._tokens = [None]
        self._index = 0
        self.next_token = None
        self.has_more = False
